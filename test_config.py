"""Test config loading."""

import tempfile
from pathlib import Path
from unittest import TestCase

from fanout.config import load_config
from fanout.errors import ConfigError


class LoadConfigTest(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.dir = Path(self._tmp.name)

    def write(self, text):
        path = self.dir / "config.toml"
        path.write_text(text)
        return path

    def test_packaged_defaults(self):
        cfg = load_config(env={})
        self.assertEqual(cfg["timeout"]["transfer"], 30)
        self.assertEqual(cfg["timeout"]["balance"], 10)
        self.assertEqual(cfg["timeout"]["global"], 60)
        self.assertEqual(cfg["funding"]["minimum_balance"], 0.1)
        self.assertEqual(cfg["output"]["path"], "wallets.json")

    def test_partial_file_falls_back_to_defaults(self):
        cfg = load_config(self.write("[timeout]\nglobal = 120\n"), env={})
        self.assertEqual(cfg["timeout"]["global"], 120)
        self.assertEqual(cfg["timeout"]["transfer"], 30)
        self.assertIn("{address}", cfg["network"]["explorer_url"])

    def test_env_overrides(self):
        cfg = load_config(env={"RPC_URL": "http://localhost:5005", "FANOUT_OUTPUT": "out.json"})
        self.assertEqual(cfg["network"]["rpc_url"], "http://localhost:5005")
        self.assertEqual(cfg["output"]["path"], "out.json")

    def test_invalid(self):
        for text in ("[timeout]\ntransfer = 0\n", "[timeout]\nbalance = \"soon\"\n", "not toml [", "[network]\nexplorer_url = \"https://x\"\n"):
            with self.subTest(text=text):
                with self.assertRaises(ConfigError):
                    load_config(self.write(text), env={})

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            load_config(self.dir / "nope.toml", env={})
