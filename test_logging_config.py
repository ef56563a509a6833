"""Test the logging configuration."""

from unittest import TestCase

from fanout.logging_config import logging_config


class LoggingConfigTest(TestCase):
    def test_console_only_by_default(self):
        cfg = logging_config()
        self.assertEqual(list(cfg["handlers"]), ["console"])
        self.assertEqual(cfg["root"]["handlers"], ["console"])
        self.assertEqual(cfg["loggers"]["fanout"]["level"], "INFO")

    def test_file_handler_when_asked(self):
        cfg = logging_config("debug", "run.log")
        self.assertEqual(cfg["handlers"]["file"]["filename"], "run.log")
        self.assertEqual(cfg["handlers"]["file"]["mode"], "a")
        self.assertEqual(cfg["root"]["handlers"], ["console", "file"])
        self.assertEqual(cfg["loggers"]["fanout"]["level"], "DEBUG")

    def test_libraries_quieted_without_own_handlers(self):
        cfg = logging_config()
        for name in ("httpx", "xrpl"):
            with self.subTest(logger=name):
                self.assertEqual(cfg["loggers"][name], {"level": "WARNING"})
