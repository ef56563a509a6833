"""Test operator input handling."""

from unittest import TestCase

from fanout.errors import ConfigError
from fanout.prompts import PromptOperator, is_yes, parse_request


class ParseRequestTest(TestCase):
    def test_valid(self):
        req = parse_request("sSecret", "3", "0.4")
        self.assertEqual((req.count, req.amount), (3, 0.4))
        self.assertNotIn("sSecret", repr(req))

    def test_rejects(self):
        cases = [
            ("s", "abc", "1"),
            ("s", "0", "1"),
            ("s", "-1", "1"),
            ("s", "2.5", "1"),
            ("s", "2", "zero"),
            ("s", "2", "0"),
            ("s", "2", "-0.5"),
            ("s", "2", "nan"),
            ("s", "2", "0.0000001"),
            ("", "2", "1"),
        ]
        for secret, count, amount in cases:
            with self.subTest(count=count, amount=amount):
                with self.assertRaises(ConfigError):
                    parse_request(secret, count, amount)

    def test_secret_never_in_message(self):
        with self.assertRaises(ConfigError) as cm:
            parse_request("sTopSecret", "x", "1")
        self.assertNotIn("sTopSecret", str(cm.exception))
        self.assertIn("count", str(cm.exception))


class PromptOperatorTest(TestCase):
    def test_prompts_only_for_missing_values(self):
        asked = []
        answers = iter(["7", "y"])

        def ask(prompt):
            asked.append(prompt)
            return next(answers)

        op = PromptOperator(secret="sSecret", amount="1.5", open_explorer=False, ask=ask)
        req = op.distribution_request()
        self.assertEqual((req.count, req.amount), (7, 1.5))
        self.assertTrue(op.wants_verification())
        self.assertFalse(op.wants_explorer())
        self.assertEqual(len(asked), 2)

    def test_yes_answers(self):
        for answer in ("y", "Y", "yes", " YES "):
            self.assertTrue(is_yes(answer))
        for answer in ("", "n", "no", "sure", None):
            self.assertFalse(is_yes(answer))
