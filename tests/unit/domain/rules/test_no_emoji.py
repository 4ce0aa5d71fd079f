"""Unit tests for NoEmojiRule."""

import unittest

from prosecheck.domain.document import TextRange
from prosecheck.domain.entities import Severity
from prosecheck.domain.errors import InvalidOptionsError
from prosecheck.domain.rules.no_emoji import NoEmojiRule
from tests.rule_test_utils import evaluate_rule

ZWJ = chr(0x200D)
WOMAN_TECHNOLOGIST = chr(0x1F469) + ZWJ + chr(0x1F4BB)


class TestNoEmojiRule(unittest.TestCase):
    def setUp(self) -> None:
        self.rule = NoEmojiRule()

    def test_reports_emoji_with_delete_fix(self) -> None:
        messages = evaluate_rule(self.rule, "Hello 🎉 world")
        self.assertEqual(len(messages), 1)
        message = messages[0]
        self.assertEqual(message.rule_id, "no-emoji")
        self.assertIs(message.severity, Severity.WARNING)
        self.assertEqual(message.range, TextRange(6, 7))
        self.assertEqual(message.fix.range, TextRange(6, 7))
        self.assertEqual(message.fix.replacement, "")

    def test_zwj_sequence_is_one_emoji(self) -> None:
        text = f"Dev {WOMAN_TECHNOLOGIST} here"
        messages = evaluate_rule(self.rule, text)
        self.assertEqual(len(messages), 1)
        self.assertEqual(messages[0].range, TextRange(4, 4 + len(WOMAN_TECHNOLOGIST)))

    def test_code_is_not_prose(self) -> None:
        messages = evaluate_rule(self.rule, "Run `🎉` then celebrate 🚀\n\n```\n🎉\n```\n")
        self.assertEqual([m.text for m in messages], ["Found emoji '🚀'."])

    def test_allow_list(self) -> None:
        messages = evaluate_rule(self.rule, "Party 🎉 and 🚀", options={"allow": ["🎉"]})
        self.assertEqual([m.text for m in messages], ["Found emoji '🚀'."])

    def test_plain_text_documents(self) -> None:
        messages = evaluate_rule(self.rule, "line one\nline 🎉 two\n", kind="text")
        self.assertEqual(messages[0].range, TextRange(14, 15))

    def test_rejects_bad_options(self) -> None:
        with self.assertRaises(InvalidOptionsError):
            self.rule.validate_options({"allow": "🎉"})
        with self.assertRaises(InvalidOptionsError):
            self.rule.validate_options({"bogus": True})
        with self.assertRaises(InvalidOptionsError):
            self.rule.validate_options(["🎉"])
