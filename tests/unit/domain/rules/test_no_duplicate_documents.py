"""Unit tests for NoDuplicateDocumentsRule (session rule)."""

import unittest

from prosecheck.domain.document import TextRange
from prosecheck.domain.entities import Severity
from prosecheck.domain.errors import InvalidOptionsError
from prosecheck.domain.rules import RuleContext
from prosecheck.domain.rules.no_duplicate_documents import NoDuplicateDocumentsRule
from tests.rule_test_utils import parse


class TestNoDuplicateDocumentsRule(unittest.TestCase):
    def setUp(self) -> None:
        self.rule = NoDuplicateDocumentsRule()
        self.documents = [
            parse("Same text", document_id="a.md"),
            parse("Same text\n", document_id="b.md"),
            parse("Other", document_id="c.md"),
        ]

    def _context(self, options: object = None) -> RuleContext:
        return RuleContext(
            rule_id=self.rule.rule_id,
            options=options,
            settings=self.rule.validate_options(options),
            severity=Severity.WARNING,
        )

    def test_later_copies_are_reported_against_the_first(self) -> None:
        found = self.rule.evaluate_batch(self.documents, self._context())
        self.assertEqual(list(found), ["b.md"])
        message = found["b.md"][0]
        self.assertEqual(message.text, "Content duplicates 'a.md'.")
        self.assertEqual(message.range, TextRange(0, 10))

    def test_min_length(self) -> None:
        found = self.rule.evaluate_batch(self.documents, self._context({"min_length": 100}))
        self.assertEqual(dict(found), {})

    def test_rejects_negative_min_length(self) -> None:
        with self.assertRaises(InvalidOptionsError):
            self.rule.validate_options({"min_length": -1})

    def test_rejects_unknown_option(self) -> None:
        with self.assertRaises(InvalidOptionsError):
            self.rule.validate_options({"min-length": 3})
