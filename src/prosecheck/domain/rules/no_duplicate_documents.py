"""no-duplicate-documents: session rule flagging documents whose content repeats an earlier one."""

from collections.abc import Mapping, Sequence
from typing import Any

from prosecheck.domain.document import Document, TextRange
from prosecheck.domain.entities import Message, Severity
from prosecheck.domain.errors import InvalidOptionsError
from prosecheck.domain.rules import OptionChecks, RuleContext, SessionRule


class NoDuplicateDocumentsRule(SessionRule):
    """
    Stateless across sessions: the first-seen table lives only for one
    evaluate_batch call. The earliest document in input order is the original;
    every later copy gets one message.
    """

    rule_id: str = "no-duplicate-documents"
    description: str = "Disallow documents with identical content in one batch."
    default_severity: Severity = Severity.WARNING

    def validate_options(self, options: Any) -> int:
        """Options: None/True, or {"min_length": int >= 0}. Returns min_length."""
        if options is None or options is True:
            return 1
        options = OptionChecks.table(self.rule_id, options, {"min_length"})
        min_length = options.get("min_length", 1)
        if isinstance(min_length, bool) or not isinstance(min_length, int) or min_length < 0:
            raise InvalidOptionsError("'min_length' must be a non-negative integer", self.rule_id)
        return min_length

    def evaluate_batch(
        self, documents: Sequence[Document], context: RuleContext
    ) -> Mapping[str, Sequence[Message]]:
        min_length = int(context.settings if context.settings is not None else 1)
        first_seen: dict[str, str] = {}
        found: dict[str, list[Message]] = {}
        for document in documents:
            normalized = document.source_text.strip()
            if not normalized or len(normalized) < min_length:
                continue
            original = first_seen.setdefault(normalized, document.id)
            if original == document.id:
                continue
            found.setdefault(document.id, []).append(
                context.report(
                    TextRange(0, len(document.source_text)),
                    f"Content duplicates '{original}'.",
                )
            )
        return found
