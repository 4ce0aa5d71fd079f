"""no-todo: leftover TODO/FIXME markers in prose."""

import re
from collections.abc import Iterable
from typing import Any

from prosecheck.domain.document import Document, NodeType, TextRange
from prosecheck.domain.entities import Message, Severity
from prosecheck.domain.errors import InvalidOptionsError
from prosecheck.domain.rules import OptionChecks, RuleContext, RuleUnit

DEFAULT_TERMS = ("TODO", "FIXME")


class NoTodoRule(RuleUnit):
    rule_id: str = "no-todo"
    description: str = "Disallow TODO/FIXME markers."
    default_severity: Severity = Severity.ERROR
    fixable: bool = False

    def validate_options(self, options: Any) -> "re.Pattern[str]":
        """Options: None/True, or {"terms": [str, ...], "ignore_case": bool}. Returns the compiled pattern."""
        terms: list[str] = list(DEFAULT_TERMS)
        ignore_case = False
        if options is not None and options is not True:
            options = OptionChecks.table(self.rule_id, options, {"terms", "ignore_case"})
            terms = options.get("terms", terms)
            if not isinstance(terms, list) or not terms or not all(isinstance(t, str) and t for t in terms):
                raise InvalidOptionsError("'terms' must be a non-empty list of strings", self.rule_id)
            ignore_case = options.get("ignore_case", False)
            if not isinstance(ignore_case, bool):
                raise InvalidOptionsError("'ignore_case' must be a boolean", self.rule_id)
        alternatives = "|".join(re.escape(t) for t in sorted(terms, key=len, reverse=True))
        return re.compile(rf"\b(?:{alternatives})\b:?", re.IGNORECASE if ignore_case else 0)

    def evaluate(self, document: Document, context: RuleContext) -> Iterable[Message]:
        pattern: re.Pattern[str] = context.settings
        messages: list[Message] = []
        for node in document.nodes_of_type(NodeType.STR):
            for match in pattern.finditer(node.raw):
                marker = match.group(0).rstrip(":")
                messages.append(
                    context.report(
                        TextRange(node.range.start + match.start(), node.range.start + match.end()),
                        f"Found '{marker}' marker.",
                    )
                )
        return messages
