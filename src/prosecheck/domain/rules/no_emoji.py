"""no-emoji: flag emoji in prose and offer to delete them."""

import re
from collections.abc import Iterable
from typing import Any

from prosecheck.domain.document import Document, NodeType, TextRange
from prosecheck.domain.entities import Message, Patch, Severity
from prosecheck.domain.errors import InvalidOptionsError
from prosecheck.domain.rules import OptionChecks, RuleContext, RuleUnit

_BASE = "[\U0001F000-\U0001FAFF\u2300-\u23FF\u2600-\u27BF\u2B00-\u2BFF]"
_MODIFIERS = "[\uFE0F\U0001F3FB-\U0001F3FF]*"
# Base codepoint, presentation/skin-tone modifiers, then any ZWJ-joined parts.
EMOJI_RE = re.compile(f"{_BASE}{_MODIFIERS}(?:\u200D{_BASE}{_MODIFIERS})*")


class NoEmojiRule(RuleUnit):
    """Reports every emoji sequence found in Str nodes; code is left alone."""

    rule_id: str = "no-emoji"
    description: str = "Disallow emoji in prose."
    default_severity: Severity = Severity.WARNING
    fixable: bool = True

    def validate_options(self, options: Any) -> frozenset[str]:
        """Options: None/True, or {"allow": [emoji, ...]}. Returns the allow set."""
        if options is None or options is True:
            return frozenset()
        options = OptionChecks.table(self.rule_id, options, {"allow"})
        allow = options.get("allow", [])
        if not isinstance(allow, list) or not all(isinstance(a, str) for a in allow):
            raise InvalidOptionsError("'allow' must be a list of strings", self.rule_id)
        return frozenset(allow)

    def evaluate(self, document: Document, context: RuleContext) -> Iterable[Message]:
        allowed: frozenset[str] = context.settings or frozenset()
        messages: list[Message] = []
        for node in document.nodes_of_type(NodeType.STR):
            for match in EMOJI_RE.finditer(node.raw):
                emoji = match.group(0)
                if emoji in allowed:
                    continue
                text_range = TextRange(node.range.start + match.start(), node.range.start + match.end())
                messages.append(
                    context.report(
                        text_range,
                        f"Found emoji '{emoji}'.",
                        fix=Patch.delete(text_range),
                    )
                )
        return messages
