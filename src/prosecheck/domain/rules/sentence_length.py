"""sentence-length: sentences longer than a configured number of characters."""

import re
from collections.abc import Iterable
from typing import Any

from prosecheck.domain.document import Document, Node, NodeType, TextRange
from prosecheck.domain.entities import Message, Severity
from prosecheck.domain.errors import InvalidOptionsError
from prosecheck.domain.rules import OptionChecks, RuleContext, RuleUnit

DEFAULT_MAX_LENGTH = 100

_SENTENCE_END_RE = re.compile(r"[.!?。！？]+(?=\s|$)")
_BLOCK_TYPES = (NodeType.PARAGRAPH, NodeType.HEADER, NodeType.LIST_ITEM, NodeType.BLOCK_QUOTE)


class SentenceLengthRule(RuleUnit):
    """
    Counts only Str characters, so inline code and link targets do not inflate
    a sentence. A sentence may span several Str leaves and lines of one block;
    the gap between two leaves counts as a single space.
    """

    rule_id: str = "sentence-length"
    description: str = "Limit the number of characters in a sentence."
    default_severity: Severity = Severity.WARNING
    fixable: bool = False

    def validate_options(self, options: Any) -> int:
        """Options: None/True, or {"max": positive int}. Returns the maximum."""
        if options is None or options is True:
            return DEFAULT_MAX_LENGTH
        options = OptionChecks.table(self.rule_id, options, {"max"})
        maximum = options.get("max", DEFAULT_MAX_LENGTH)
        if isinstance(maximum, bool) or not isinstance(maximum, int) or maximum < 1:
            raise InvalidOptionsError("'max' must be a positive integer", self.rule_id)
        return maximum

    def evaluate(self, document: Document, context: RuleContext) -> Iterable[Message]:
        maximum = int(context.settings or DEFAULT_MAX_LENGTH)
        messages: list[Message] = []
        for block in document.nodes_of_type(*_BLOCK_TYPES):
            for text_range, length in self._sentences(block):
                if length > maximum:
                    messages.append(
                        context.report(
                            text_range,
                            f"Sentence is {length} characters long (maximum {maximum}).",
                        )
                    )
        return messages

    def _sentences(self, block: Node) -> list[tuple[TextRange, int]]:
        """Source range and Str character count of each sentence in a block."""
        prose: list[str] = []
        offsets: list[int] = []
        previous_end: int | None = None
        for leaf in block.nodes_of_type(NodeType.STR):
            if previous_end is not None and leaf.range.start != previous_end:
                prose.append(" ")
                offsets.append(previous_end)
            prose.append(leaf.raw)
            offsets.extend(range(leaf.range.start, leaf.range.end))
            previous_end = leaf.range.end
        text = "".join(prose)

        sentences: list[tuple[TextRange, int]] = []
        cursor = 0
        boundaries = [m.end() for m in _SENTENCE_END_RE.finditer(text)] + [len(text)]
        for boundary in boundaries:
            segment = text[cursor:boundary]
            stripped = segment.strip()
            if stripped:
                first = cursor + len(segment) - len(segment.lstrip())
                last = first + len(stripped) - 1
                sentences.append((TextRange(offsets[first], offsets[last] + 1), len(stripped)))
            cursor = boundary
        return sentences
