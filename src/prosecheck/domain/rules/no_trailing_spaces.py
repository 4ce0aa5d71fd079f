"""no-trailing-spaces: whitespace at the end of a line."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from prosecheck.domain.document import Document, Line, NodeType, TextRange
from prosecheck.domain.entities import Message, Patch, Severity
from prosecheck.domain.errors import InvalidOptionsError
from prosecheck.domain.rules import OptionChecks, RuleContext, RuleUnit

_TEXT_BLOCKS = (NodeType.PARAGRAPH, NodeType.LIST_ITEM, NodeType.BLOCK_QUOTE)


@dataclass(frozen=True)
class TrailingSpacesSettings:
    skip_blank_lines: bool = False
    keep_hard_breaks: bool = False


class NoTrailingSpacesRule(RuleUnit):
    """
    Line-based: works on the range map rather than the tree. Lines inside
    fenced code blocks are never reported. With ``keep_hard_breaks``, two or
    more spaces ending a line that is followed by more text of the same block
    are left alone (a markdown hard break).
    """

    rule_id: str = "no-trailing-spaces"
    description: str = "Disallow spaces and tabs at the end of lines."
    default_severity: Severity = Severity.WARNING
    fixable: bool = True

    def validate_options(self, options: Any) -> TrailingSpacesSettings:
        """Options: None/True, or {"skip_blank_lines": bool, "keep_hard_breaks": bool}."""
        if options is None or options is True:
            return TrailingSpacesSettings()
        options = OptionChecks.table(self.rule_id, options, {"skip_blank_lines", "keep_hard_breaks"})
        for key in ("skip_blank_lines", "keep_hard_breaks"):
            if not isinstance(options.get(key, False), bool):
                raise InvalidOptionsError(f"'{key}' must be a boolean", self.rule_id)
        return TrailingSpacesSettings(
            skip_blank_lines=options.get("skip_blank_lines", False),
            keep_hard_breaks=options.get("keep_hard_breaks", False),
        )

    def evaluate(self, document: Document, context: RuleContext) -> Iterable[Message]:
        settings: TrailingSpacesSettings = context.settings or TrailingSpacesSettings()
        code = [node.range for node in document.nodes_of_type(NodeType.CODE_BLOCK)]
        blocks: list[TextRange] = []
        if settings.keep_hard_breaks:
            blocks = [node.range for node in document.nodes_of_type(*_TEXT_BLOCKS)]
        messages: list[Message] = []
        for line in document.range_map.lines:
            stripped = line.content.rstrip(" \t")
            if len(stripped) == len(line.content):
                continue
            if settings.skip_blank_lines and not stripped:
                continue
            if any(r.start <= line.start < r.end for r in code):
                continue
            text_range = TextRange(line.start + len(stripped), line.content_end)
            if stripped and self._is_hard_break(document, line, text_range, blocks):
                continue
            messages.append(
                context.report(
                    text_range,
                    "Trailing whitespace.",
                    fix=Patch.delete(text_range),
                )
            )
        return messages

    @staticmethod
    def _is_hard_break(document: Document, line: Line, trailing: TextRange, blocks: list[TextRange]) -> bool:
        if len(trailing) < 2 or document.slice(trailing).strip(" "):
            return False
        for block in blocks:
            if block.start <= line.start and line.content_end < block.end:
                if document.slice(TextRange(line.content_end, block.end)).strip():
                    return True
        return False
