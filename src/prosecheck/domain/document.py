"""Document model: immutable syntax tree, source text and offset/position map."""

import bisect
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Optional


class NodeType:
    """Node type tags shared by the built-in format plugins."""

    DOCUMENT = "Document"
    PARAGRAPH = "Paragraph"
    HEADER = "Header"
    LIST = "List"
    LIST_ITEM = "ListItem"
    BLOCK_QUOTE = "BlockQuote"
    CODE_BLOCK = "CodeBlock"
    HORIZONTAL_RULE = "HorizontalRule"
    BLANK = "Blank"
    LINK = "Link"
    IMAGE = "Image"
    # Leaves
    STR = "Str"
    CODE = "Code"
    CODE_TEXT = "CodeText"
    SYNTAX = "Syntax"
    WHITESPACE = "WhiteSpace"
    BREAK = "Break"


@dataclass(frozen=True)
class TextRange:
    """Half-open offset span [start, end) into a document's source text."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid range [{self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "TextRange") -> bool:
        """True if both spans share at least one offset, or start at the same offset."""
        if self.start == other.start:
            return True
        return self.start < other.end and other.start < self.end

    def is_within(self, length: int) -> bool:
        return self.end <= length


@dataclass(frozen=True)
class Position:
    """Human-facing location. Both line and column are 1-based."""

    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceLocation:
    start: Position
    end: Position


_LINE_RE = re.compile(r"[^\r\n]*(?:\r\n|\r|\n)|[^\r\n]+")


@dataclass(frozen=True)
class Line:
    """One physical line: content offsets exclude the line terminator."""

    number: int
    start: int
    content: str
    eol: str

    @property
    def content_end(self) -> int:
        return self.start + len(self.content)

    @property
    def end(self) -> int:
        return self.content_end + len(self.eol)


class RangeMap:
    """Offset <-> (line, column) conversion for one text."""

    def __init__(self, text: str) -> None:
        self._length = len(text)
        self._lines: tuple[Line, ...] = RangeMap.split_lines(text)
        self._starts: list[int] = [line.start for line in self._lines] or [0]

    @staticmethod
    def split_lines(text: str) -> tuple[Line, ...]:
        """Split text into lines, keeping \\n, \\r\\n and \\r terminators apart from content."""
        lines: list[Line] = []
        for number, match in enumerate(_LINE_RE.finditer(text), start=1):
            raw = match.group(0)
            content = raw.rstrip("\r\n")
            lines.append(Line(number, match.start(), content, raw[len(content):]))
        return tuple(lines)

    @property
    def lines(self) -> tuple[Line, ...]:
        return self._lines

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def position_of(self, offset: int) -> Position:
        if offset < 0 or offset > self._length:
            raise ValueError(f"Offset {offset} outside text of length {self._length}")
        index = bisect.bisect_right(self._starts, offset) - 1
        return Position(line=index + 1, column=offset - self._starts[index] + 1)

    def offset_of(self, position: Position) -> int:
        if position.line < 1 or position.line > len(self._starts):
            raise ValueError(f"Line {position.line} outside text")
        offset = self._starts[position.line - 1] + position.column - 1
        if offset < 0 or offset > self._length:
            raise ValueError(f"Position {position} outside text")
        return offset

    def location_of(self, text_range: TextRange) -> SourceLocation:
        return SourceLocation(
            start=self.position_of(text_range.start),
            end=self.position_of(text_range.end),
        )


@dataclass(frozen=True)
class Node:
    """
    Immutable syntax tree node.

    Leaves carry the exact source slice in ``raw``; containers carry children
    only. Leaves tile the source text in document order, which is what makes
    serialization the exact inverse of parsing.
    """

    type: str
    range: TextRange
    children: tuple["Node", ...] = ()
    raw: str = ""
    attrs: Mapping[str, object] = field(default_factory=dict)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def walk(self, parent: Optional["Node"] = None) -> Iterator[tuple["Node", Optional["Node"]]]:
        """Depth-first, pre-order traversal yielding (node, parent) in document order."""
        stack: list[tuple[Node, Optional[Node]]] = [(self, parent)]
        while stack:
            node, node_parent = stack.pop()
            yield node, node_parent
            stack.extend((child, node) for child in reversed(node.children))

    def nodes_of_type(self, *types: str) -> Iterator["Node"]:
        for node, _ in self.walk():
            if node.type in types:
                yield node

    def leaves(self) -> Iterator["Node"]:
        for node, _ in self.walk():
            if node.is_leaf:
                yield node

    def text(self) -> str:
        """Concatenated raw text of every leaf below this node."""
        return "".join(leaf.raw for leaf in self.leaves())


@dataclass(frozen=True)
class Document:
    """A parsed document version. Replaced, never mutated, after a fix iteration."""

    id: str
    source_text: str
    tree: Node
    kind: str
    range_map: RangeMap = field(compare=False, repr=False)

    def walk(self) -> Iterator[tuple[Node, Optional[Node]]]:
        return self.tree.walk()

    def nodes_of_type(self, *types: str) -> Iterator[Node]:
        return self.tree.nodes_of_type(*types)

    def slice(self, text_range: TextRange) -> str:
        return self.source_text[text_range.start:text_range.end]

    def contains(self, text_range: TextRange) -> bool:
        return text_range.is_within(len(self.source_text))
