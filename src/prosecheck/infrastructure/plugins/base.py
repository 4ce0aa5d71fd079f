"""Shared plumbing for the built-in format plugins."""

from collections.abc import Mapping, Sequence
from typing import Optional

from prosecheck.domain.document import Line, Node, NodeType, TextRange
from prosecheck.domain.plugins import FormatPlugin


class TreeBuilder:
    """Leaf and container factories. Containers span their first to last child."""

    @staticmethod
    def leaf(node_type: str, raw: str, offset: int) -> Node:
        return Node(type=node_type, range=TextRange(offset, offset + len(raw)), raw=raw)

    @staticmethod
    def container(
        node_type: str,
        children: Sequence[Node],
        attrs: Optional[Mapping[str, object]] = None,
        offset: int = 0,
    ) -> Node:
        if children:
            text_range = TextRange(children[0].range.start, children[-1].range.end)
        else:
            text_range = TextRange(offset, offset)
        return Node(type=node_type, range=text_range, children=tuple(children), attrs=dict(attrs or {}))

    @staticmethod
    def break_leaf(line: Line) -> list[Node]:
        if not line.eol:
            return []
        return [TreeBuilder.leaf(NodeType.BREAK, line.eol, line.content_end)]

    @staticmethod
    def split_indent(text: str, offset: int) -> tuple[list[Node], str, int]:
        """Peel leading whitespace into a WhiteSpace leaf; return (leaves, rest, rest_offset)."""
        rest = text.lstrip(" \t")
        indent = text[: len(text) - len(rest)]
        leaves = [TreeBuilder.leaf(NodeType.WHITESPACE, indent, offset)] if indent else []
        return leaves, rest, offset + len(indent)


class LeafTextPlugin(FormatPlugin):
    """Kind matching and leaf-concatenation serialization."""

    plugin_id: str = ""
    kinds: tuple[str, ...] = ()
    extensions: tuple[str, ...] = ()

    def match(self, kind: str) -> bool:
        return kind.lower() in self.kinds

    def serialize(self, tree: Node) -> str:
        return tree.text()

    def blank(self, line: Line) -> Node:
        children: list[Node] = []
        if line.content:
            children.append(TreeBuilder.leaf(NodeType.WHITESPACE, line.content, line.start))
        children.extend(TreeBuilder.break_leaf(line))
        return TreeBuilder.container(NodeType.BLANK, children, offset=line.start)
