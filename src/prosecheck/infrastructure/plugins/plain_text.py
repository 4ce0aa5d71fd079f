"""Plain text format plugin: paragraphs of Str lines separated by blank lines."""

from prosecheck.domain.document import Line, Node, NodeType, RangeMap
from prosecheck.domain.errors import ParseError
from prosecheck.infrastructure.plugins.base import LeafTextPlugin, TreeBuilder

_NUL = chr(0)


class PlainTextPlugin(LeafTextPlugin):
    plugin_id: str = "text"
    kinds: tuple[str, ...] = ("text", "txt")
    extensions: tuple[str, ...] = (".txt", ".text")

    def parse(self, text: str) -> Node:
        nul_at = text.find(_NUL)
        if nul_at != -1:
            raise ParseError("Binary content (NUL byte) in text document", RangeMap(text).position_of(nul_at))

        blocks: list[Node] = []
        paragraph: list[Line] = []
        for line in RangeMap.split_lines(text):
            if line.content.strip():
                paragraph.append(line)
                continue
            if paragraph:
                blocks.append(self._paragraph(paragraph))
                paragraph = []
            blocks.append(self.blank(line))
        if paragraph:
            blocks.append(self._paragraph(paragraph))
        return TreeBuilder.container(NodeType.DOCUMENT, blocks, offset=0)

    def _paragraph(self, lines: list[Line]) -> Node:
        children: list[Node] = []
        for line in lines:
            indent, rest, rest_offset = TreeBuilder.split_indent(line.content, line.start)
            children.extend(indent)
            children.append(TreeBuilder.leaf(NodeType.STR, rest, rest_offset))
            children.extend(TreeBuilder.break_leaf(line))
        return TreeBuilder.container(NodeType.PARAGRAPH, children)
