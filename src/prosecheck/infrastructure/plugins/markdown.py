"""
Markdown format plugin.

A line-oriented block parser (headers, fenced code, lists, block quotes,
horizontal rules, paragraphs) with inline code spans, links and images.
Markup characters become Syntax leaves and prose becomes Str leaves, so rules
that inspect Str never see code or link targets. It is not a CommonMark
implementation: setext headers, indented code blocks, tables and HTML are read
as paragraphs.
"""

import re
from collections.abc import Sequence

from prosecheck.domain.document import Line, Node, NodeType, Position, RangeMap
from prosecheck.domain.errors import ParseError
from prosecheck.infrastructure.plugins.base import LeafTextPlugin, TreeBuilder

_FENCE_RE = re.compile(r"^( {0,3})(`{3,}|~{3,})(.*)$")
_HEADER_RE = re.compile(r"^( {0,3})(#{1,6})(?=[ \t]|$)([ \t]*)(.*)$")
_HR_RE = re.compile(r"^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$")
_QUOTE_RE = re.compile(r"^( {0,3}>[ \t]?)(.*)$")
_LIST_RE = re.compile(r"^([ \t]*)([-*+]|\d{1,9}[.)])([ \t]+|$)(.*)$")
_INLINE_RE = re.compile(
    r"(?P<code>(?P<ticks>`+).+?(?P=ticks))"
    r'|(?P<image>!\[(?P<alt>[^\]]*)\]\((?P<src>[^)\s]*)(?:[ \t]+"[^"]*")?\))'
    r'|(?P<link>\[(?P<label>[^\]]+)\]\((?P<href>[^)\s]*)(?:[ \t]+"[^"]*")?\))'
)


class MarkdownPlugin(LeafTextPlugin):
    plugin_id: str = "markdown"
    kinds: tuple[str, ...] = ("markdown", "md")
    extensions: tuple[str, ...] = (".md", ".markdown")

    def __init__(self, strict: bool = True) -> None:
        # strict: an unterminated code fence is a ParseError instead of running to EOF
        self.strict = strict

    def parse(self, text: str) -> Node:
        lines = RangeMap.split_lines(text)
        blocks: list[Node] = []
        i = 0
        while i < len(lines):
            line = lines[i]
            content = line.content
            fence = _FENCE_RE.match(content)
            header = _HEADER_RE.match(content)
            if not content.strip():
                blocks.append(self.blank(line))
                i += 1
            elif fence:
                node, i = self._code_block(lines, i, fence)
                blocks.append(node)
            elif header:
                blocks.append(self._header(line, header))
                i += 1
            elif _HR_RE.match(content):
                children = [TreeBuilder.leaf(NodeType.SYNTAX, content, line.start)]
                children.extend(TreeBuilder.break_leaf(line))
                blocks.append(TreeBuilder.container(NodeType.HORIZONTAL_RULE, children))
                i += 1
            elif _QUOTE_RE.match(content):
                end = i
                while end < len(lines) and _QUOTE_RE.match(lines[end].content):
                    end += 1
                blocks.append(self._block_quote(lines[i:end]))
                i = end
            elif _LIST_RE.match(content):
                end = i + 1
                while end < len(lines) and self._continues_list(lines[end].content):
                    end += 1
                blocks.append(self._list(lines[i:end]))
                i = end
            else:
                end = i + 1
                while end < len(lines) and not self._starts_block(lines[end].content):
                    end += 1
                blocks.append(self._paragraph(lines[i:end]))
                i = end
        return TreeBuilder.container(NodeType.DOCUMENT, blocks, offset=0)

    # -- blocks --------------------------------------------------------------

    @staticmethod
    def _starts_block(content: str) -> bool:
        if not content.strip():
            return True
        return any(
            pattern.match(content) for pattern in (_FENCE_RE, _HEADER_RE, _HR_RE, _QUOTE_RE, _LIST_RE)
        )

    @staticmethod
    def _continues_list(content: str) -> bool:
        if not content.strip():
            return False
        if _LIST_RE.match(content) and not _HR_RE.match(content):
            return True
        return content[0] in " \t" and not _FENCE_RE.match(content)

    def _code_block(self, lines: Sequence[Line], start: int, fence: re.Match[str]) -> tuple[Node, int]:
        opening = lines[start]
        indent, marker, info = fence.groups()
        closing_re = re.compile(rf"^ {{0,3}}{re.escape(marker[0])}{{{len(marker)},}}[ \t]*$")
        children = [TreeBuilder.leaf(NodeType.SYNTAX, opening.content, opening.start)]
        children.extend(TreeBuilder.break_leaf(opening))
        j = start + 1
        closed = False
        while j < len(lines):
            line = lines[j]
            j += 1
            if closing_re.match(line.content):
                children.append(TreeBuilder.leaf(NodeType.SYNTAX, line.content, line.start))
                children.extend(TreeBuilder.break_leaf(line))
                closed = True
                break
            if line.content:
                children.append(TreeBuilder.leaf(NodeType.CODE_TEXT, line.content, line.start))
            children.extend(TreeBuilder.break_leaf(line))
        if not closed and self.strict:
            raise ParseError("Unclosed code fence", Position(opening.number, len(indent) + 1))
        attrs = {"lang": info.strip(), "fence": marker, "closed": closed}
        return TreeBuilder.container(NodeType.CODE_BLOCK, children, attrs), j

    def _header(self, line: Line, header: re.Match[str]) -> Node:
        indent, hashes, spacing, rest = header.groups()
        prefix = indent + hashes + spacing
        children = [TreeBuilder.leaf(NodeType.SYNTAX, prefix, line.start)]
        children.extend(self._inline(rest, line.start + len(prefix)))
        children.extend(TreeBuilder.break_leaf(line))
        return TreeBuilder.container(NodeType.HEADER, children, {"depth": len(hashes)})

    def _block_quote(self, lines: Sequence[Line]) -> Node:
        children: list[Node] = []
        for line in lines:
            marker, rest = _QUOTE_RE.match(line.content).groups()
            children.append(TreeBuilder.leaf(NodeType.SYNTAX, marker, line.start))
            children.extend(self._inline(rest, line.start + len(marker)))
            children.extend(TreeBuilder.break_leaf(line))
        return TreeBuilder.container(NodeType.BLOCK_QUOTE, children)

    def _list(self, lines: Sequence[Line]) -> Node:
        items: list[Node] = []
        current: list[Node] = []
        current_attrs: dict[str, object] = {}
        for line in lines:
            item = _LIST_RE.match(line.content)
            if item:
                if current:
                    items.append(TreeBuilder.container(NodeType.LIST_ITEM, current, current_attrs))
                indent, marker, spacing, rest = item.groups()
                current = []
                if indent:
                    current.append(TreeBuilder.leaf(NodeType.WHITESPACE, indent, line.start))
                syntax_offset = line.start + len(indent)
                current.append(TreeBuilder.leaf(NodeType.SYNTAX, marker + spacing, syntax_offset))
                current.extend(self._inline(rest, syntax_offset + len(marker) + len(spacing)))
                current_attrs = {"ordered": marker[0].isdigit(), "indent": len(indent)}
            else:
                leading, rest, rest_offset = TreeBuilder.split_indent(line.content, line.start)
                current.extend(leading)
                current.extend(self._inline(rest, rest_offset))
            current.extend(TreeBuilder.break_leaf(line))
        if current:
            items.append(TreeBuilder.container(NodeType.LIST_ITEM, current, current_attrs))
        ordered = bool(items and items[0].attrs.get("ordered"))
        return TreeBuilder.container(NodeType.LIST, items, {"ordered": ordered})

    def _paragraph(self, lines: Sequence[Line]) -> Node:
        children: list[Node] = []
        for line in lines:
            leading, rest, rest_offset = TreeBuilder.split_indent(line.content, line.start)
            children.extend(leading)
            children.extend(self._inline(rest, rest_offset))
            children.extend(TreeBuilder.break_leaf(line))
        return TreeBuilder.container(NodeType.PARAGRAPH, children)

    # -- inline --------------------------------------------------------------

    def _inline(self, text: str, offset: int) -> list[Node]:
        nodes: list[Node] = []
        cursor = 0
        for match in _INLINE_RE.finditer(text):
            if match.start() > cursor:
                nodes.append(TreeBuilder.leaf(NodeType.STR, text[cursor:match.start()], offset + cursor))
            if match.group("code"):
                nodes.append(TreeBuilder.leaf(NodeType.CODE, match.group(0), offset + match.start()))
            elif match.group("image") is not None:
                nodes.append(self._wrapped(NodeType.IMAGE, text, offset, match, "alt", {"src": match.group("src")}))
            else:
                nodes.append(self._wrapped(NodeType.LINK, text, offset, match, "label", {"url": match.group("href")}))
            cursor = match.end()
        if cursor < len(text):
            nodes.append(TreeBuilder.leaf(NodeType.STR, text[cursor:], offset + cursor))
        return nodes

    def _wrapped(
        self,
        node_type: str,
        text: str,
        offset: int,
        match: re.Match[str],
        label_group: str,
        attrs: dict[str, object],
    ) -> Node:
        """Link or image: Syntax before the label, inline label, Syntax after it."""
        label_start, label_end = match.start(label_group), match.end(label_group)
        children = [TreeBuilder.leaf(NodeType.SYNTAX, text[match.start():label_start], offset + match.start())]
        if node_type == NodeType.LINK:
            children.extend(self._inline(text[label_start:label_end], offset + label_start))
        elif label_end > label_start:
            children.append(TreeBuilder.leaf(NodeType.STR, text[label_start:label_end], offset + label_start))
        children.append(TreeBuilder.leaf(NodeType.SYNTAX, text[label_end:match.end()], offset + label_end))
        return TreeBuilder.container(node_type, children, attrs)
