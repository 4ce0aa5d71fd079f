import pytest

from prosecheck.domain.document import Node, NodeType, Position, RangeMap, TextRange


class TestTextRange:
    def test_rejects_negative_and_reversed_spans(self) -> None:
        with pytest.raises(ValueError):
            TextRange(-1, 2)
        with pytest.raises(ValueError):
            TextRange(5, 4)

    def test_zero_width_range_is_valid(self) -> None:
        assert len(TextRange(3, 3)) == 0

    @pytest.mark.parametrize(
        ("first", "second", "expected"),
        [
            (TextRange(0, 5), TextRange(3, 8), True),
            (TextRange(0, 5), TextRange(5, 8), False),
            (TextRange(2, 2), TextRange(2, 6), True),
            (TextRange(4, 4), TextRange(4, 4), True),
            (TextRange(4, 4), TextRange(2, 6), True),
            (TextRange(6, 6), TextRange(2, 6), False),
        ],
    )
    def test_overlaps(self, first: TextRange, second: TextRange, expected: bool) -> None:
        assert first.overlaps(second) is expected
        assert second.overlaps(first) is expected

    def test_is_within(self) -> None:
        assert TextRange(0, 4).is_within(4)
        assert not TextRange(0, 5).is_within(4)


class TestRangeMap:
    def test_lines_keep_terminators_apart(self) -> None:
        lines = RangeMap.split_lines("ab\r\ncd\rend")
        assert [(line.content, line.eol) for line in lines] == [("ab", "\r\n"), ("cd", "\r"), ("end", "")]
        assert [line.start for line in lines] == [0, 4, 7]

    def test_position_of_is_one_based(self) -> None:
        range_map = RangeMap("first\nsecond\n")
        assert range_map.position_of(0) == Position(1, 1)
        assert range_map.position_of(6) == Position(2, 1)
        assert range_map.position_of(9) == Position(2, 4)

    def test_offset_of_inverts_position_of(self) -> None:
        text = "one\r\ntwo\nthree"
        range_map = RangeMap(text)
        for offset in range(len(text) + 1):
            assert range_map.offset_of(range_map.position_of(offset)) == offset

    def test_out_of_range_offsets_raise(self) -> None:
        range_map = RangeMap("abc")
        with pytest.raises(ValueError):
            range_map.position_of(4)
        with pytest.raises(ValueError):
            range_map.offset_of(Position(2, 1))

    def test_location_of_range(self) -> None:
        location = RangeMap("ab\ncd").location_of(TextRange(1, 4))
        assert str(location.start) == "1:2"
        assert str(location.end) == "2:2"

    def test_empty_text(self) -> None:
        range_map = RangeMap("")
        assert range_map.line_count == 0
        assert range_map.position_of(0) == Position(1, 1)


def _tree() -> Node:
    hello = Node(NodeType.STR, TextRange(0, 5), raw="Hello")
    space = Node(NodeType.WHITESPACE, TextRange(5, 6), raw=" ")
    code = Node(NodeType.CODE, TextRange(6, 9), raw="`x`")
    paragraph = Node(NodeType.PARAGRAPH, TextRange(0, 9), children=(hello, space, code))
    newline = Node(NodeType.BREAK, TextRange(9, 10), raw="\n")
    return Node(NodeType.DOCUMENT, TextRange(0, 10), children=(paragraph, newline))


class TestNode:
    def test_walk_is_depth_first_in_document_order(self) -> None:
        order = [(node.type, parent.type if parent else None) for node, parent in _tree().walk()]
        assert order == [
            (NodeType.DOCUMENT, None),
            (NodeType.PARAGRAPH, NodeType.DOCUMENT),
            (NodeType.STR, NodeType.PARAGRAPH),
            (NodeType.WHITESPACE, NodeType.PARAGRAPH),
            (NodeType.CODE, NodeType.PARAGRAPH),
            (NodeType.BREAK, NodeType.DOCUMENT),
        ]

    def test_text_concatenates_leaves(self) -> None:
        assert _tree().text() == "Hello `x`\n"

    def test_nodes_of_type_filters(self) -> None:
        found = [n.raw for n in _tree().nodes_of_type(NodeType.STR, NodeType.CODE)]
        assert found == ["Hello", "`x`"]

    def test_nodes_are_immutable(self) -> None:
        tree = _tree()
        with pytest.raises(AttributeError):
            tree.raw = "changed"  # type: ignore[misc]
