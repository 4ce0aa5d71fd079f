"""Format plugin contract: parser/serializer pair for one or more document kinds."""

from typing import Protocol, runtime_checkable

from prosecheck.domain.document import Node


@runtime_checkable
class FormatPlugin(Protocol):
    """
    Converts raw text into a Node tree and back.

    ``serialize(parse(text)) == text`` for every text the plugin accepts.
    Implementations must not mutate themselves during parse/serialize; one
    instance is shared by concurrent document evaluations.
    """

    plugin_id: str
    kinds: tuple[str, ...]
    extensions: tuple[str, ...]

    def match(self, kind: str) -> bool:
        ...

    def parse(self, text: str) -> Node:
        """Raises ParseError on input the plugin cannot represent."""
        ...

    def serialize(self, tree: Node) -> str:
        ...
