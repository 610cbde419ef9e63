from typing import Any, Protocol

from .tree import Node


class ParserStrategy(Protocol):
    """
    Parse Markdown into a node tree with byte ranges.
    MUST NOT resolve anything; link destinations stay as written.
    """

    def parse(self, text: str) -> Node:
        pass


class FrontmatterCodec(Protocol):
    """
    Decode the raw frontmatter block of a note without enforcing schema.
    """

    def decode(self, content: str) -> dict[str, Any] | None:
        pass
