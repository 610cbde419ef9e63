"""Parsed note tree consumed by the extractor.

A parser adapter turns raw Markdown into a ``Node`` tree whose ranges are
UTF-8 byte offsets into the original text. The extractor only depends on
the kinds and payloads defined here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from .model import Range


class NodeKind(str, Enum):
    DOCUMENT = "Document"
    FRONTMATTER = "Frontmatter"
    HEADING = "Heading"
    PARAGRAPH = "Paragraph"
    LIST = "List"
    ITEM = "Item"
    BLOCK_QUOTE = "BlockQuote"
    TABLE = "Table"
    TABLE_HEAD = "TableHead"
    TABLE_ROW = "TableRow"
    TABLE_CELL = "TableCell"
    CODE_BLOCK = "CodeBlock"
    RULE = "Rule"
    HTML = "Html"
    TEXT = "Text"
    CODE = "Code"
    SOFT_BREAK = "SoftBreak"
    LINK = "Link"
    IMAGE = "Image"


class LinkType(str, Enum):
    WIKILINK = "WikiLink"
    INLINE = "Inline"


@dataclass
class Node:
    kind: NodeKind
    range: Range
    children: list[Node] = field(default_factory=list)
    text: str | None = None  # Text / Code / Frontmatter content
    level: int | None = None  # Heading
    link_type: LinkType | None = None  # Link / Image
    dest_url: str | None = None
    title: str | None = None
    has_pothole: bool = False
    indent: int | None = None  # Item: byte column where item content starts
    tight: bool = False  # Paragraph: hidden inside a tight list item

    def walk(self) -> Iterator[Node]:
        """Yield this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def _label(self) -> str:
        if self.kind in (NodeKind.TEXT, NodeKind.CODE):
            return f"{self.kind.value}({self.text!r})"
        if self.kind == NodeKind.HEADING:
            return f"Heading(H{self.level})"
        if self.kind in (NodeKind.LINK, NodeKind.IMAGE):
            lt = self.link_type.value if self.link_type else "?"
            if self.link_type == LinkType.WIKILINK:
                lt += f" {{ has_pothole: {str(self.has_pothole).lower()} }}"
            return f"{self.kind.value} {{ link_type: {lt}, dest_url: {self.dest_url!r} }}"
        return self.kind.value

    def pretty(self, indent: int = 0) -> str:
        lines = [f"{'  ' * indent}{self._label()} [{self.range}]"]
        for child in self.children:
            lines.append(child.pretty(indent + 1))
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.pretty()
