from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Union

VaultPath = str  # vault-relative, forward-slash


@dataclass(frozen=True)
class Range:
    start: int  # UTF-8 byte offsets into the raw note text
    end: int

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}


class ReferenceKind(str, Enum):
    WIKILINK = "wikilink"
    MARKDOWN_LINK = "markdown_link"
    EMBED = "embed"


class BlockKind(str, Enum):
    INLINE_PARAGRAPH = "inline_paragraph"
    INLINE_LIST_ITEM = "inline_list_item"
    PARAGRAPH = "paragraph"
    LIST = "list"
    BLOCK_QUOTE = "block_quote"
    TABLE = "table"


@dataclass(frozen=True)
class Reference:
    """One link or embed occurrence in a note, before resolution."""

    path: VaultPath
    range: Range
    dest: str
    kind: ReferenceKind
    display_text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "range": self.range.to_dict(),
            "dest": self.dest,
            "kind": self.kind.value,
            "display_text": self.display_text,
        }


@dataclass(frozen=True)
class Asset:
    path: VaultPath

    def to_dict(self) -> dict[str, Any]:
        return {"type": "asset", "path": self.path}


@dataclass(frozen=True)
class Heading:
    path: VaultPath
    level: int  # 1..6
    text: str
    range: Range

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "heading",
            "path": self.path,
            "level": self.level,
            "text": self.text,
            "range": self.range.to_dict(),
        }


@dataclass(frozen=True)
class Block:
    path: VaultPath
    identifier: str  # "my-id" for "^my-id"
    kind: BlockKind
    range: Range

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "block",
            "path": self.path,
            "identifier": self.identifier,
            "kind": self.kind.value,
            "range": self.range.to_dict(),
        }


@dataclass(frozen=True)
class Note:
    path: VaultPath
    children: tuple[Heading | Block, ...] = ()
    frontmatter: dict[str, Any] | None = field(default=None, compare=False, hash=False)

    def headings(self) -> list[Heading]:
        return [c for c in self.children if isinstance(c, Heading)]

    def blocks(self) -> list[Block]:
        return [c for c in self.children if isinstance(c, Block)]

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "type": "note",
            "path": self.path,
            "children": [c.to_dict() for c in self.children],
        }
        if self.frontmatter is not None:
            out["frontmatter"] = self.frontmatter
        return out


Referenceable = Union[Asset, Note, Heading, Block]


def describe(target: Referenceable) -> str:
    """Short human-readable label for a referenceable."""
    if isinstance(target, Asset):
        return f"Asset: {target.path}"
    if isinstance(target, Note):
        return f"Note: {target.path}"
    if isinstance(target, Heading):
        return f"Heading: {target.path} level: {target.level}, text: {target.text}"
    return f"Block: {target.path} ^{target.identifier} ({target.kind.value})"


@dataclass(frozen=True)
class Link:
    source: Reference
    target: Referenceable

    def to_dict(self) -> dict[str, Any]:
        return {"from": self.source.to_dict(), "to": self.target.to_dict()}


@dataclass
class NoteScan:
    """What a single note contributes to a scan."""

    frontmatter: dict[str, Any] | None = None
    references: list[Reference] = field(default_factory=list)
    referenceables: list[Heading | Block] = field(default_factory=list)

    def __iter__(self) -> Iterator[Any]:
        yield self.frontmatter
        yield self.references
        yield self.referenceables


@dataclass
class ScanResult:
    referenceables: list[Referenceable] = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)

    def __iter__(self) -> Iterator[list[Any]]:
        yield self.referenceables
        yield self.references

    def notes(self) -> list[Note]:
        return [r for r in self.referenceables if isinstance(r, Note)]

    def assets(self) -> list[Asset]:
        return [r for r in self.referenceables if isinstance(r, Asset)]


@dataclass
class LinkResult:
    links: list[Link] = field(default_factory=list)
    unresolved: list[Reference] = field(default_factory=list)

    def __iter__(self) -> Iterator[list[Any]]:
        yield self.links
        yield self.unresolved
