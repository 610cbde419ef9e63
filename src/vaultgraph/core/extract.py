"""Extract references and in-note referenceables from a parsed note.

Referenceables inside a note are headings and blocks carrying an explicit
``^identifier`` marker. References are wikilinks, embeds and inline
Markdown links.

Post-condition: both lists are in document order.
"""

from __future__ import annotations

import re

from .model import Block, BlockKind, Heading, Range, Reference, ReferenceKind
from .tree import LinkType, Node, NodeKind
from .utils import percent_decode

MARKER_RE = re.compile(r"\^([A-Za-z0-9-]+)")

_SIBLING_BLOCK_KINDS = {
    NodeKind.TABLE: BlockKind.TABLE,
    NodeKind.LIST: BlockKind.LIST,
    NodeKind.BLOCK_QUOTE: BlockKind.BLOCK_QUOTE,
    NodeKind.PARAGRAPH: BlockKind.PARAGRAPH,
}


def extract(tree: Node, path: str) -> tuple[list[Reference], list[Heading | Block]]:
    """Walk ``tree`` in pre-order and collect references and referenceables."""
    references: list[Reference] = []
    referenceables: list[Heading | Block] = []
    _visit(tree, [], path, references, referenceables)
    return references, referenceables


def _visit(
    node: Node,
    parents: list[Node],
    path: str,
    references: list[Reference],
    referenceables: list[Heading | Block],
) -> None:
    if node.kind in (NodeKind.LINK, NodeKind.IMAGE):
        reference = _reference(node, path)
        if reference is not None:
            references.append(reference)
    elif node.kind == NodeKind.HEADING:
        referenceables.append(_heading(node, path))
    elif node.kind == NodeKind.PARAGRAPH:
        block = _paragraph_block(node, parents, path)
        if block is not None:
            referenceables.append(block)
    elif node.kind == NodeKind.TABLE:
        block = _table_block(node, path)
        if block is not None:
            referenceables.append(block)

    parents.append(node)
    for child in node.children:
        _visit(child, parents, path, references, referenceables)
    parents.pop()


def _child_text(node: Node) -> str:
    return "".join(
        c.text or "" for c in node.children if c.kind in (NodeKind.TEXT, NodeKind.CODE)
    )


def _reference(node: Node, path: str) -> Reference | None:
    dest_url = node.dest_url or ""

    if node.link_type == LinkType.WIKILINK:
        display_text = _child_text(node) if node.has_pothole else dest_url
        kind = ReferenceKind.EMBED if node.kind == NodeKind.IMAGE else ReferenceKind.WIKILINK
        return Reference(
            path=path,
            range=node.range,
            dest=dest_url.strip(),
            kind=kind,
            display_text=display_text,
        )

    if node.link_type == LinkType.INLINE:
        # `Note%201.md` -> `Note 1`; `[text]()` points to the file `().md`
        dest = percent_decode(dest_url) or "()"
        dest = dest.removesuffix(".md").removesuffix(".markdown")
        return Reference(
            path=path,
            range=node.range,
            dest=dest,
            kind=ReferenceKind.MARKDOWN_LINK,
            display_text=_child_text(node),
        )

    return None


def _heading(node: Node, path: str) -> Heading:
    return Heading(
        path=path,
        level=node.level or 1,
        text=_child_text(node),
        range=node.range,
    )


def _marker(node: Node | None) -> str | None:
    """Identifier if ``node`` is a text node holding only ``^identifier``."""
    if node is None or node.kind != NodeKind.TEXT or node.text is None:
        return None
    m = MARKER_RE.fullmatch(node.text.strip())
    return m.group(1) if m else None


def _paragraph_block(node: Node, parents: list[Node], path: str) -> Block | None:
    if not node.children:
        return None
    identifier = _marker(node.children[-1])
    if identifier is None:
        return None

    parent = parents[-1] if parents else None

    # Marker alone in its paragraph: it labels the block right before it
    if len(node.children) == 1:
        if parent is None:
            return None
        siblings = parent.children
        idx = next(i for i, c in enumerate(siblings) if c is node)
        if idx == 0:
            return None
        previous = siblings[idx - 1]
        kind = _SIBLING_BLOCK_KINDS.get(previous.kind)
        if kind is None:
            return None
        return Block(path=path, identifier=identifier, kind=kind, range=previous.range)

    marker = node.children[-1]
    before = node.children[-2]

    # Marker on the same line as the text; only a tight item has no paragraph of its own
    if before.kind != NodeKind.SOFT_BREAK:
        if node.tight and parent is not None and parent.kind == NodeKind.ITEM:
            return Block(path, identifier, BlockKind.INLINE_LIST_ITEM, parent.range)
        return Block(path, identifier, BlockKind.INLINE_PARAGRAPH, node.range)

    # Marker on its own line, closing the paragraph
    line_start = before.range.end
    if parent is not None and parent.kind == NodeKind.BLOCK_QUOTE:
        return Block(
            path, identifier, BlockKind.BLOCK_QUOTE, Range(parent.range.start, line_start)
        )
    if parent is not None and parent.kind == NodeKind.ITEM:
        column = marker.range.start - line_start
        if parent.indent is not None and column < parent.indent and len(parents) >= 2:
            # Lazy continuation line: the marker labels the whole list
            lst = parents[-2]
            return Block(path, identifier, BlockKind.LIST, Range(lst.range.start, line_start))
        return Block(
            path, identifier, BlockKind.INLINE_LIST_ITEM, Range(parent.range.start, line_start)
        )
    return Block(path, identifier, BlockKind.PARAGRAPH, Range(node.range.start, line_start))


def _table_block(node: Node, path: str) -> Block | None:
    rows = [c for c in node.walk() if c.kind == NodeKind.TABLE_ROW]
    if not rows:
        return None
    last = rows[-1]
    inline = [n for cell in last.children for n in cell.children]
    if len(inline) != 1:
        return None
    identifier = _marker(inline[0])
    if identifier is None:
        return None
    return Block(path, identifier, BlockKind.TABLE, Range(node.range.start, last.range.start))
