"""Slugs and anchor ids for rendering resolved vaults.

Renderers turn vault paths into output file slugs and in-note headings and
blocks into HTML anchor ids. Nothing here touches the filesystem.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Sequence
from pathlib import PurePosixPath

from .model import Block, Heading, Link, Note, Range, Referenceable

_SLUG_DROP_RE = re.compile(r"[^a-z0-9]+")
_ANCHOR_DROP_RE = re.compile(r"[^a-z0-9_-]+")


def _fold(text: str) -> str:
    # Lowercase, NFKD normalize and drop combining marks
    text = unicodedata.normalize("NFKD", text.lower())
    return "".join(c for c in text if not unicodedata.combining(c))


def _collapse(text: str) -> str:
    return "-".join(part for part in text.split("-") if part)


def slugify(s: str) -> str:
    """
    Convert text to a URL-safe slug.

    Everything outside ``[a-z0-9]`` becomes ``-``; runs of ``-`` collapse and
    leading/trailing ``-`` are dropped.

    Examples:
        >>> slugify("Three laws of motion")
        'three-laws-of-motion'
        >>> slugify("Riemann–Christoffel symbols")
        'riemann-christoffel-symbols'
    """
    return _collapse(_SLUG_DROP_RE.sub("-", _fold(s)))


def text_to_anchor_id(text: str) -> str:
    """
    Anchor id for a heading; like ``slugify`` but keeps ``_``.

    Examples:
        >>> text_to_anchor_id("Some level_2 title")
        'some-level_2-title'
    """
    return _collapse(_ANCHOR_DROP_RE.sub("-", _fold(text)))


def range_to_anchor_id(range: Range) -> str:
    return f"{range.start}-{range.end}"


def file_path_to_slug(path: str) -> str:
    """
    Output slug for a vault path.

    Each component is slugified; ``md``/``markdown`` become ``html`` and
    other extensions are kept.

    Examples:
        >>> file_path_to_slug("dir/Note 1.md")
        'dir/note-1.html'
        >>> file_path_to_slug("Figure 1.jpg")
        'figure-1.jpg'
    """
    p = PurePosixPath(path)
    ext = p.suffix[1:]
    stem = p.with_suffix("").as_posix() if ext else p.as_posix()
    slug = "/".join(slugify(part) for part in stem.split("/"))
    if ext in ("md", "markdown"):
        ext = "html"
    return f"{slug}.{ext}" if ext else slug


def build_vault_paths_to_slug_map(paths: Iterable[str]) -> dict[str, str]:
    """Map vault paths to slugs; later paths with a taken slug get ``-2``, ``-3``..."""
    slugs: dict[str, str] = {}
    counts: dict[str, int] = {}
    for path in paths:
        slug = file_path_to_slug(path)
        if slug in counts:
            counts[slug] += 1
            final = f"{slug}-{counts[slug]}"
            counts[final] = 1
        else:
            counts[slug] = 1
            final = slug
        slugs[path] = final
    return slugs


def build_in_note_anchor_id_map(
    referenceables: Sequence[Referenceable],
) -> dict[str, dict[Range, str]]:
    """
    Map each note path to ``{range: anchor id}`` for its headings and blocks.

    Every note gets an entry, even without headings or blocks. Anchor ids are
    not de-duplicated.
    """
    anchors: dict[str, dict[Range, str]] = {}
    for item in referenceables:
        if isinstance(item, Heading):
            anchors.setdefault(item.path, {})[item.range] = text_to_anchor_id(item.text)
        elif isinstance(item, Block):
            anchors.setdefault(item.path, {})[item.range] = item.identifier
        elif isinstance(item, Note):
            anchors.setdefault(item.path, {})
            for path, by_range in build_in_note_anchor_id_map(item.children).items():
                anchors.setdefault(path, {}).update(by_range)
    return anchors


def build_link_map(links: Iterable[Link]) -> dict[str, dict[Range, Link]]:
    """Map each source note path to ``{reference range: link}``."""
    link_map: dict[str, dict[Range, Link]] = {}
    for link in links:
        link_map.setdefault(link.source.path, {})[link.source.range] = link
    return link_map
