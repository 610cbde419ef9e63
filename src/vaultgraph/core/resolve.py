"""Resolution of references to referenceables."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import PurePosixPath
from typing import TypeVar

from ..logging_config import get_logger
from .dest import split_dest
from .model import (
    Asset,
    Block,
    Heading,
    Link,
    LinkResult,
    Note,
    Reference,
    Referenceable,
)

logger = get_logger("resolve")

T = TypeVar("T")


def match_subsequence(haystack: Sequence[T], needle: Sequence[T]) -> int | None:
    """
    Ancestor-descendant subsequence check.

    Every needle item must appear in haystack, in the same order but not
    necessarily contiguous. Returns the haystack index of the last matched
    item, or None.

    Examples:
        >>> match_subsequence([1, 2, 3, 4], [1, 3])
        2
        >>> match_subsequence([1, 2, 3, 4], [3, 1]) is None
        True
    """
    haystack_idx = 0
    last_match_idx = 0

    for item in needle:
        found = False
        while haystack_idx < len(haystack):
            if haystack[haystack_idx] == item:
                last_match_idx = haystack_idx
                haystack_idx += 1
                found = True
                break
            haystack_idx += 1

        if not found:
            return None

    return last_match_idx


def resolve_link(needle: str, haystack: Sequence[str]) -> str | None:
    """
    Match a file name from a link against the known vault paths.

    - Trim spaces
    - Add `.md` if the name has no extension
    - Exact match first
    - Then subsequence match on path components, first hit in scan order

    A file without an extension (e.g. `Something`) can never be matched,
    since its name is always read as `Something.md`.
    """
    needle = needle.strip()
    if "." not in needle:
        needle += ".md"

    needle_path = PurePosixPath(needle)
    for hay in haystack:
        if PurePosixPath(hay) == needle_path:
            return hay

    needle_parts = needle_path.parts
    for hay in haystack:
        if match_subsequence(PurePosixPath(hay).parts, needle_parts) is not None:
            return hay

    return None


def resolve_nested_headings(
    headings: Sequence[Heading], nested_headings: Sequence[str]
) -> Heading | None:
    """
    Resolve a heading chain such as ``A#B#C`` against a note's headings.

    Tries every subsequence match in document order, backtracking until the
    matched headings form a real hierarchy (each level strictly greater than
    the previous one). Heading texts may repeat.

    Given headings H2 "L2", H4 "L4", H3 "L3", H2 "L2", H3 "L3", H4 "L4":
    - ["L2", "L4"] matches the first "L4"
    - ["L2", "L3", "L4"] matches the last "L4" (L2 -> L4 -> L3 is skipped)
    - ["L2", "L4", "L3"] matches nothing
    """
    if not nested_headings:
        return None

    texts = [h.text for h in headings]
    chosen: list[int] = []

    def is_hierarchy(indices: list[int]) -> bool:
        return all(
            headings[curr].level > headings[prev].level
            for prev, curr in zip(indices, indices[1:])
        )

    def search(start: int, depth: int) -> int | None:
        if depth == len(nested_headings):
            return chosen[-1] if is_hierarchy(chosen) else None

        wanted = nested_headings[depth]
        for i in range(start, len(texts)):
            if texts[i] != wanted:
                continue
            chosen.append(i)
            found = search(i + 1, depth + 1)
            if found is not None:
                return found
            chosen.pop()
        return None

    idx = search(0, 0)
    return headings[idx] if idx is not None else None


def resolve_block(blocks: Sequence[Block], identifier: str) -> Block | None:
    """First block carrying ``identifier``; later duplicates are ignored."""
    for block in blocks:
        if block.identifier == identifier:
            return block
    return None


def _resolve_in_note(
    note: Note, nested_headings: list[str] | None, block_id: str | None
) -> Referenceable | None:
    if nested_headings is not None:
        return resolve_nested_headings(note.headings(), nested_headings)
    if block_id is not None:
        return resolve_block(note.blocks(), block_id)
    return None


def build_links(
    references: Sequence[Reference], referenceables: Sequence[Referenceable]
) -> LinkResult:
    """
    Build links from references and referenceables.

    Returns the matched links and the unresolved references, both in input
    order.

    - An empty file part points to the reference's own note.
    - A heading chain or block id that cannot be found falls back to the
      whole note; the reference still counts as resolved.
    - A heading or block part on a link to an asset is ignored.
    """
    by_path: dict[str, Referenceable] = {}
    for referenceable in referenceables:
        if isinstance(referenceable, (Note, Asset)):
            by_path.setdefault(referenceable.path, referenceable)
    known_paths = list(by_path)

    result = LinkResult()
    for reference in references:
        file_part, nested_headings, block_id = split_dest(reference.dest)
        if not file_part:
            file_part = PurePosixPath(reference.path).name

        matched_path = resolve_link(file_part, known_paths)
        if matched_path is None:
            logger.debug("Unresolved %r in %s [%s]", reference.dest, reference.path, reference.range)
            result.unresolved.append(reference)
            continue

        target = by_path[matched_path]
        if isinstance(target, Note):
            in_note = _resolve_in_note(target, nested_headings, block_id)
            if in_note is not None:
                target = in_note

        result.links.append(Link(source=reference, target=target))

    logger.info(
        "Resolved %d links, %d unresolved", len(result.links), len(result.unresolved)
    )
    return result


def resolve_new_note_path(name: str, paths: Sequence[str]) -> tuple[str | None, str]:
    """
    Pick the path of a new note for ``name``, avoiding existing paths.

    - Split directory and file name; ``dir/`` is read as the file ``dir``
    - Add `.md` unless already present
    - Append " 1", " 2", ... to the stem until the path is free

    Returns ``(parent_dir, note_path)``; the parent, when set, is the
    directory of the note path.
    """
    name = name.strip()
    path = PurePosixPath(name)

    parent: str | None = None
    if not path.name:
        file_name = name.replace("\\", "").replace("/", "")
    else:
        file_name = path.name
        if str(path.parent) not in ("", "."):
            parent = str(path.parent)

    if not file_name.endswith(".md"):
        file_name += ".md"

    def join(fname: str) -> str:
        return f"{parent}/{fname}" if parent else fname

    existing = set(paths)
    note_path = join(file_name)
    stem = PurePosixPath(file_name).stem
    suffix = PurePosixPath(file_name).suffix
    counter = 1
    while note_path in existing:
        note_path = join(f"{stem} {counter}{suffix}")
        counter += 1

    return parent, note_path
