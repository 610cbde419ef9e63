"""Parsing of link destination strings.

A destination has a file part, optionally followed by ``#`` and either a
chain of nested headings (``Note#A#B``) or a block identifier
(``Note#^my-id``).
"""

from .utils import is_block_identifier


def parse_nested_headings(s: str) -> list[str]:
    """
    Split a heading chain on ``#``, dropping empty segments.

    A non-empty string made only of ``#`` is an empty placeholder heading.

    Examples:
        >>> parse_nested_headings("##A###B")
        ['A', 'B']
        >>> parse_nested_headings("A#####C#B")
        ['A', 'C', 'B']
        >>> parse_nested_headings("##")
        ['']
    """
    if s and all(c == "#" for c in s):
        return [""]
    return [part for part in s.split("#") if part]


def split_dest(dest: str) -> tuple[str, list[str] | None, str | None]:
    """
    Split a destination into ``(file_part, nested_headings, block_id)``.

    At most one of ``nested_headings`` and ``block_id`` is set.

    Examples:
        >>> split_dest("Note 2#Some level 2 title")
        ('Note 2', ['Some level 2 title'], None)
        >>> split_dest("#^my-id")
        ('', None, 'my-id')
        >>> split_dest("Figure1.jpg")
        ('Figure1.jpg', None, None)
    """
    hash_pos = dest.find("#")
    if hash_pos == -1:
        return dest, None, None

    file_part = dest[:hash_pos]
    after_hash = dest[hash_pos + 1 :]

    if after_hash.startswith("^") and len(after_hash) > 1:
        maybe_identifier = after_hash[1:]
        if is_block_identifier(maybe_identifier):
            return file_part, None, maybe_identifier

    return file_part, parse_nested_headings(after_hash), None
