"""String utilities shared by the extractor and resolver."""

import re
from urllib.parse import unquote

BLOCK_IDENTIFIER_RE = re.compile(r"[A-Za-z0-9-]+")


def percent_decode(url: str) -> str:
    """
    Decode percent-escapes, replacing invalid UTF-8 sequences.

    Examples:
        >>> percent_decode("Note%201")
        'Note 1'
        >>> percent_decode("Three%20laws%20of%20motion.md")
        'Three laws of motion.md'
    """
    return unquote(url, encoding="utf-8", errors="replace")


def percent_encode(url: str) -> str:
    """
    Encode everything except ASCII alphanumerics, keeping ``#`` and ``/``
    so heading anchors and directories survive.
    """
    out = []
    for c in url:
        if (c.isascii() and c.isalnum()) or c in "#/":
            out.append(c)
        else:
            out.append("".join(f"%{b:02X}" for b in c.encode("utf-8")))
    return "".join(out)


def is_block_identifier(s: str) -> bool:
    """True if ``s`` is a valid ``^identifier`` name (letters, digits, dashes)."""
    return BLOCK_IDENTIFIER_RE.fullmatch(s) is not None
