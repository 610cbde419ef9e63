"""Vault scanning: walk a directory, parse notes, collect references."""

from __future__ import annotations

from pathlib import Path, PurePath
from typing import Iterable, Iterator

from .adapters.markdown_parser import MarkdownParser
from .adapters.yaml_codec import YamlFrontmatter
from .core.extract import extract
from .core.model import Asset, Note, NoteScan, ScanResult
from .core.ports import FrontmatterCodec, ParserStrategy
from .core.tree import NodeKind
from .errors import ScanError
from .logging_config import get_logger

logger = get_logger("scanner")

DEFAULT_IGNORE = (".obsidian", ".DS_Store", ".git")
NOTE_EXTENSIONS = (".md", ".markdown")


def is_note(path: PurePath) -> bool:
    return path.suffix in NOTE_EXTENSIONS


def relative_path(path: Path, root: Path) -> str:
    """``path`` relative to ``root`` with forward slashes; unchanged if outside."""
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def iter_files(directory: Path, ignore: Iterable[str] = DEFAULT_IGNORE) -> Iterator[Path]:
    """
    Yield regular files under ``directory`` depth-first, entries sorted by name.

    Broken symlinks, sockets and other special entries are skipped.
    """
    ignored = set(ignore)
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise ScanError(directory, e) from e

    for entry in entries:
        if entry.name in ignored:
            continue
        if entry.is_dir():
            yield from iter_files(entry, ignored)
        elif entry.is_file():
            yield entry


def scan_note(
    path: Path,
    parser: ParserStrategy | None = None,
    frontmatter: FrontmatterCodec | None = None,
    note_path: str | None = None,
) -> NoteScan:
    """
    Read and parse one note.

    ``note_path`` is the vault path recorded on extracted items; it defaults
    to ``path`` as a forward-slash string.
    """
    parser = parser or MarkdownParser()
    frontmatter = frontmatter or YamlFrontmatter()
    if note_path is None:
        note_path = Path(path).as_posix()

    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ScanError(path, e) from e

    tree = parser.parse(text)
    references, referenceables = extract(tree, note_path)

    fm = None
    for node in tree.children:
        if node.kind == NodeKind.FRONTMATTER:
            fm = frontmatter.decode(node.text or "")
            break

    return NoteScan(frontmatter=fm, references=references, referenceables=referenceables)


def scan_vault(
    directory: Path | str,
    root: Path | str | None = None,
    ignore: Iterable[str] = DEFAULT_IGNORE,
    parser: ParserStrategy | None = None,
    frontmatter: FrontmatterCodec | None = None,
) -> ScanResult:
    """
    Scan ``directory`` for notes and assets.

    All paths in the result are relative to ``root`` (defaults to
    ``directory``). Any unreadable file aborts the scan with ``ScanError``.
    """
    directory = Path(directory)
    root = Path(root) if root is not None else directory
    parser = parser or MarkdownParser()
    frontmatter = frontmatter or YamlFrontmatter()

    result = ScanResult()
    for file in iter_files(directory, ignore):
        path = relative_path(file, root)
        if not is_note(file):
            result.referenceables.append(Asset(path=path))
            continue

        fm, references, children = scan_note(file, parser, frontmatter, note_path=path)
        logger.debug(
            "Scanned %s: %d references, %d headings/blocks", path, len(references), len(children)
        )
        result.referenceables.append(Note(path=path, children=tuple(children), frontmatter=fm))
        result.references.extend(references)

    logger.info(
        "Scanned %d notes, %d assets, %d references",
        len(result.notes()),
        len(result.assets()),
        len(result.references),
    )
    return result
