"""Tests for scanning a vault directory."""

import tempfile
from pathlib import Path

import pytest

from vaultgraph.core.model import Asset, Heading, Note
from vaultgraph.errors import ScanError
from vaultgraph.scanner import scan_note, scan_vault


def write(root: Path, rel: str, content: str | bytes = "") -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


def test_scan_order_and_classification():
    """Test entries are sorted and classified by extension."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        write(root, "b.md", "# B\n")
        write(root, "a.png", "")
        write(root, "dir/c.markdown", "[[b]]\n")
        write(root, "dir/d.pdf", "")

        scan = scan_vault(root)

        assert [r.path for r in scan.referenceables] == [
            "a.png",
            "b.md",
            "dir/c.markdown",
            "dir/d.pdf",
        ]
        assert isinstance(scan.referenceables[0], Asset)
        assert isinstance(scan.referenceables[1], Note)
        assert scan.notes()[0].children == (
            Heading(path="b.md", level=1, text="B", range=scan.notes()[0].children[0].range),
        )
        assert [ref.path for ref in scan.references] == ["dir/c.markdown"]


def test_broken_symlink_is_skipped():
    """Test only regular files become assets."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        write(root, "note.md", "")
        (root / "dangling.png").symlink_to(root / "missing.png")

        scan = scan_vault(root)
        assert [r.path for r in scan.referenceables] == ["note.md"]


def test_ignored_entries():
    """Test ignored names are skipped for directories and files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        write(root, ".obsidian/workspace.json", "{}")
        write(root, ".DS_Store", "")
        write(root, "note.md", "")
        write(root, "private/secret.md", "")

        scan = scan_vault(root)
        assert [r.path for r in scan.referenceables] == ["note.md", "private/secret.md"]

        scan = scan_vault(root, ignore=["private"])
        assert [r.path for r in scan.referenceables] == [
            ".DS_Store",
            ".obsidian/workspace.json",
            "note.md",
        ]


def test_paths_relative_to_root():
    """Test a sub-directory scan keeps paths relative to the vault root."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        write(root, "sub/n.md", "[[x]] ^id\n")

        scan = scan_vault(root / "sub", root=root)
        (note,) = scan.notes()
        assert note.path == "sub/n.md"
        assert note.children[0].path == "sub/n.md"
        assert scan.references[0].path == "sub/n.md"


def test_scan_note_frontmatter():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write(Path(tmpdir), "n.md", "---\ntitle: Hello\ntags: [a, b]\n---\n# H\n")

        frontmatter, references, referenceables = scan_note(path)

        assert frontmatter == {"title": "Hello", "tags": ["a", "b"]}
        assert references == []
        assert [r.text for r in referenceables] == ["H"]


def test_scan_note_invalid_frontmatter_is_ignored():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write(Path(tmpdir), "n.md", "---\n: [unclosed\n---\n[[A]]\n")
        frontmatter, references, _ = scan_note(path)
        assert frontmatter is None
        assert [r.dest for r in references] == ["A"]


def test_empty_note():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write(Path(tmpdir), "empty.md", "")
        assert tuple(scan_note(path)) == (None, [], [])


def test_unreadable_file_aborts_scan():
    """Test invalid UTF-8 raises ScanError naming the file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        write(root, "good.md", "ok\n")
        write(root, "bad.md", b"\xff\xfe\xfa")

        with pytest.raises(ScanError) as excinfo:
            scan_vault(root)
        assert "bad.md" in str(excinfo.value)


def test_missing_directory():
    with pytest.raises(ScanError):
        scan_vault("/nonexistent/vault/path")
