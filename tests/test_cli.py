"""Tests for the vaultgraph command line."""

import json
import logging
import tempfile
from pathlib import Path

import pytest
import yaml

from vaultgraph.cli import main


@pytest.fixture
def vault():
    """Small vault with one resolved and one unresolved link."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "Note 1.md").write_text(
            "# Note 1\n\n[[Note 2#Section]] and [[Missing]]\n", encoding="utf-8"
        )
        (root / "Note 2.md").write_text("## Section\n\ntext ^para\n", encoding="utf-8")
        (root / "pic.png").write_bytes(b"")
        yield root


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger("vaultgraph")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


def run(capsys, *argv):
    with pytest.raises(SystemExit) as excinfo:
        main(list(argv))
    out, err = capsys.readouterr()
    return excinfo.value.code, out, err


def test_scan_text(vault, capsys):
    code, out, _ = run(capsys, "--vault", str(vault), "scan")
    assert code == 0
    lines = out.splitlines()
    assert lines[0] == "Note 1.md"
    assert "  # Note 1 [0..9]" in lines
    assert "  ^para (inline_paragraph) [12..23]" in lines
    assert "pic.png (asset)" in lines
    assert "2 notes, 1 assets, 2 references" in out


def test_scan_json(vault, capsys):
    code, out, _ = run(capsys, "--vault", str(vault), "--format", "json", "scan")
    assert code == 0
    data = json.loads(out)
    assert [item["type"] for item in data] == ["note", "note", "asset"]
    assert data[1]["children"][0] == {
        "type": "heading",
        "path": "Note 2.md",
        "level": 2,
        "text": "Section",
        "range": {"start": 0, "end": 11},
    }


def test_links(vault, capsys):
    code, out, _ = run(capsys, "--vault", str(vault), "links")
    assert code == 0
    assert out.strip() == (
        "Note 1.md [10..28] Note 2#Section -> Heading: Note 2.md level: 2, text: Section"
    )


def test_links_yaml(vault, capsys):
    code, out, _ = run(capsys, "--vault", str(vault), "--format", "yaml", "links")
    assert code == 0
    data = yaml.safe_load(out)
    assert data[0]["from"]["dest"] == "Note 2#Section"
    assert data[0]["to"]["type"] == "heading"


def test_unresolved_exit_code(vault, capsys):
    code, out, _ = run(capsys, "--vault", str(vault), "unresolved")
    assert code == 1
    assert out.splitlines()[0] == "Note 1.md [33..44] Missing"


def test_unresolved_clean_vault(capsys):
    with tempfile.TemporaryDirectory() as tmpdir:
        Path(tmpdir, "a.md").write_text("[[a]]\n")
        code, out, _ = run(capsys, "--vault", tmpdir, "unresolved")
    assert code == 0
    assert out == ""


def test_lint(vault, capsys):
    code, out, _ = run(capsys, "--vault", str(vault), "lint")
    assert code == 1
    assert "[error] Unresolved link 'Missing' (unresolved-links)" in out


def test_split(capsys):
    code, out, _ = run(capsys, "split", "Note#A#B")
    assert code == 0
    assert out.splitlines() == ["file: Note", "headings: A > B"]

    code, out, _ = run(capsys, "--format", "json", "split", "#^my-id")
    assert json.loads(out) == {"file": "", "headings": None, "block": "my-id"}


def test_tree(vault, capsys):
    code, out, _ = run(capsys, "--vault", str(vault), "tree", "Note 2.md")
    assert code == 0
    assert out.splitlines()[0] == "Document [0..23]"
    assert "  Heading(H2) [0..11]" in out


def test_tree_missing_note(vault, capsys):
    code, _, err = run(capsys, "--vault", str(vault), "tree", "nope.md")
    assert code == 1
    assert "not found" in err


def test_tree_undecodable_note(vault, capsys):
    (vault / "bad.md").write_bytes(b"\xff\xfe")
    code, _, err = run(capsys, "--vault", str(vault), "tree", "bad.md")
    assert code == 1
    assert err.startswith("Error: Failed to read")


def test_new_path(vault, capsys):
    code, out, _ = run(capsys, "--vault", str(vault), "new-path", "Note 1")
    assert code == 0
    assert out.strip() == "Note 1 1.md"


def test_scan_error_is_reported(capsys):
    with tempfile.TemporaryDirectory() as tmpdir:
        Path(tmpdir, "bad.md").write_bytes(b"\xff\xfe")
        code, _, err = run(capsys, "--vault", tmpdir, "scan")
    assert code == 1
    assert err.startswith("Error: Failed to read")


def test_config_error_is_reported(capsys):
    with tempfile.TemporaryDirectory() as tmpdir:
        config = Path(tmpdir) / "vaultgraph.toml"
        config.write_text('[output]\nformat = "xml"\n')
        code, _, err = run(capsys, "--config", str(config), "split", "x")
    assert code == 1
    assert "Unknown output format" in err


def test_format_from_config(vault, capsys):
    (vault / "vaultgraph.toml").write_text('[output]\nformat = "json"\n')
    code, out, _ = run(capsys, "--vault", str(vault), "unresolved")
    assert code == 1
    assert json.loads(out)[0]["dest"] == "Missing"


def test_verbose_logs_scan_summary(vault, capsys):
    code, _, err = run(capsys, "--vault", str(vault), "-v", "links")
    assert code == 0
    assert "vaultgraph.scanner - INFO - Scanned 2 notes, 1 assets, 2 references" in err
    assert "Resolved 1 links, 1 unresolved" in err
