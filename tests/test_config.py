"""Tests for configuration loading."""

import os
import tempfile
from pathlib import Path

import pytest

from vaultgraph.config import load_config
from vaultgraph.errors import ConfigError


def test_load_config_defaults():
    """Test loading config with defaults when no file exists."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config = load_config(config_path=Path(tmpdir) / "missing.toml")

    assert config.vault.root == Path("./vault")
    assert config.vault.ignore == [".obsidian", ".DS_Store", ".git"]
    assert config.output.format == "text"
    assert config.watch.debounce_ms == 150
    assert config.log.level == "WARNING"


def test_load_config_from_file():
    """Test loading config from a file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "vaultgraph.toml"
        config_path.write_text("""
[vault]
root = "my-vault"
ignore = [".obsidian", "templates"]

[output]
format = "json"

[watch]
debounce_ms = 500

[log]
level = "debug"
""")

        config = load_config(config_path=config_path)

        assert config.vault.root == Path("my-vault")
        assert config.vault.ignore == [".obsidian", "templates"]
        assert config.output.format == "json"
        assert config.watch.debounce_ms == 500
        assert config.log.level == "DEBUG"


def test_load_config_search_cwd():
    """Test config search in current working directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        orig_cwd = os.getcwd()
        try:
            os.chdir(tmpdir)
            Path(tmpdir, "vaultgraph.toml").write_text('[output]\nformat = "yaml"\n')
            config = load_config()
            assert config.output.format == "yaml"
        finally:
            os.chdir(orig_cwd)


def test_load_config_search_vault():
    """Test config search falls back to the vault directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        vault = Path(tmpdir) / "vault"
        vault.mkdir()
        (vault / "vaultgraph.toml").write_text("[watch]\ndebounce_ms = 42\n")

        config = load_config(vault_path=vault)

        assert config.watch.debounce_ms == 42
        assert config.vault.root == vault


def test_unknown_output_format():
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "vaultgraph.toml"
        config_path.write_text('[output]\nformat = "xml"\n')
        with pytest.raises(ConfigError, match="xml"):
            load_config(config_path=config_path)


def test_invalid_toml():
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "vaultgraph.toml"
        config_path.write_text("[vault\nroot = 1\n")
        with pytest.raises(ConfigError):
            load_config(config_path=config_path)


def test_invalid_ignore_list():
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "vaultgraph.toml"
        config_path.write_text('[vault]\nignore = ".git"\n')
        with pytest.raises(ConfigError):
            load_config(config_path=config_path)
