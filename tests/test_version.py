"""Tests for --version output."""

import platform
import subprocess
import sys

from vaultgraph import __version__
from vaultgraph.cli import version_string


def test_version_string_lines():
    lines = version_string().splitlines()
    assert lines[0] == f"vaultgraph {__version__}"
    assert lines[1] == f"python {platform.python_version()}"
    assert lines[2].startswith("platform ")


def test_version_flag_runs_as_module():
    """Test `python -m vaultgraph.cli --version` prints the version block."""
    result = subprocess.run(
        [sys.executable, "-m", "vaultgraph.cli", "--version"],
        capture_output=True,
        text=True,
    )

    assert result.returncode == 0
    assert result.stdout.splitlines()[:2] == [
        f"vaultgraph {__version__}",
        f"python {platform.python_version()}",
    ]


def test_version_is_major_minor_patch():
    assert [part.isdigit() for part in __version__.split(".")] == [True, True, True]
