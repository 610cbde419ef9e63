"""Logging configuration for vaultgraph."""

import logging
import sys

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int | str = logging.WARNING, format_string: str | None = None) -> None:
    """
    Configure the ``vaultgraph`` logger to write to stderr.

    Safe to call more than once; the previous handler is replaced.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root = logging.getLogger("vaultgraph")
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)

    # Block tokenizer debug output is never useful here
    logging.getLogger("markdown_it").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module."""
    return logging.getLogger(f"vaultgraph.{name}")
