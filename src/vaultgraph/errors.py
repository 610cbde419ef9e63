"""Exceptions raised by vaultgraph."""


class VaultGraphError(Exception):
    """Base class for all vaultgraph errors."""


class ScanError(VaultGraphError):
    """A vault file could not be read while scanning."""

    def __init__(self, path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to read {path}: {cause}")


class ConfigError(VaultGraphError):
    """Invalid value in vaultgraph.toml."""
