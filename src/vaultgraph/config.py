"""Configuration loader for vaultgraph.toml."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .errors import ConfigError
from .scanner import DEFAULT_IGNORE

CONFIG_FILE = "vaultgraph.toml"
OUTPUT_FORMATS = ("text", "json", "yaml")


@dataclass
class VaultConfig:
    """Vault-specific configuration."""
    root: Path
    ignore: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE))


@dataclass
class OutputConfig:
    """CLI output configuration."""
    format: str = "text"


@dataclass
class WatchConfig:
    """Watch mode configuration."""
    debounce_ms: int = 150


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "WARNING"


@dataclass
class GraphConfig:
    """Complete vaultgraph configuration."""
    vault: VaultConfig
    output: OutputConfig
    watch: WatchConfig
    log: LogConfig


def load_config(config_path: Path | None = None, vault_path: Path | None = None) -> GraphConfig:
    """
    Load configuration from vaultgraph.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/vaultgraph.toml
    3. vault_path/vaultgraph.toml

    Args:
        config_path: Explicit path to config file
        vault_path: Vault root path for fallback search

    Returns:
        GraphConfig with resolved settings

    Raises:
        ConfigError: on unreadable TOML or an invalid value
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(Path(config_path))
    search_paths.append(Path.cwd() / CONFIG_FILE)
    if vault_path:
        search_paths.append(Path(vault_path) / CONFIG_FILE)

    for path in search_paths:
        if path.exists():
            try:
                with open(path, "rb") as f:
                    toml_data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"Invalid TOML in {path}: {e}") from e
            break

    # Parse vault config
    vault_data = toml_data.get("vault", {})
    vault_root = Path(vault_data.get("root", vault_path or Path("./vault")))
    ignore = vault_data.get("ignore", list(DEFAULT_IGNORE))
    if not isinstance(ignore, list) or not all(isinstance(i, str) for i in ignore):
        raise ConfigError("[vault] ignore must be a list of names")

    vault_config = VaultConfig(root=vault_root, ignore=ignore)

    # Parse output config
    output_data = toml_data.get("output", {})
    fmt = output_data.get("format", "text")
    if fmt not in OUTPUT_FORMATS:
        raise ConfigError(
            f"Unknown output format {fmt!r}, expected one of {', '.join(OUTPUT_FORMATS)}"
        )
    output_config = OutputConfig(format=fmt)

    # Parse watch config
    watch_data = toml_data.get("watch", {})
    debounce_ms = watch_data.get("debounce_ms", 150)
    if not isinstance(debounce_ms, int) or debounce_ms < 0:
        raise ConfigError("[watch] debounce_ms must be a non-negative integer")
    watch_config = WatchConfig(debounce_ms=debounce_ms)

    # Parse log config
    log_data = toml_data.get("log", {})
    log_config = LogConfig(level=str(log_data.get("level", "WARNING")).upper())

    return GraphConfig(
        vault=vault_config,
        output=output_config,
        watch=watch_config,
        log=log_config,
    )
