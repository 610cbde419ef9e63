"""Runtime wiring helper for CLI applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.markdown_parser import MarkdownParser
from .adapters.yaml_codec import YamlFrontmatter
from .config import GraphConfig, load_config
from .core.model import LinkResult, ScanResult
from .core.resolve import build_links
from .scanner import scan_vault


@dataclass
class Runtime:
    """Container for all wired components."""
    vault_path: Path
    parser: MarkdownParser
    frontmatter: YamlFrontmatter
    config: GraphConfig

    def scan(self) -> ScanResult:
        return scan_vault(
            self.vault_path,
            ignore=self.config.vault.ignore,
            parser=self.parser,
            frontmatter=self.frontmatter,
        )

    def resolve(self) -> tuple[ScanResult, LinkResult]:
        """Scan the vault and resolve every reference."""
        scan = self.scan()
        return scan, build_links(scan.references, scan.referenceables)


def build_runtime(
    vault_path: Path | None = None,
    config_path: Path | None = None,
) -> Runtime:
    """Build and wire all components for a vault."""
    config = load_config(config_path=config_path, vault_path=vault_path)

    # Use config values if CLI args not provided
    if vault_path is None:
        vault_path = config.vault.root

    return Runtime(
        vault_path=Path(vault_path),
        parser=MarkdownParser(),
        frontmatter=YamlFrontmatter(),
        config=config,
    )
