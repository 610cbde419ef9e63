"""CLI for vaultgraph - link resolution for Obsidian-style vaults."""

import argparse
import json
import logging
import platform
import sys
from pathlib import Path
from typing import Any

import yaml

from . import __version__
from .core.dest import split_dest
from .core.model import Asset, Block, Heading, Note, describe
from .core.resolve import resolve_new_note_path
from .errors import ScanError, VaultGraphError
from .lint import lint_vault
from .logging_config import get_logger, setup_logging
from .runtime import Runtime, build_runtime

logger = get_logger("cli")


def _format(args: argparse.Namespace, rt: Runtime) -> str:
    return args.format or rt.config.output.format


def _emit(args: argparse.Namespace, rt: Runtime, data: Any) -> bool:
    """Print ``data`` for json/yaml output; False when text output is wanted."""
    fmt = _format(args, rt)
    if fmt == "json":
        print(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        return True
    if fmt == "yaml":
        print(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), end="")
        return True
    return False


def _child_line(child: Heading | Block) -> str:
    if isinstance(child, Heading):
        return f"  {'#' * child.level} {child.text} [{child.range}]"
    return f"  ^{child.identifier} ({child.kind.value}) [{child.range}]"


def cmd_scan(args: argparse.Namespace, rt: Runtime) -> int:
    """List notes and assets with their headings and blocks."""
    scan = rt.scan()

    if _emit(args, rt, [r.to_dict() for r in scan.referenceables]):
        return 0

    for item in scan.referenceables:
        if isinstance(item, Note):
            print(item.path)
            for child in item.children:
                print(_child_line(child))
        elif isinstance(item, Asset):
            print(f"{item.path} (asset)")

    if not args.quiet:
        print(
            f"\n{len(scan.notes())} notes, {len(scan.assets())} assets, "
            f"{len(scan.references)} references"
        )
    return 0


def cmd_links(args: argparse.Namespace, rt: Runtime) -> int:
    """List resolved links."""
    _, result = rt.resolve()

    if _emit(args, rt, [link.to_dict() for link in result.links]):
        return 0

    for link in result.links:
        src = link.source
        print(f"{src.path} [{src.range}] {src.dest} -> {describe(link.target)}")
    return 0


def cmd_unresolved(args: argparse.Namespace, rt: Runtime) -> int:
    """List references that match no file; exit 1 if any."""
    _, result = rt.resolve()

    if not _emit(args, rt, [ref.to_dict() for ref in result.unresolved]):
        for ref in result.unresolved:
            print(f"{ref.path} [{ref.range}] {ref.dest}")
        if not args.quiet and result.unresolved:
            print(f"\n{len(result.unresolved)} unresolved", file=sys.stderr)

    return 1 if result.unresolved else 0


def cmd_lint(args: argparse.Namespace, rt: Runtime) -> int:
    """Validate links and anchors."""
    scan, result = rt.resolve()
    findings = lint_vault(scan, result)

    if not _emit(args, rt, [f.to_dict() for f in findings]):
        for f in findings:
            if args.quiet and f.severity != "error":
                continue
            where = f"{f.path} [{f.range}]" if f.range else f.path
            print(f"{where}: [{f.severity}] {f.message} ({f.rule})")

    return 1 if any(f.severity == "error" for f in findings) else 0


def cmd_split(args: argparse.Namespace, rt: Runtime) -> int:
    """Show how a link destination is split."""
    file_part, nested_headings, block_id = split_dest(args.dest)

    data = {"file": file_part, "headings": nested_headings, "block": block_id}
    if _emit(args, rt, data):
        return 0

    print(f"file: {file_part}")
    if nested_headings is not None:
        print(f"headings: {' > '.join(nested_headings)}")
    if block_id is not None:
        print(f"block: ^{block_id}")
    return 0


def cmd_tree(args: argparse.Namespace, rt: Runtime) -> int:
    """Dump the parsed node tree of one note."""
    path = Path(args.note)
    if not path.exists() and not path.is_absolute():
        path = rt.vault_path / path
    if not path.is_file():
        print(f"Note {args.note} not found", file=sys.stderr)
        return 1

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ScanError(path, e) from e

    tree = rt.parser.parse(text)
    print(tree.pretty())
    return 0


def cmd_new_path(args: argparse.Namespace, rt: Runtime) -> int:
    """Suggest a free path for a new note."""
    scan = rt.scan()
    paths = [r.path for r in scan.referenceables if isinstance(r, (Note, Asset))]
    parent, note_path = resolve_new_note_path(args.name, paths)

    if not _emit(args, rt, {"parent": parent, "path": note_path}):
        print(note_path)
    return 0


def cmd_watch(args: argparse.Namespace, rt: Runtime) -> int:
    """Watch vault for changes and re-resolve links."""
    from .watch import watch_vault

    return watch_vault(
        rt,
        debounce_ms=args.debounce_ms,
        quiet=args.quiet,
        json_output=_format(args, rt) == "json",
    )


def version_string() -> str:
    return (
        f"vaultgraph {__version__}\n"
        f"python {platform.python_version()}\n"
        f"platform {platform.platform()}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vaultgraph", description="Resolve links in an Obsidian-style vault"
    )
    parser.add_argument(
        "--version", action="version", version=version_string()
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/vaultgraph.toml, vault/vaultgraph.toml)",
    )
    parser.add_argument(
        "--vault",
        type=Path,
        default=None,
        help="Path to vault directory (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--format",
        choices=["text", "json", "yaml"],
        default=None,
        help="Output format (default: from config, else text)",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Log progress to stderr (-vv for debug)",
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    subparsers.add_parser("scan", help="List notes, assets, headings and blocks")
    subparsers.add_parser("links", help="List resolved links")
    subparsers.add_parser("unresolved", help="List unresolved links (exit 1 if any)")
    subparsers.add_parser("lint", help="Validate links and anchors")

    parser_split = subparsers.add_parser("split", help="Split a link destination")
    parser_split.add_argument("dest", help="Destination, e.g. 'Note#Heading' or 'Note#^id'")

    parser_tree = subparsers.add_parser("tree", help="Dump the parsed tree of a note")
    parser_tree.add_argument("note", help="Note path (relative to the vault or absolute)")

    parser_new_path = subparsers.add_parser("new-path", help="Suggest a path for a new note")
    parser_new_path.add_argument("name", help="Note name, e.g. 'dir/My note'")

    parser_watch = subparsers.add_parser("watch", help="Watch vault for changes")
    parser_watch.add_argument(
        "--debounce-ms", type=int, default=None,
        help="Debounce window in milliseconds (default: from config, else 150)"
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        rt = build_runtime(vault_path=args.vault, config_path=args.config)
    except VaultGraphError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.verbose >= 2:
        setup_logging(logging.DEBUG)
    elif args.verbose == 1:
        setup_logging(logging.INFO)
    else:
        setup_logging(rt.config.log.level)

    # Dispatch to command handlers
    handlers = {
        "scan": cmd_scan,
        "links": cmd_links,
        "unresolved": cmd_unresolved,
        "lint": cmd_lint,
        "split": cmd_split,
        "tree": cmd_tree,
        "new-path": cmd_new_path,
        "watch": cmd_watch,
    }

    handler = handlers.get(args.cmd)
    if handler is None:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)

    try:
        exit_code = handler(args, rt)
    except (VaultGraphError, OSError) as e:
        logger.debug("Command %s failed", args.cmd, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
