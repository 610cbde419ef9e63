"""Watch mode for vaultgraph - rescan and re-resolve the vault on changes."""

import json
import signal
import sys
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .errors import VaultGraphError
from .logging_config import get_logger
from .runtime import Runtime
from .scanner import DEFAULT_IGNORE, relative_path

logger = get_logger("watch")


class DebounceHandler(FileSystemEventHandler):
    """Collects vault file events and reports them in debounced batches."""

    def __init__(
        self,
        vault_path: Path,
        on_batch: Callable[[set[str], set[str]], None],
        debounce_ms: int = 150,
        ignore: Iterable[str] = DEFAULT_IGNORE,
    ):
        super().__init__()
        self.vault_path = vault_path
        self.on_batch = on_batch
        self.debounce_ms = debounce_ms
        self.ignore = set(ignore)

        # Pending changes by vault path
        self.changed: set[str] = set()
        self.deleted: set[str] = set()
        self.last_event_time = 0.0

    def _should_skip(self, path: Path) -> bool:
        """Hidden, editor temp and ignored files never trigger a rescan."""
        name = path.name

        # Dotfiles
        if name.startswith("."):
            return True

        # Editor backups and swap files
        if name.endswith("~") or name.endswith(".swp") or name.startswith(".#"):
            return True

        # Skip anything inside an ignored directory
        rel = Path(relative_path(path, self.vault_path))
        return any(part in self.ignore for part in rel.parts)

    def _vault_path(self, src: Any) -> str | None:
        path = Path(str(src))
        if self._should_skip(path):
            return None
        return relative_path(path, self.vault_path)

    def _record(self, src: Any, pending: set[str]) -> None:
        path = self._vault_path(src)
        if path:
            pending.add(path)
            self.last_event_time = time.time()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, self.changed)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, self.changed)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, self.deleted)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, self.deleted)
            self._record(event.dest_path, self.changed)

    def check_and_flush(self) -> None:
        """Flush once no event has arrived for ``debounce_ms``."""
        if not (self.changed or self.deleted):
            return

        elapsed = (time.time() - self.last_event_time) * 1000
        if elapsed >= self.debounce_ms:
            self.flush()

    def flush(self) -> None:
        """Hand the pending batch to ``on_batch`` and reset it."""
        if not (self.changed or self.deleted):
            return

        changed = set(self.changed)
        # A file deleted and then recreated within one batch counts as changed
        deleted = self.deleted - changed

        self.changed.clear()
        self.deleted.clear()

        if self.on_batch:
            self.on_batch(changed, deleted)


def watch_vault(
    rt: Runtime,
    debounce_ms: int | None = None,
    quiet: bool = False,
    json_output: bool = False,
) -> int:
    """
    Watch the vault directory and re-resolve all links after each batch of changes.

    Args:
        rt: Wired runtime for the vault
        debounce_ms: Debounce window in milliseconds (default from config)
        quiet: Suppress output
        json_output: Output JSON events instead of human-readable

    Returns:
        Exit code
    """
    vault_path = rt.vault_path
    if debounce_ms is None:
        debounce_ms = rt.config.watch.debounce_ms

    if not vault_path.exists():
        print(f"Error: Vault not found: {vault_path}", file=sys.stderr)
        return 1

    running = True

    def report(changed: set[str], deleted: set[str]) -> None:
        """Full rescan and resolution; one report line per batch."""
        start_time = time.time()

        try:
            scan, result = rt.resolve()
        except VaultGraphError as e:
            logger.warning("Rescan failed: %s", e)
            if json_output:
                print(json.dumps({"type": "error", "message": str(e)}), flush=True)
            else:
                print(f"Error: {e}", file=sys.stderr, flush=True)
            return

        duration_ms = int((time.time() - start_time) * 1000)
        if json_output:
            event = {
                "type": "batch",
                "changed": sorted(changed),
                "deleted": sorted(deleted),
                "notes": len(scan.notes()),
                "links": len(result.links),
                "unresolved": len(result.unresolved),
                "duration_ms": duration_ms,
            }
            print(json.dumps(event), flush=True)
        elif not quiet:
            print(
                f"Resolved: {len(result.links)} links, {len(result.unresolved)} unresolved "
                f"(~{len(changed)} -{len(deleted)}, {duration_ms}ms)",
                flush=True,
            )

    # Stop the loop on Ctrl+C or SIGTERM
    def signal_handler(signum: int, frame: Any) -> None:
        nonlocal running
        running = False
        if not quiet and not json_output:
            print("\nShutting down...", flush=True)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    handler = DebounceHandler(vault_path, report, debounce_ms, rt.config.vault.ignore)
    observer = Observer()
    observer.schedule(handler, str(vault_path), recursive=True)

    if not quiet and not json_output:
        print(f"Watching {vault_path} (debounce: {debounce_ms}ms)", flush=True)
        print("Ctrl+C to quit", flush=True)

    # Initial state
    report(set(), set())

    observer.start()

    try:
        while running:
            time.sleep(0.1)
            handler.check_and_flush()
    finally:
        handler.flush()
        observer.stop()
        observer.join()

    if not quiet and not json_output:
        print("Stopped watching", flush=True)

    return 0
