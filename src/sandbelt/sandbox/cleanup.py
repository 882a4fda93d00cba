"""Remove sessions and, optionally, worktree and log directories.

Removal is best-effort: one failing session never aborts the rest, and
already-absent sessions or directories are not errors.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from sandbelt.config import get_settings
from sandbelt.console import echo, green, yellow
from sandbelt.errors import RuntimeCommandFailed
from sandbelt.logger import logger
from sandbelt.runtime import RuntimeClient, get_runtime
from sandbelt.sandbox.registry import session_names
from sandbelt.types import CleanupResult

ALL = "--all"


def _remove_one(name: str, runtime: RuntimeClient, failed: dict[str, str]) -> bool:
    try:
        runtime.remove(name)
    except RuntimeCommandFailed as exc:
        failed[name] = str(exc)
        logger.warning("Could not remove sandbox", sandbox=name, err=str(exc))
        echo(yellow(f"  Could not remove sandbox '{name}': {exc}"))
        return False
    echo(f"  Removed {name}")
    return True


def remove_sessions(
    target: str, runtime: RuntimeClient
) -> tuple[list[str], dict[str, str]]:
    """Remove *target* (a name or ``--all``); return ``(removed, failed)``."""
    echo(green("Removing sandboxes..."))
    failed: dict[str, str] = {}
    known = session_names(runtime)

    if target != ALL:
        if target not in known:
            echo(yellow(f"  Not found: {target}"))
            return [], failed
        return ([target] if _remove_one(target, runtime, failed) else []), failed

    if not known:
        echo("  None found")
        return [], failed
    removed = [name for name in known if _remove_one(name, runtime, failed)]
    return removed, failed


def purge_directory(directory: Path, label: str) -> bool:
    """Recursively delete everything under *directory*; False if it was absent."""
    if not directory.exists():
        return False
    echo()
    echo(green(f"Removing {label}..."))
    for entry in directory.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry, ignore_errors=True)
        else:
            entry.unlink(missing_ok=True)
    echo("  Done")
    return True


def cleanup(
    target: str | None = None,
    *,
    remove_worktrees: bool = False,
    remove_logs: bool = False,
    runtime: RuntimeClient | None = None,
) -> CleanupResult:
    """Remove one session, or every session with ``target="--all"``.

    Without a target nothing is removed: wiping every session has to be
    asked for explicitly.
    """
    if target is None:
        echo("Nothing to clean up. Pass a sandbox name, or --all to remove every sandbox.")
        return CleanupResult()

    runtime = runtime or get_runtime()
    s = get_settings()
    echo("=== Cleanup ===")

    removed, failed = remove_sessions(target, runtime)
    worktrees_removed = purge_directory(s.worktrees_dir, "worktrees") if remove_worktrees else False
    logs_removed = purge_directory(s.logs_dir, "logs") if remove_logs else False

    echo()
    echo(green("Cleanup complete"))
    logger.info("Cleanup finished", removed=removed, failed=list(failed))
    return CleanupResult(
        removed=removed,
        failed=failed,
        worktrees_removed=worktrees_removed,
        logs_removed=logs_removed,
    )


def cleanup_all(runtime: RuntimeClient | None = None) -> CleanupResult:
    return cleanup(ALL, remove_worktrees=True, remove_logs=True, runtime=runtime)
