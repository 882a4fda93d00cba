"""Status report: sessions from the runtime plus recent logs and worktrees on disk."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from sandbelt.config import get_settings
from sandbelt.console import cyan, echo
from sandbelt.logger import logger
from sandbelt.runtime import RuntimeClient
from sandbelt.sandbox.registry import list_sessions
from sandbelt.types import FileInfo, RegistryEntry, StatusReport

RECENT_LOG_COUNT = 5


def _file_info(path: Path) -> FileInfo:
    return FileInfo(
        name=path.name,
        path=path,
        modified=datetime.fromtimestamp(path.stat().st_mtime),
    )


def recent_logs(limit: int = RECENT_LOG_COUNT) -> list[FileInfo]:
    logs_dir = get_settings().logs_dir
    if not logs_dir.is_dir():
        return []
    try:
        logs = [_file_info(p) for p in logs_dir.glob("*.log") if p.is_file()]
    except OSError as exc:
        logger.warning("Failed to read logs directory", path=str(logs_dir), err=str(exc))
        return []
    return sorted(logs, key=lambda f: f.modified, reverse=True)[:limit]


def worktrees() -> list[FileInfo]:
    worktrees_dir = get_settings().worktrees_dir
    if not worktrees_dir.is_dir():
        return []
    try:
        return sorted(
            (_file_info(p) for p in worktrees_dir.iterdir() if p.is_dir()),
            key=lambda f: f.name,
        )
    except OSError as exc:
        logger.warning("Failed to read worktrees directory", path=str(worktrees_dir), err=str(exc))
        return []


def get_status(runtime: RuntimeClient | None = None) -> StatusReport:
    return StatusReport(
        sessions=list_sessions(runtime),
        recent_logs=recent_logs(),
        worktrees=worktrees(),
    )


def _display_sessions(sessions: list[RegistryEntry]) -> None:
    echo(cyan("=== Running Sandboxes ==="))
    if not sessions:
        echo("None")
    for entry in sessions:
        echo(f"  {entry.name} ({entry.runtime_status})")
    echo()


def _display_files(title: str, files: list[FileInfo], *, timestamps: bool) -> None:
    echo(cyan(f"=== {title} ==="))
    if not files:
        echo("None")
    for info in files:
        suffix = f" ({info.modified:%Y-%m-%d %H:%M:%S})" if timestamps else ""
        echo(f"  {info.name}{suffix}")
    echo()


def display_status(runtime: RuntimeClient | None = None) -> StatusReport:
    report = get_status(runtime)
    _display_sessions(report.sessions)
    _display_files("Recent Logs", report.recent_logs, timestamps=True)
    _display_files("Worktrees", report.worktrees, timestamps=False)
    return report
