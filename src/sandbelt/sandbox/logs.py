"""Browse session/task log and output files."""

from __future__ import annotations

import subprocess
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from sandbelt.config import get_settings
from sandbelt.console import cyan, echo, yellow
from sandbelt.logger import logger
from sandbelt.utils import shell_quote

MAX_SELECTED = 10
MAX_LISTED = 20


@dataclass(frozen=True)
class LogFile:
    path: Path
    name: str
    mtime: float


def _target(show_output: bool) -> tuple[Path, str]:
    s = get_settings()
    return (s.output_dir, "json") if show_output else (s.logs_dir, "log")


def get_files(directory: Path, ext: str) -> list[LogFile]:
    """Files in *directory* with extension *ext*, newest first."""
    directory.mkdir(parents=True, exist_ok=True)
    files = [
        LogFile(path=p, name=p.name, mtime=p.stat().st_mtime)
        for p in directory.glob(f"*.{ext}")
        if p.is_file()
    ]
    return sorted(files, key=lambda f: f.mtime, reverse=True)


def select_files(
    files: list[LogFile], *, show_all: bool = False, pattern: str | None = None
) -> list[LogFile]:
    if pattern:
        return [f for f in files if pattern in f.name][:MAX_SELECTED]
    return files[:MAX_SELECTED] if show_all else files[:1]


def tail_lines(path: Path, lines: int) -> str:
    with path.open(encoding="utf-8", errors="replace") as fh:
        return "".join(deque(fh, maxlen=lines))


def list_files(*, show_output: bool = False) -> list[LogFile]:
    directory, ext = _target(show_output)
    echo(cyan("=== Output files ===" if show_output else "=== Log files ==="))
    files = get_files(directory, ext)
    if not files:
        echo("  None")
    for f in files[:MAX_LISTED]:
        echo(f"  {f.name} ({datetime.fromtimestamp(f.mtime):%Y-%m-%d %H:%M:%S})")
    return files


def follow(files: list[LogFile], lines: int) -> None:
    """``tail -f`` the files until interrupted."""
    echo(cyan(f"Following: {', '.join(f.name for f in files)}"))
    echo("Press Ctrl+C to stop")
    echo("---")
    command = f"tail -f -n {lines} " + " ".join(shell_quote(str(f.path)) for f in files)
    echo(yellow(command))
    try:
        subprocess.run(command, shell=True, check=False)
    except KeyboardInterrupt:
        logger.debug("Stopped following logs")


def show_logs(
    *,
    pattern: str | None = None,
    lines: int = 50,
    follow_output: bool = False,
    show_output: bool = False,
    show_all: bool = False,
) -> list[LogFile]:
    """Print (or follow) the newest matching log/output files; return the selection."""
    directory, ext = _target(show_output)
    all_files = get_files(directory, ext)
    if not all_files:
        echo(yellow(f"No {ext} files found"))
        return []

    selected = select_files(all_files, show_all=show_all, pattern=pattern)
    if not selected:
        echo(yellow(f"No files match pattern: {pattern}"))
        echo()
        echo("Available files:")
        for f in all_files[:5]:
            echo(f"  {f.name}")
        return []

    if follow_output:
        follow(selected, lines)
        return selected

    for f in selected:
        echo(cyan(f"=== {f.name} ==="))
        try:
            echo(tail_lines(f.path, lines).rstrip("\n"))
        except OSError as exc:
            logger.warning("Could not read file", path=str(f.path), err=str(exc))
            echo(yellow("Could not read file"))
        echo()
    return selected
