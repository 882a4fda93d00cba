"""Deterministic log/output locations for a session name."""

from __future__ import annotations

from pathlib import Path

from sandbelt.config import get_settings
from sandbelt.types import SessionPaths


def plan_paths(sandbox_name: str, output_file: str | None = None) -> SessionPaths:
    """Compute (and create the directories for) a session's artifact paths.

    ``<logs_dir>/<name>.log`` and ``<output_dir>/<name>.json``; an explicit
    *output_file* always wins.
    """
    s = get_settings()
    paths = SessionPaths(
        log_dir=s.logs_dir,
        output_dir=s.output_dir,
        log_file=s.logs_dir / f"{sandbox_name}.log",
        output_file=Path(output_file).expanduser().absolute()
        if output_file
        else s.output_dir / f"{sandbox_name}.json",
    )
    ensure_directories(paths)
    return paths


def ensure_directories(paths: SessionPaths) -> None:
    paths.log_dir.mkdir(parents=True, exist_ok=True)
    paths.output_dir.mkdir(parents=True, exist_ok=True)
    paths.output_file.parent.mkdir(parents=True, exist_ok=True)
