"""Workspace path validation and ``:ro`` suffix handling."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from sandbelt.errors import InvalidWorkspace
from sandbelt.types import WorkspaceMount

READONLY_SUFFIX = ":ro"


def resolve_workspace(path: str) -> str:
    """Return the absolute, symlink-resolved form of *path*.

    Raises:
        InvalidWorkspace: If the path does not exist or is not a directory.
    """
    candidate = Path(path).expanduser().absolute()
    if not candidate.is_dir():
        raise InvalidWorkspace(str(candidate))
    return str(candidate.resolve())


def parse_workspace(entry: str) -> WorkspaceMount:
    """Resolve one workspace entry, keeping its read-only marker."""
    entry = entry.strip()
    readonly = entry.endswith(READONLY_SUFFIX)
    raw = entry[: -len(READONLY_SUFFIX)] if readonly else entry
    return WorkspaceMount(path=resolve_workspace(raw), readonly=readonly)


def split_workspaces(entries: Iterable[str]) -> list[str]:
    """Expand comma-separated entries into a flat list, dropping blanks."""
    return [part.strip() for entry in entries for part in entry.split(",") if part.strip()]


def resolve_workspaces(entries: Iterable[str]) -> list[WorkspaceMount]:
    """Resolve every workspace entry; the first one is the primary workspace."""
    raw = split_workspaces(entries)
    if not raw:
        raise InvalidWorkspace("", "At least one workspace path is required")
    return [parse_workspace(entry) for entry in raw]
