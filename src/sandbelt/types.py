"""Data models for sandbelt."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Literal

SessionStatus = Literal["running", "completed", "failed"]


class SessionMode(enum.Enum):
    """How a session runs: blocking on a terminal, captured, or in the background."""

    INTERACTIVE = "interactive"
    HEADLESS = "headless"
    DETACHED = "detached"


@dataclass(frozen=True)
class WorkspaceMount:
    path: str  # absolute, symlink-resolved host path
    readonly: bool = False

    def __str__(self) -> str:
        return f"{self.path}:ro" if self.readonly else self.path


@dataclass(frozen=True)
class SessionConfig:
    sandbox_name: str
    workspace: tuple[str, ...]  # raw entries; comma-separated lists are expanded later
    prompt: str | None = None
    prompt_file: str | None = None
    detached: bool = False
    continue_conversation: bool = False
    output_file: str | None = None

    def __post_init__(self) -> None:
        if self.prompt is not None and self.prompt_file is not None:
            raise ValueError("prompt and prompt_file are mutually exclusive")
        if isinstance(self.workspace, str):
            object.__setattr__(self, "workspace", (self.workspace,))


@dataclass(frozen=True)
class SessionPaths:
    log_dir: Path
    output_dir: Path
    log_file: Path
    output_file: Path


@dataclass(frozen=True)
class SessionResult:
    sandbox_name: str
    mode: SessionMode
    workspace: str
    log_file: Path
    status: SessionStatus
    output_file: Path | None = None
    error: str | None = None


@dataclass(frozen=True)
class RegistryEntry:
    name: str
    runtime_status: str  # free text from the runtime, e.g. "running", "exited"

    @property
    def is_running(self) -> bool:
        return self.runtime_status.lower() == "running"


@dataclass(frozen=True)
class ExecResult:
    exit_code: int
    stdout: str
    stderr: str
    duration_ms: int


@dataclass(frozen=True)
class TaskResult:
    task_id: str
    sandbox: str
    output_file: Path
    log_file: Path
    status: Literal["running", "completed"]


@dataclass(frozen=True)
class CleanupResult:
    removed: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)  # name -> error
    worktrees_removed: bool = False
    logs_removed: bool = False


@dataclass(frozen=True)
class FileInfo:
    name: str
    path: Path
    modified: datetime


@dataclass(frozen=True)
class StatusReport:
    sessions: list[RegistryEntry]
    recent_logs: list[FileInfo]
    worktrees: list[FileInfo]


@dataclass(frozen=True)
class ConnectResult:
    sandbox_name: str
    connected: bool
