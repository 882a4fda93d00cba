"""Error taxonomy for sandbox orchestration.

Validation errors (workspace, prompt, template) are raised before any
container is touched. ``RuntimeCommandFailed`` wraps a non-zero exit from
the container CLI.
"""

from __future__ import annotations


class SandboxError(Exception):
    """Base class for every handled sandbelt failure."""


class InvalidWorkspace(SandboxError):
    """Workspace path does not exist or is not a directory."""

    def __init__(self, path: str, message: str | None = None) -> None:
        super().__init__(message or f"Workspace directory does not exist: {path}")
        self.path = path


class PromptFileMissing(SandboxError):
    """The ``--prompt-file`` argument points at nothing."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Prompt file does not exist: {path}")
        self.path = path


class PromptMissing(SandboxError):
    """A task was dispatched with an empty prompt."""


class TemplateMissing(SandboxError):
    def __init__(self, template: str) -> None:
        super().__init__(
            f"Sandbox template '{template}' not found. "
            "Build the template image first, then retry."
        )
        self.template = template


class SessionNotFound(SandboxError):
    """The named session is not known to the runtime."""

    def __init__(
        self, name: str, running: list[str] | None = None, message: str | None = None
    ) -> None:
        super().__init__(message or f"Sandbox not found: {name}")
        self.name = name
        self.running = running or []


class SessionNotReady(SandboxError):
    def __init__(self, name: str, timeout: float) -> None:
        super().__init__(f"Sandbox {name} did not report running within {timeout:g}s")
        self.name = name
        self.timeout = timeout


class RuntimeCommandFailed(SandboxError):
    """The container CLI exited non-zero."""

    def __init__(self, command: str, exit_code: int, stderr: str = "") -> None:
        detail = stderr.replace("ERROR", "").strip()
        msg = f"Command failed with exit code {exit_code}: {command}"
        if detail:
            msg += f"\n{detail}"
        super().__init__(msg)
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr


class Canceled(Exception):
    """The user backed out of an interactive selection. Not a failure."""
