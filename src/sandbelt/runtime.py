"""Container runtime client. The only module that shells out to the container CLI.

Orchestration code depends on the :class:`RuntimeClient` protocol so it can
be exercised against a fake. :class:`DockerSandboxRuntime` is the production
implementation on top of ``docker sandbox``.
"""

from __future__ import annotations

import signal
import subprocess
import time
from typing import Protocol, runtime_checkable

from sandbelt.errors import RuntimeCommandFailed
from sandbelt.logger import logger
from sandbelt.types import ExecResult
from sandbelt.utils import shell_quote


@runtime_checkable
class RuntimeClient(Protocol):
    """Runtime contract used by the lifecycle, task, status and cleanup code."""

    cli: str

    def start(self, command: str, *, foreground: bool = False) -> int: ...
    def exec(self, command: str) -> ExecResult: ...
    def stream(self, command: str) -> int: ...
    def spawn(self, command: str) -> int: ...
    def list(self) -> str: ...
    def remove(self, name: str) -> None: ...
    def image_exists(self, image: str) -> bool: ...


class DockerSandboxRuntime:
    """Runtime adapter for the ``docker sandbox`` CLI."""

    def __init__(self, cli: str = "docker") -> None:
        self.cli = cli

    # -- Command execution -----------------------------------------------

    def _run_captured(self, command: str) -> ExecResult:
        start = time.monotonic()
        proc = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.debug(
            "Runtime command finished",
            command=command,
            exit_code=proc.returncode,
            elapsed_ms=duration_ms,
        )
        result = ExecResult(
            exit_code=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
            duration_ms=duration_ms,
        )
        if result.exit_code != 0:
            raise RuntimeCommandFailed(command, result.exit_code, result.stderr)
        return result

    def _run_foreground(self, command: str) -> int:
        """Run with the caller's terminal attached; Ctrl-C is forwarded to the child."""
        proc = subprocess.Popen(command, shell=True)
        try:
            return proc.wait()
        except KeyboardInterrupt:
            logger.debug("Forwarding interrupt to foreground command", pid=proc.pid)
            proc.send_signal(signal.SIGINT)
            proc.wait()
            raise

    def start(self, command: str, *, foreground: bool = False) -> int:
        if not foreground:
            return self._run_captured(command).exit_code
        exit_code = self._run_foreground(command)
        if exit_code != 0:
            raise RuntimeCommandFailed(command, exit_code)
        return exit_code

    def exec(self, command: str) -> ExecResult:
        return self._run_captured(command)

    def stream(self, command: str) -> int:
        exit_code = self._run_foreground(command)
        if exit_code != 0:
            raise RuntimeCommandFailed(command, exit_code)
        return exit_code

    def spawn(self, command: str) -> int:
        """Start *command* in the background, detached from this process."""
        proc = subprocess.Popen(
            command,
            shell=True,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
        logger.debug("Spawned background command", command=command, pid=proc.pid)
        return proc.pid

    # -- Session management ----------------------------------------------

    def list(self) -> str:
        return self._run_captured(f"{self.cli} sandbox ls").stdout

    def remove(self, name: str) -> None:
        self._run_captured(f"{self.cli} sandbox rm {shell_quote(name)}")

    def image_exists(self, image: str) -> bool:
        try:
            self._run_captured(f"{self.cli} image inspect {shell_quote(image)}")
        except RuntimeCommandFailed:
            return False
        return True


_runtime: RuntimeClient | None = None


def get_runtime() -> RuntimeClient:
    """Shared runtime, built on first use from ``[container].cli``."""
    global _runtime  # noqa: PLW0603
    if _runtime is None:
        from sandbelt.config import get_settings

        _runtime = DockerSandboxRuntime(cli=get_settings().container.cli)
        logger.debug("Container runtime selected", cli=_runtime.cli)
    return _runtime
