"""Fixtures and test doubles shared by the sandbelt test suite."""

from __future__ import annotations

import shlex
from pathlib import Path

import pytest

from sandbelt.errors import RuntimeCommandFailed
from sandbelt.types import ExecResult

# Helpers imported directly by test modules (`from conftest import ...`)

# Settings properties that model_construct cannot set; written into __dict__.
_CACHED_PROPERTY_NAMES = frozenset(
    {
        "base_dir",
        "logs_dir",
        "output_dir",
        "worktrees_dir",
    }
)


def make_settings(**overrides):
    """Build Settings without reading config.toml or the environment.

    Keyword arguments are either sub-models (``paths``, ``container``, ...)
    or derived directories (``logs_dir``, ``output_dir``, ...).

    Usage::

        s = make_settings(paths=PathsConfig(base_dir=tmp_path))
        s = make_settings(container=ContainerConfig(ready_timeout=0))
    """
    from sandbelt.config import (
        AgentConfig,
        ContainerConfig,
        LoggingConfig,
        PathsConfig,
        Settings,
    )

    cached = {k: overrides.pop(k) for k in list(overrides) if k in _CACHED_PROPERTY_NAMES}

    defaults = {
        "paths": PathsConfig(),
        "container": ContainerConfig(ready_poll_interval=0.0),
        "agent": AgentConfig(),
        "logging": LoggingConfig(),
    }
    defaults.update(overrides)
    s = Settings.model_construct(**defaults)

    for key, value in cached.items():
        s.__dict__[key] = value

    return s


def _name_from_start(command: str) -> str | None:
    tokens = shlex.split(command)
    if "--name" in tokens:
        return tokens[tokens.index("--name") + 1]
    return None


def _redirect_target(command: str) -> str | None:
    tokens = shlex.split(command)
    if ">" in tokens:
        return tokens[tokens.index(">") + 1]
    return None


class FakeRuntime:
    """Recording stand-in for :class:`sandbelt.runtime.DockerSandboxRuntime`.

    ``sessions`` maps name -> runtime status. ``calls`` records every
    operation in order as ``(op, arg)`` tuples.
    """

    cli = "docker"

    def __init__(
        self,
        sessions: dict[str, str] | None = None,
        *,
        fail_remove: tuple[str, ...] = (),
        fail_start: bool = False,
        fail_exec: bool = False,
        fail_stream: bool = False,
        fail_list: bool = False,
        has_template: bool = True,
        exec_output: str | None = None,
        start_status: str = "running",
    ) -> None:
        self.sessions = dict(sessions or {})
        self.calls: list[tuple[str, str]] = []
        self.fail_remove = fail_remove
        self.fail_start = fail_start
        self.fail_exec = fail_exec
        self.fail_stream = fail_stream
        self.fail_list = fail_list
        self.has_template = has_template
        self.exec_output = exec_output
        self.start_status = start_status

    def ops(self) -> list[str]:
        return [op for op, _ in self.calls]

    def start(self, command: str, *, foreground: bool = False) -> int:
        self.calls.append(("start", command))
        if self.fail_start:
            raise RuntimeCommandFailed(command, 1, "start failed")
        name = _name_from_start(command)
        if name is not None:
            self.sessions[name] = self.start_status
        return 0

    def exec(self, command: str) -> ExecResult:
        self.calls.append(("exec", command))
        if self.fail_exec:
            raise RuntimeCommandFailed(command, 2, "exec failed")
        target = _redirect_target(command)
        if target is not None and self.exec_output is not None:
            Path(target).write_text(self.exec_output)
        return ExecResult(exit_code=0, stdout="", stderr="", duration_ms=1)

    def stream(self, command: str) -> int:
        self.calls.append(("stream", command))
        if self.fail_stream:
            raise RuntimeCommandFailed(command, 1, "exec failed")
        return 0

    def spawn(self, command: str) -> int:
        self.calls.append(("spawn", command))
        return 4242

    def list(self) -> str:
        self.calls.append(("list", ""))
        if self.fail_list:
            raise RuntimeCommandFailed("docker sandbox ls", 1, "daemon down")
        rows = ["NAME".ljust(20) + "TEMPLATE".ljust(20) + "STATUS"]
        rows += [
            name.ljust(20) + "gastown:latest".ljust(20) + status
            for name, status in self.sessions.items()
        ]
        return "\n".join(rows) + "\n"

    def remove(self, name: str) -> None:
        self.calls.append(("remove", name))
        if name in self.fail_remove:
            raise RuntimeCommandFailed(f"docker sandbox rm '{name}'", 1, "permission denied")
        if name not in self.sessions:
            raise RuntimeCommandFailed(f"docker sandbox rm '{name}'", 1, "no such sandbox")
        del self.sessions[name]

    def image_exists(self, image: str) -> bool:
        self.calls.append(("image_exists", image))
        return self.has_template


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch, tmp_path):
    """Point the Settings singleton at a per-test base dir and drop the cached runtime."""
    from sandbelt.config import PathsConfig

    safe = make_settings(paths=PathsConfig(base_dir=tmp_path / "sandbelt-home"))
    monkeypatch.setattr("sandbelt.config._settings", safe)
    monkeypatch.setattr("sandbelt.runtime._runtime", None)


@pytest.fixture
def settings():
    from sandbelt.config import get_settings

    return get_settings()


@pytest.fixture
def workspace(tmp_path):
    ws = tmp_path / "proj"
    ws.mkdir()
    return ws
