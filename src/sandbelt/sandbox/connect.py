"""Reconnect a terminal to a session that is already running."""

from __future__ import annotations

from collections.abc import Callable

from sandbelt.console import cyan, echo, green, yellow
from sandbelt.errors import Canceled, RuntimeCommandFailed, SessionNotFound
from sandbelt.logger import logger
from sandbelt.model_config import ModelConfig, load_model_config
from sandbelt.runtime import RuntimeClient, get_runtime
from sandbelt.sandbox._command import build_sandbox_command
from sandbelt.sandbox.registry import list_sessions
from sandbelt.types import ConnectResult, RegistryEntry


def connectable_sessions(runtime: RuntimeClient) -> list[RegistryEntry]:
    return [entry for entry in list_sessions(runtime) if entry.is_running]


def select_session(
    sessions: list[RegistryEntry], choose: Callable[[str], str] = input
) -> str:
    """Numbered picker; ``0``, Ctrl-C or EOF cancels."""
    echo("Select a sandbox to connect to:")
    for i, entry in enumerate(sessions, start=1):
        echo(f"  {i}) {entry.name} {cyan('(running)')}")
    echo("  0) Cancel")
    while True:
        try:
            answer = choose("> ").strip()
        except (KeyboardInterrupt, EOFError) as exc:
            raise Canceled from exc
        if answer == "0":
            raise Canceled
        if answer.isdigit() and 1 <= int(answer) <= len(sessions):
            return sessions[int(answer) - 1].name
        echo(yellow(f"Enter a number between 0 and {len(sessions)}"))


def connect(
    sandbox_name: str | None = None,
    *,
    prompt: str | None = None,
    runtime: RuntimeClient | None = None,
    model: ModelConfig | None = None,
    choose: Callable[[str], str] = input,
) -> ConnectResult:
    """Attach to *sandbox_name*, or to one picked from the running sessions.

    Raises:
        SessionNotFound: If no name is given and nothing is running.
        Canceled: If the user backs out of the picker.
    """
    runtime = runtime or get_runtime()
    if not sandbox_name:
        running = connectable_sessions(runtime)
        if not running:
            echo(yellow("No running sandboxes found"))
            echo()
            echo("To see all sandboxes: sandbelt status")
            echo("To start a sandbox:   sandbelt run <workspace>")
            raise SessionNotFound("", [], "No running sandboxes available")
        sandbox_name = select_session(running, choose)

    command = build_sandbox_command(
        sandbox_name,
        [],
        model=model if model is not None else load_model_config(),
        existing=True,
        prompt=prompt,
    )
    echo(green(f"Connecting to {sandbox_name}..."))
    echo(yellow(command))
    echo()
    try:
        runtime.start(command, foreground=True)
    except RuntimeCommandFailed as exc:
        logger.warning("Connection failed", sandbox=sandbox_name, err=str(exc))
        echo()
        echo(yellow(f"Connection to {sandbox_name} failed: {exc}"))
        return ConnectResult(sandbox_name=sandbox_name, connected=False)

    echo()
    echo(green("Sandbox exited"))
    return ConnectResult(sandbox_name=sandbox_name, connected=True)
