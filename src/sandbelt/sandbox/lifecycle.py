"""Session lifecycle: validate, clear stale state, start, dispatch, report.

State flow for one invocation::

    Created -> Removed-Stale -> Planned -> Running -> Completed | Failed

Validation (workspace, prompt file, template) happens before the runtime is
asked to do anything, so a bad config leaves no partial state behind. Any
existing session with the same name is force-removed before the new one is
created: the last writer wins a name.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path

from sandbelt.config import get_settings
from sandbelt.console import cyan, echo, green, yellow
from sandbelt.errors import (
    PromptFileMissing,
    PromptMissing,
    RuntimeCommandFailed,
    SandboxError,
    TemplateMissing,
)
from sandbelt.logger import logger
from sandbelt.model_config import ModelConfig, load_model_config
from sandbelt.runtime import RuntimeClient, get_runtime
from sandbelt.sandbox._command import build_exec_command, build_sandbox_command
from sandbelt.sandbox._logging import append_completion, write_session_header
from sandbelt.sandbox._output import extract_result, read_result_record
from sandbelt.sandbox._paths import plan_paths
from sandbelt.sandbox._workspace import resolve_workspaces
from sandbelt.sandbox.registry import wait_until_running
from sandbelt.types import (
    SessionConfig,
    SessionMode,
    SessionPaths,
    SessionResult,
    WorkspaceMount,
)
from sandbelt.utils import epoch_ms


def derive_mode(config: SessionConfig) -> SessionMode:
    """Detached if asked for, headless if there is a prompt, interactive otherwise."""
    if config.detached:
        return SessionMode.DETACHED
    if config.prompt or config.prompt_file:
        return SessionMode.HEADLESS
    return SessionMode.INTERACTIVE


def generate_sandbox_name() -> str:
    return f"{get_settings().agent.name_prefix}-{epoch_ms()}"


def read_prompt_file(prompt_file: str) -> str:
    path = Path(prompt_file).expanduser()
    if not path.is_file():
        raise PromptFileMissing(str(path))
    return path.read_text(encoding="utf-8")


def resolve_prompt(config: SessionConfig) -> str | None:
    """The prompt text, or None for an interactive session.

    Raises:
        PromptFileMissing: If the prompt file does not exist.
        PromptMissing: If the prompt (or prompt file) is only whitespace.
    """
    if config.prompt_file:
        prompt = read_prompt_file(config.prompt_file)
    elif config.prompt:
        prompt = config.prompt
    else:
        return None
    if not prompt.strip():
        raise PromptMissing("Prompt is required")
    return prompt


class SessionManager:
    """Runs one :class:`SessionConfig` to a :class:`SessionResult`.

    The runtime and the model config are injected so tests can drive the
    whole state machine against a fake runtime.
    """

    def __init__(
        self,
        runtime: RuntimeClient | None = None,
        model: ModelConfig | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.runtime = runtime or get_runtime()
        self.model = model if model is not None else load_model_config()
        self._sleep = sleep

    # -- Stages -----------------------------------------------------------

    def check_template(self) -> None:
        template = get_settings().container.template
        if not self.runtime.image_exists(template):
            raise TemplateMissing(template)

    def remove_stale(self, name: str) -> None:
        """Force-remove any session called *name*; absence is the common case."""
        try:
            self.runtime.remove(name)
            logger.debug("Removed stale sandbox", sandbox=name)
        except RuntimeCommandFailed as exc:
            logger.debug("No stale sandbox removed", sandbox=name, err=str(exc))

    def _teardown(self, name: str) -> None:
        try:
            self.runtime.remove(name)
        except RuntimeCommandFailed as exc:
            logger.warning("Failed to tear down sandbox", sandbox=name, err=str(exc))

    def _wait_ready(self, name: str) -> None:
        s = get_settings()
        wait_until_running(
            name,
            self.runtime,
            timeout=s.container.ready_timeout,
            poll_interval=s.container.ready_poll_interval,
            sleep=self._sleep,
        )

    # -- Entry point ------------------------------------------------------

    def run(self, config: SessionConfig) -> SessionResult:
        s = get_settings()

        # Created: validate everything before touching the runtime's sessions
        workspaces = resolve_workspaces(config.workspace)
        prompt = resolve_prompt(config)
        self.check_template()
        mode = derive_mode(config)
        name = config.sandbox_name

        # Removed-Stale
        self.remove_stale(name)

        # Planned
        paths = plan_paths(name, config.output_file)
        command = build_sandbox_command(
            name,
            workspaces,
            model=self.model,
            continue_conversation=config.continue_conversation and not prompt,
            detached=mode is not SessionMode.INTERACTIVE,
        )
        primary = workspaces[0].path
        write_session_header(
            paths.log_file,
            sandbox_name=name,
            mode=mode.value,
            workspace=", ".join(str(ws) for ws in workspaces),
            prompt=prompt,
            preview_chars=s.agent.prompt_preview_chars,
        )
        _print_startup_info(name, workspaces, mode, paths)
        logger.info("Starting sandbox", sandbox=name, mode=mode.value, workspace=primary)

        # Running
        match mode:
            case SessionMode.INTERACTIVE:
                return self._run_interactive(name, primary, command, paths)
            case SessionMode.HEADLESS:
                if not prompt:
                    raise PromptMissing("Prompt is required")
                return self._run_headless(name, primary, command, paths, prompt, config)
            case SessionMode.DETACHED:
                return self._run_detached(name, primary, command, paths, prompt, config)

    # -- Mode runners -----------------------------------------------------

    def _run_interactive(
        self, name: str, workspace: str, command: str, paths: SessionPaths
    ) -> SessionResult:
        echo(yellow(command))
        echo()
        try:
            self.runtime.start(command, foreground=True)
        except RuntimeCommandFailed:
            append_completion(paths.log_file, status="failed")
            raise
        finally:
            self._teardown(name)

        append_completion(paths.log_file)
        echo()
        echo(green("Sandbox exited"))
        return SessionResult(
            sandbox_name=name,
            mode=SessionMode.INTERACTIVE,
            workspace=workspace,
            log_file=paths.log_file,
            status="completed",
        )

    def _run_headless(
        self,
        name: str,
        workspace: str,
        command: str,
        paths: SessionPaths,
        prompt: str,
        config: SessionConfig,
    ) -> SessionResult:
        echo(yellow(command))
        try:
            self.runtime.start(command)
            self._wait_ready(name)
            exec_command = build_exec_command(
                name,
                prompt,
                workdir=workspace,
                continue_conversation=config.continue_conversation,
                output_file=paths.output_file,
            )
            echo(yellow(exec_command))
            echo(green("Claude is working..."))
            self.runtime.exec(exec_command)
        except SandboxError:
            append_completion(paths.log_file, status="failed")
            raise
        finally:
            self._teardown(name)

        append_completion(paths.log_file)

        status = "completed"
        error = None
        record = read_result_record(paths.output_file)
        if record is not None and record.get("is_error"):
            status = "failed"
            error = extract_result(record)
            logger.warning("Agent reported an error", sandbox=name, error=error)

        return SessionResult(
            sandbox_name=name,
            mode=SessionMode.HEADLESS,
            workspace=workspace,
            log_file=paths.log_file,
            output_file=paths.output_file,
            status=status,
            error=error,
        )

    def _run_detached(
        self,
        name: str,
        workspace: str,
        command: str,
        paths: SessionPaths,
        prompt: str | None,
        config: SessionConfig,
    ) -> SessionResult:
        echo(yellow(command))
        output_file = None
        try:
            self.runtime.start(command)
            if prompt:
                self._wait_ready(name)
                exec_command = build_exec_command(
                    name,
                    prompt,
                    workdir=workspace,
                    continue_conversation=config.continue_conversation,
                    output_file=paths.output_file,
                )
                echo(yellow(exec_command))
                self.runtime.spawn(exec_command)
                output_file = paths.output_file
        except SandboxError:
            append_completion(paths.log_file, status="failed")
            self._teardown(name)
            raise
        if output_file is not None:
            echo(green("Claude is working in background"))

        echo()
        echo("Commands:")
        echo(yellow(f"  sandbelt connect {name}     # Reconnect"))
        echo(yellow(f"  sandbelt task {name} ...    # Send another task"))
        if output_file is not None:
            echo(yellow(f"  tail -f {output_file}  # Watch output"))
        echo(yellow(f"  sandbelt cleanup {name}     # Remove when done"))

        return SessionResult(
            sandbox_name=name,
            mode=SessionMode.DETACHED,
            workspace=workspace,
            log_file=paths.log_file,
            output_file=output_file,
            status="running",
        )


def _print_startup_info(
    name: str, workspaces: list[WorkspaceMount], mode: SessionMode, paths: SessionPaths
) -> None:
    echo(green("Starting sandbox"))
    echo(f"  Name:       {name}")
    echo(f"  Mode:       {cyan(mode.value)}")
    echo(f"  Workspaces: {', '.join(str(ws) for ws in workspaces)}")
    echo(f"  Log:        {paths.log_file}")
    echo()


def run_session(
    config: SessionConfig,
    *,
    runtime: RuntimeClient | None = None,
    model: ModelConfig | None = None,
) -> SessionResult:
    """Convenience wrapper around :class:`SessionManager`."""
    return SessionManager(runtime=runtime, model=model).run(config)
