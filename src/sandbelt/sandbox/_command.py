"""Command-line construction for the container CLI.

Pure string building: every user-controlled value (names, paths, prompts,
env values) goes through :func:`shell_quote` before interpolation.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from sandbelt.config import get_settings
from sandbelt.model_config import ModelConfig
from sandbelt.types import WorkspaceMount
from sandbelt.utils import shell_quote


def build_sandbox_command(
    name: str,
    workspaces: Sequence[WorkspaceMount],
    *,
    model: ModelConfig,
    existing: bool = False,
    prompt: str | None = None,
    continue_conversation: bool = False,
    detached: bool = False,
) -> str:
    """Build the ``sandbox run`` command that creates or reconnects to a session.

    Existing session: ``<cli> sandbox run <name> [-- --print <prompt>]``.
    New session: ``<cli> sandbox run --name <name> -t <template> [-e K=V ...]
    [--detach] <agent> <workspace> ... [-- --print <prompt> | -- --continue]``.
    """
    s = get_settings()
    args = [s.container.cli, "sandbox", "run"]

    if existing:
        args.append(shell_quote(name))
    else:
        args.extend(["--name", shell_quote(name), "-t", shell_quote(s.container.template)])
        for key, value in model.container_env().items():
            args.extend(["-e", shell_quote(f"{key}={value}")])
        if detached:
            args.append("--detach")
        args.append(s.agent.binary)
        args.extend(shell_quote(str(ws)) for ws in workspaces)

    agent_args: list[str] = []
    if prompt:
        agent_args.extend(["--print", shell_quote(prompt)])
    elif continue_conversation and not existing:
        agent_args.append("--continue")
    if agent_args:
        args.append("--")
        args.extend(agent_args)

    return " ".join(args)


def build_agent_invocation(
    prompt: str,
    *,
    workdir: str | None = None,
    continue_conversation: bool = False,
) -> str:
    """Shell snippet that pipes *prompt* into the agent in print mode."""
    s = get_settings()
    agent = f"{s.agent.binary} -p --output-format {s.agent.output_format} --verbose"
    if continue_conversation:
        agent += " --continue"
    script = f"echo {shell_quote(prompt)} | {agent}"
    if workdir:
        script = f"cd {shell_quote(workdir)} && {script}"
    return script


def build_exec_command(
    name: str,
    prompt: str,
    *,
    workdir: str | None = None,
    continue_conversation: bool = False,
    output_file: Path | None = None,
) -> str:
    """Run the agent inside a running session, optionally redirecting to *output_file*."""
    s = get_settings()
    script = build_agent_invocation(
        prompt, workdir=workdir, continue_conversation=continue_conversation
    )
    command = f"{s.container.cli} exec {shell_quote(name)} bash -c {shell_quote(script)}"
    if output_file is not None:
        command += f" > {shell_quote(str(output_file))} 2>&1"
    return command
