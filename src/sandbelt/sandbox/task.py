"""Send another instruction to a session that is already running.

Tasks are independent of the ``run`` that created the session: each gets its
own id, log file and output file.
"""

from __future__ import annotations

from pathlib import Path

from sandbelt.config import get_settings
from sandbelt.console import cyan, echo, green, red, yellow
from sandbelt.errors import (
    PromptFileMissing,
    PromptMissing,
    RuntimeCommandFailed,
    SessionNotFound,
)
from sandbelt.logger import logger
from sandbelt.runtime import RuntimeClient, get_runtime
from sandbelt.sandbox._command import build_exec_command
from sandbelt.sandbox._logging import append_completion, write_task_header
from sandbelt.sandbox.registry import list_sessions
from sandbelt.types import TaskResult
from sandbelt.utils import epoch_ms, shell_quote


def generate_task_id() -> str:
    return f"task-{epoch_ms()}"


def task_paths(sandbox: str, task_id: str, output_file: str | None = None) -> tuple[Path, Path]:
    """Return ``(output_file, log_file)`` for a task, creating their directories."""
    s = get_settings()
    s.logs_dir.mkdir(parents=True, exist_ok=True)
    s.output_dir.mkdir(parents=True, exist_ok=True)
    output = (
        Path(output_file).expanduser().absolute()
        if output_file
        else s.output_dir / f"{sandbox}-{task_id}.json"
    )
    output.parent.mkdir(parents=True, exist_ok=True)
    return output, s.logs_dir / f"{sandbox}-{task_id}.log"


def _read_prompt(prompt: str | None, prompt_file: str | None) -> str:
    if prompt_file:
        path = Path(prompt_file).expanduser()
        if not path.is_file():
            raise PromptFileMissing(str(path))
        prompt = path.read_text(encoding="utf-8").strip()
    if not prompt or not prompt.strip():
        raise PromptMissing("Prompt is required")
    return prompt


def _require_session(sandbox: str, runtime: RuntimeClient) -> None:
    running = [entry.name for entry in list_sessions(runtime) if entry.is_running]
    if sandbox in running:
        return
    echo(red(f"Error: Sandbox '{sandbox}' not found"), err=True)
    echo(err=True)
    echo("Running sandboxes:", err=True)
    for name in running or ["None"]:
        echo(f"  {name}", err=True)
    raise SessionNotFound(sandbox, running)


def send_task(
    sandbox: str,
    prompt: str | None = None,
    *,
    prompt_file: str | None = None,
    output_file: str | None = None,
    wait: bool = False,
    runtime: RuntimeClient | None = None,
) -> TaskResult:
    """Run the agent inside *sandbox* with a new prompt.

    With ``wait=True`` output streams to the terminal and is tee'd into the
    task's output and log files; otherwise the task runs in the background
    and appends its completion marker to the log when it finishes.

    Raises:
        SessionNotFound: If *sandbox* is not running.
        PromptFileMissing: If *prompt_file* does not exist.
        PromptMissing: If the resolved prompt is empty.
        RuntimeCommandFailed: If a ``wait=True`` task exits non-zero.
    """
    runtime = runtime or get_runtime()
    _require_session(sandbox, runtime)
    text = _read_prompt(prompt, prompt_file)

    task_id = generate_task_id()
    output, log_file = task_paths(sandbox, task_id, output_file)

    echo(cyan(f"Sending task to {sandbox}..."))
    echo(f"  Task ID: {task_id}")
    echo(f"  Output:  {output}")

    write_task_header(log_file, task_id=task_id, sandbox=sandbox, prompt=text)
    exec_command = build_exec_command(sandbox, text)
    q_out, q_log = shell_quote(str(output)), shell_quote(str(log_file))
    logger.info("Dispatching task", sandbox=sandbox, task_id=task_id, wait=wait)

    if wait:
        # pipefail: the exit status is the agent's, not the last tee's
        pipeline = f"{exec_command} 2>&1 | tee {q_out} | tee -a {q_log}"
        command = f"bash -o pipefail -c {shell_quote(pipeline)}"
        echo(yellow(command))
        try:
            runtime.stream(command)
        except RuntimeCommandFailed:
            append_completion(log_file, status="failed")
            raise
        append_completion(log_file)
        echo()
        echo(green("Task completed"))
        status = "completed"
    else:
        command = (
            f"({exec_command} > {q_out} 2>&1; "
            f'echo "" >> {q_log}; '
            f'echo "Completed: $(date -u +%Y-%m-%dT%H:%M:%SZ)" >> {q_log})'
        )
        echo(yellow(command))
        runtime.spawn(command)
        echo()
        echo(green("Task started in background"))
        echo()
        echo("Commands:")
        echo(yellow(f"  tail -f {output}  # Watch output"))
        echo(yellow(f"  cat {output}      # View result"))
        status = "running"

    return TaskResult(
        task_id=task_id,
        sandbox=sandbox,
        output_file=output,
        log_file=log_file,
        status=status,
    )
