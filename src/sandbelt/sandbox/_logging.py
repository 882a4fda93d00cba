"""Session and task log file writing.

Log files are append-only: header first, then (for tasks) streamed output,
then a completion marker.
"""

from __future__ import annotations

from pathlib import Path

from sandbelt.utils import utc_now_iso


def _preview(prompt: str, limit: int) -> str:
    return prompt[:limit] + ("..." if len(prompt) > limit else "")


def write_session_header(
    log_file: Path,
    *,
    sandbox_name: str,
    mode: str,
    workspace: str,
    prompt: str | None,
    preview_chars: int = 100,
) -> None:
    lines = [
        "=== Sandbox Session ===",
        f"Sandbox: {sandbox_name}",
        f"Started: {utc_now_iso()}",
        f"Mode: {mode}",
        f"Workspace: {workspace}",
    ]
    if prompt:
        lines.append(f"Prompt: {_preview(prompt, preview_chars)}")
    lines.append("---")
    with log_file.open("a", encoding="utf-8") as fh:
        fh.write("\n".join(lines) + "\n")


def write_task_header(
    log_file: Path,
    *,
    task_id: str,
    sandbox: str,
    prompt: str,
    preview_chars: int = 200,
) -> None:
    lines = [
        f"Task: {task_id}",
        f"Sandbox: {sandbox}",
        f"Started: {utc_now_iso()}",
        f"Prompt: {_preview(prompt, preview_chars)}",
        "---",
    ]
    log_file.write_text("\n".join(lines) + "\n", encoding="utf-8")


def append_completion(log_file: Path, *, status: str | None = None) -> None:
    line = f"\nCompleted: {utc_now_iso()}"
    if status:
        line += f" ({status})"
    with log_file.open("a", encoding="utf-8") as fh:
        fh.write(line + "\n")
