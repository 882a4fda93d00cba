"""Entry point for `python -m sandbelt` / `sandbelt`.

Subcommands:
    sandbelt run [-n NAME] [-p PROMPT | -f FILE] [-d] [-o OUT] [-c] WORKSPACE...
    sandbelt task SANDBOX [PROMPT | -] [-f FILE] [-o OUT] [-w]
    sandbelt status
    sandbelt cleanup [NAME | --all] [--worktrees] [--logs]
    sandbelt logs [PATTERN] [-f] [-n LINES] [-o] [-a] [-l]
    sandbelt connect [NAME] [-p PROMPT]
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable

from sandbelt.console import echo, green, red, yellow

_ERROR_MESSAGES = {
    "run": "Error in sandbox run",
    "task": "Error in sandbox task",
    "status": "Error in sandbox status",
    "cleanup": "Error in sandbox cleanup",
    "logs": "Error in sandbox logs",
    "connect": "Error in sandbox connect",
}


def _run(args: argparse.Namespace) -> None:
    from sandbelt.sandbox import generate_sandbox_name, run_session
    from sandbelt.sandbox._output import read_final_result
    from sandbelt.types import SessionConfig, SessionMode

    result = run_session(
        SessionConfig(
            sandbox_name=args.name or generate_sandbox_name(),
            workspace=tuple(args.workspace),
            prompt=args.prompt,
            prompt_file=args.prompt_file,
            detached=args.detached,
            continue_conversation=args.continue_conversation,
            output_file=args.output,
        )
    )
    if result.mode is SessionMode.HEADLESS and result.output_file is not None:
        _print_result(read_final_result(result.output_file), result.output_file)
    if result.status == "failed":
        echo(red(_ERROR_MESSAGES["run"]), err=True)
        echo(result.error or "Agent reported an error", err=True)
        raise SystemExit(1)


def _task(args: argparse.Namespace) -> None:
    from sandbelt.sandbox import send_task
    from sandbelt.sandbox._output import read_final_result

    prompt = args.prompt
    if prompt == "-":
        prompt = sys.stdin.read()
    result = send_task(
        args.sandbox,
        prompt,
        prompt_file=args.prompt_file,
        output_file=args.output,
        wait=args.wait,
    )
    if result.status == "completed":
        _print_result(read_final_result(result.output_file), result.output_file)


def _status(args: argparse.Namespace) -> None:
    from sandbelt.sandbox import display_status

    display_status()


def _cleanup(args: argparse.Namespace) -> None:
    from sandbelt.sandbox import cleanup

    target = "--all" if args.all else args.name
    result = cleanup(
        target,
        remove_worktrees=args.worktrees or args.all,
        remove_logs=args.logs or args.all,
    )
    if result.failed:
        echo(yellow(f"Failed to remove: {', '.join(result.failed)}"), err=True)


def _logs(args: argparse.Namespace) -> None:
    from sandbelt.sandbox import list_files, show_logs

    if args.list:
        list_files(show_output=args.output)
        return
    show_logs(
        pattern=args.pattern,
        lines=args.lines,
        follow_output=args.follow,
        show_output=args.output,
        show_all=args.all,
    )


def _connect(args: argparse.Namespace) -> None:
    from sandbelt.sandbox import connect

    result = connect(args.name, prompt=args.prompt)
    if not result.connected:
        raise SystemExit(1)


def _print_result(text: str | None, output_file: object) -> None:
    if text is None:
        echo(yellow(f"No result found in {output_file}"))
        return
    border = "─" * 60
    echo()
    echo(yellow(border))
    echo(green("Result:"))
    echo(text)
    echo(yellow(border))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sandbelt",
        description="Run coding agents in disposable container sandboxes",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Start a sandbox session")
    run.add_argument("-n", "--name", help="Sandbox name (default: <prefix>-<timestamp>)")
    prompt_group = run.add_mutually_exclusive_group()
    prompt_group.add_argument("-p", "--prompt", help="Prompt for the agent (headless mode)")
    prompt_group.add_argument("-f", "--prompt-file", help="Read the prompt from a file")
    run.add_argument("-d", "--detached", action="store_true", help="Run in the background")
    run.add_argument("-o", "--output", help="Write agent output to this file")
    run.add_argument(
        "-c",
        "--continue",
        dest="continue_conversation",
        action="store_true",
        help="Continue the previous conversation",
    )
    run.add_argument(
        "workspace",
        nargs="+",
        help="Workspace directories (comma-separated allowed, ':ro' suffix for read-only)",
    )
    run.set_defaults(func=_run)

    task = sub.add_parser("task", help="Send a task to a running sandbox")
    task.add_argument("sandbox", help="Name of a running sandbox")
    task.add_argument("prompt", nargs="?", help="Prompt text, or '-' to read stdin")
    task.add_argument("-f", "--file", dest="prompt_file", help="Read the prompt from a file")
    task.add_argument("-o", "--output", help="Write task output to this file")
    task.add_argument("-w", "--wait", action="store_true", help="Wait for completion")
    task.set_defaults(func=_task)

    status = sub.add_parser("status", help="Show sandboxes, recent logs and worktrees")
    status.set_defaults(func=_status)

    cleanup = sub.add_parser("cleanup", help="Remove sandboxes")
    target = cleanup.add_mutually_exclusive_group()
    target.add_argument("name", nargs="?", help="Sandbox to remove")
    target.add_argument(
        "--all", action="store_true", help="Remove every sandbox, worktree and log"
    )
    cleanup.add_argument("--worktrees", action="store_true", help="Also remove worktrees")
    cleanup.add_argument("--logs", action="store_true", help="Also remove log files")
    cleanup.set_defaults(func=_cleanup)

    logs = sub.add_parser("logs", help="Show session and task logs")
    logs.add_argument("pattern", nargs="?", help="Only files whose name contains this")
    logs.add_argument("-f", "--follow", action="store_true", help="Follow with tail -f")
    logs.add_argument("-n", "--lines", type=int, default=50, help="Lines to show (default 50)")
    logs.add_argument("-o", "--output", action="store_true", help="Show output files instead")
    logs.add_argument("-a", "--all", action="store_true", help="Show up to 10 files")
    logs.add_argument("-l", "--list", action="store_true", help="Only list files")
    logs.set_defaults(func=_logs)

    connect = sub.add_parser("connect", help="Reconnect to a running sandbox")
    connect.add_argument("name", nargs="?", help="Sandbox name (default: choose)")
    connect.add_argument("-p", "--prompt", help="Prompt to send on connect")
    connect.set_defaults(func=_connect)

    return parser


def _handle_errors(func: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
    from sandbelt.errors import Canceled, SandboxError

    try:
        func(args)
    except Canceled:
        echo(yellow("canceled"))
        return 0
    except SandboxError as exc:
        echo(red(_ERROR_MESSAGES[args.command]), err=True)
        echo(str(exc), err=True)
        return 1
    except KeyboardInterrupt:
        echo()
        echo(yellow("canceled"))
        return 130
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    from sandbelt.config import get_settings
    from sandbelt.logger import set_level

    set_level("DEBUG" if args.verbose else get_settings().logging.level)
    sys.exit(_handle_errors(args.func, args))


if __name__ == "__main__":
    main()
