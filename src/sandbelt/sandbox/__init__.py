"""Sandbox session orchestration.

Re-exports the public API so callers can use
``from sandbelt.sandbox import run_session, send_task, cleanup``.
"""

from sandbelt.sandbox.cleanup import cleanup, cleanup_all
from sandbelt.sandbox.connect import connect
from sandbelt.sandbox.lifecycle import (
    SessionManager,
    derive_mode,
    generate_sandbox_name,
    run_session,
)
from sandbelt.sandbox.logs import list_files, show_logs
from sandbelt.sandbox.registry import list_sessions, parse_listing
from sandbelt.sandbox.status import display_status, get_status
from sandbelt.sandbox.task import send_task

__all__ = [
    "SessionManager",
    "cleanup",
    "cleanup_all",
    "connect",
    "derive_mode",
    "display_status",
    "generate_sandbox_name",
    "get_status",
    "list_files",
    "list_sessions",
    "parse_listing",
    "run_session",
    "send_task",
    "show_logs",
]
