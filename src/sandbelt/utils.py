"""Small shared helpers."""

from __future__ import annotations

import time
from datetime import UTC, datetime


def shell_quote(value: str) -> str:
    """Single-quote *value* for safe interpolation into a POSIX shell command."""
    return "'" + value.replace("'", "'\\''") + "'"


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


def epoch_ms() -> int:
    return int(time.time() * 1000)
