"""Live view of sessions as reported by the runtime.

Nothing here is persisted: every call re-queries the runtime. Listing is
best-effort and never raises, so status output can't crash its caller.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable

from sandbelt.errors import RuntimeCommandFailed, SessionNotReady
from sandbelt.logger import logger
from sandbelt.runtime import RuntimeClient, get_runtime
from sandbelt.types import RegistryEntry

# Header cells are separated by two or more spaces; single spaces stay
# inside a cell ("SANDBOX ID", "2 hours ago").
_HEADER_CELL_RE = re.compile(r"\S+(?: \S+)*")
_FALLBACK_STATUS_INDEX = 2  # NAME  IMAGE  STATUS ...


def _cell(row: str, starts: list[int], index: int) -> str:
    start = starts[index]
    end = starts[index + 1] if index + 1 < len(starts) else None
    return row[start:end].strip()


def parse_listing(text: str) -> list[RegistryEntry]:
    """Parse the runtime's tabular listing into entries.

    The first row is a header and is skipped. The first column is the
    session name; the status comes from the ``STATUS`` column when the
    header has one, otherwise from the third whitespace-separated field.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) <= 1:
        return []

    header, rows = lines[0], lines[1:]
    cells = list(_HEADER_CELL_RE.finditer(header))
    starts = [m.start() for m in cells]
    status_index = next(
        (i for i, m in enumerate(cells) if m.group().upper() == "STATUS"),
        None,
    )

    entries: list[RegistryEntry] = []
    for row in rows:
        parts = row.split()
        if not parts:
            continue
        if status_index is not None:
            status = _cell(row, starts, status_index)
        else:
            status = parts[_FALLBACK_STATUS_INDEX] if len(parts) > _FALLBACK_STATUS_INDEX else ""
        entries.append(RegistryEntry(name=parts[0], runtime_status=status or "unknown"))
    return entries


def list_sessions(runtime: RuntimeClient | None = None) -> list[RegistryEntry]:
    """All sessions known to the runtime; ``[]`` if the query fails."""
    runtime = runtime or get_runtime()
    try:
        output = runtime.list()
    except (RuntimeCommandFailed, OSError) as exc:
        logger.warning("Failed to list sandboxes", err=str(exc))
        return []
    return parse_listing(output)


def session_names(runtime: RuntimeClient | None = None) -> list[str]:
    return [entry.name for entry in list_sessions(runtime)]


def find_session(name: str, runtime: RuntimeClient | None = None) -> RegistryEntry | None:
    for entry in list_sessions(runtime):
        if entry.name == name:
            return entry
    return None


def wait_until_running(
    name: str,
    runtime: RuntimeClient,
    *,
    timeout: float,
    poll_interval: float,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> RegistryEntry:
    """Poll the registry until *name* reports ``running``.

    Raises:
        SessionNotReady: If the session is not running within *timeout* seconds.
    """
    deadline = clock() + timeout
    attempts = 0
    while True:
        attempts += 1
        entry = find_session(name, runtime)
        if entry is not None and entry.is_running:
            logger.debug("Sandbox ready", sandbox=name, attempts=attempts)
            return entry
        if clock() >= deadline:
            logger.error(
                "Sandbox did not become ready",
                sandbox=name,
                status=entry.runtime_status if entry else None,
                timeout=timeout,
            )
            raise SessionNotReady(name, timeout)
        sleep(poll_interval)
