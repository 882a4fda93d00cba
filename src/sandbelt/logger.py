"""Diagnostic logging for sandbelt (structlog on top of stdlib logging).

Reads ``LOG_LEVEL`` from the environment rather than Settings so that
config loading itself can log. Everything goes to stderr; stdout is
reserved for the lines in :mod:`sandbelt.console`.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

DEFAULT_LEVEL = "WARNING"
MAX_FIELD_CHARS = 300

# Event fields that carry whole shell commands or prompts.
_LONG_FIELDS = ("command", "prompt")


def _level_from(name: str | None) -> int:
    return getattr(logging, (name or DEFAULT_LEVEL).upper(), logging.WARNING)


def _shorten_long_fields(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    for key in _LONG_FIELDS:
        value = event_dict.get(key)
        if isinstance(value, str) and len(value) > MAX_FIELD_CHARS:
            event_dict[key] = f"{value[:MAX_FIELD_CHARS]}... ({len(value)} chars)"
    return event_dict


def _setup_logging() -> structlog.stdlib.BoundLogger:
    logging.basicConfig(
        level=_level_from(os.environ.get("LOG_LEVEL")),
        format="%(message)s",
        stream=sys.stderr,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            _shorten_long_fields,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger("sandbelt")


logger = _setup_logging()


def set_level(level_name: str) -> None:
    """Raise or lower verbosity once the CLI knows about ``-v`` and config."""
    logging.getLogger().setLevel(_level_from(level_name))


def _log_uncaught(
    exc_type: type[BaseException],
    exc_value: BaseException,
    exc_tb: object,
) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_tb)  # type: ignore[arg-type]
        return
    logger.critical("Unhandled error", exc_info=(exc_type, exc_value, exc_tb))
    sys.exit(1)


sys.excepthook = _log_uncaught
