"""User-facing console output.

Diagnostics go through :mod:`sandbelt.logger`; this module only prints the
lines a person running the CLI is meant to read.
"""

from __future__ import annotations

import os
import sys

_CODES = {"red": "31", "green": "32", "yellow": "33", "cyan": "36"}


def _use_color() -> bool:
    return sys.stdout.isatty() and "NO_COLOR" not in os.environ


def _paint(color: str, text: str) -> str:
    if not _use_color():
        return text
    return f"\033[{_CODES[color]}m{text}\033[0m"


def red(text: str) -> str:
    return _paint("red", text)


def green(text: str) -> str:
    return _paint("green", text)


def yellow(text: str) -> str:
    return _paint("yellow", text)


def cyan(text: str) -> str:
    return _paint("cyan", text)


def echo(text: str = "", *, err: bool = False) -> None:
    print(text, file=sys.stderr if err else sys.stdout, flush=True)
