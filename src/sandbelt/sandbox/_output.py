"""Parsing of newline-delimited JSON agent output."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from sandbelt.logger import logger


def parse_ndjson(content: str) -> list[dict[str, Any]]:
    """Return every line of *content* that parses as a JSON object."""
    records: list[dict[str, Any]] = []
    for line in content.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(obj, dict):
            records.append(obj)
    return records


def find_result(records: list[dict[str, Any]]) -> dict[str, Any] | None:
    """Last ``type == "result"`` record, else the last record, else None."""
    results = [r for r in records if r.get("type") == "result"]
    if results:
        return results[-1]
    return records[-1] if records else None


def extract_result(record: dict[str, Any]) -> str:
    return record.get("result") or record.get("message") or "No result found"


def read_result_record(output_file: Path) -> dict[str, Any] | None:
    if not output_file.is_file():
        logger.debug("Output file not found", path=str(output_file))
        return None
    try:
        content = output_file.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning("Error reading output file", path=str(output_file), err=str(exc))
        return None
    return find_result(parse_ndjson(content))


def read_final_result(output_file: Path) -> str | None:
    """Extract the agent's final answer from an output file, if there is one."""
    record = read_result_record(output_file)
    if record is None:
        return None
    return str(extract_result(record))
