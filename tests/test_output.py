"""Tests for NDJSON agent output parsing."""

from __future__ import annotations

import json

from sandbelt.sandbox._output import (
    extract_result,
    find_result,
    parse_ndjson,
    read_final_result,
    read_result_record,
)


def _ndjson(*records: dict) -> str:
    return "\n".join(json.dumps(r) for r in records) + "\n"


class TestParseNdjson:
    def test_skips_blank_and_malformed_lines(self):
        content = '{"a": 1}\n\nnot json\n[1, 2]\n{"b": 2}\n'
        assert parse_ndjson(content) == [{"a": 1}, {"b": 2}]

    def test_empty_content(self):
        assert parse_ndjson("") == []


class TestFindResult:
    def test_last_result_record_wins(self):
        records = [
            {"type": "result", "result": "first"},
            {"type": "assistant"},
            {"type": "result", "result": "second"},
            {"type": "system"},
        ]
        assert find_result(records)["result"] == "second"

    def test_falls_back_to_last_record(self):
        assert find_result([{"type": "a"}, {"type": "b"}]) == {"type": "b"}

    def test_nothing_to_find(self):
        assert find_result([]) is None


class TestExtractResult:
    def test_prefers_result(self):
        assert extract_result({"result": "r", "message": "m"}) == "r"

    def test_falls_back_to_message(self):
        assert extract_result({"message": "m"}) == "m"

    def test_default_text(self):
        assert extract_result({}) == "No result found"


class TestReadFinalResult:
    def test_reads_result_from_file(self, tmp_path):
        out = tmp_path / "demo.json"
        out.write_text(
            _ndjson({"type": "system"}, {"type": "result", "result": "All done", "is_error": False})
        )
        assert read_final_result(out) == "All done"

    def test_missing_file(self, tmp_path):
        assert read_final_result(tmp_path / "missing.json") is None
        assert read_result_record(tmp_path / "missing.json") is None

    def test_file_without_records(self, tmp_path):
        out = tmp_path / "demo.json"
        out.write_text("plain text only\n")
        assert read_final_result(out) is None
