"""Tests for the command-line entry point."""

from __future__ import annotations

import io
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from sandbelt.__main__ import build_parser, main
from sandbelt.errors import Canceled, InvalidWorkspace
from sandbelt.types import (
    CleanupResult,
    ConnectResult,
    SessionMode,
    SessionResult,
    TaskResult,
)


def _exit_code(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


def _session_result(status="completed", output_file=None, mode=SessionMode.HEADLESS):
    return SessionResult(
        sandbox_name="demo",
        mode=mode,
        workspace="/w",
        log_file=Path("/tmp/demo.log"),
        status=status,
        output_file=output_file,
    )


class TestParser:
    def test_run_arguments(self):
        args = build_parser().parse_args(["run", "-n", "demo", "-p", "hi", "-c", "/a", "/b"])
        assert args.name == "demo"
        assert args.prompt == "hi"
        assert args.continue_conversation
        assert args.workspace == ["/a", "/b"]

    def test_prompt_and_file_are_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["run", "-p", "hi", "-f", "p.txt", "/a"])

    def test_run_requires_workspace(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["run"])

    def test_cleanup_name_and_all_are_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["cleanup", "demo", "--all"])


class TestRun:
    def test_headless_prints_result(self, tmp_path, capsys):
        out = tmp_path / "demo.json"
        out.write_text(json.dumps({"type": "result", "result": "All done"}) + "\n")
        result = _session_result(output_file=out)
        with patch("sandbelt.sandbox.run_session", return_value=result) as m:
            assert _exit_code(["run", "-n", "demo", "-p", "hi", str(tmp_path)]) == 0
        config = m.call_args[0][0]
        assert config.sandbox_name == "demo"
        assert config.prompt == "hi"
        assert config.workspace == (str(tmp_path),)
        assert "All done" in capsys.readouterr().out

    def test_agent_failure_exits_non_zero(self, tmp_path, capsys):
        result = SessionResult(
            sandbox_name="demo",
            mode=SessionMode.HEADLESS,
            workspace="/w",
            log_file=Path("/tmp/demo.log"),
            status="failed",
            error="Rate limited",
        )
        with patch("sandbelt.sandbox.run_session", return_value=result):
            assert _exit_code(["run", "-p", "hi", str(tmp_path)]) == 1
        err = capsys.readouterr().err
        assert "Error in sandbox run" in err
        assert "Rate limited" in err

    def test_generated_name(self, tmp_path):
        result = _session_result(mode=SessionMode.INTERACTIVE)
        with (
            patch("sandbelt.sandbox.run_session", return_value=result) as m,
            patch("sandbelt.sandbox.generate_sandbox_name", return_value="gastown-1"),
        ):
            _exit_code(["run", str(tmp_path)])
        assert m.call_args[0][0].sandbox_name == "gastown-1"

    def test_sandbox_error_is_reported(self, capsys):
        with patch("sandbelt.sandbox.run_session", side_effect=InvalidWorkspace("/nope")):
            assert _exit_code(["run", "/nope"]) == 1
        err = capsys.readouterr().err
        assert "Error in sandbox run" in err
        assert "/nope" in err


class TestTask:
    def test_stdin_prompt(self, monkeypatch, tmp_path):
        monkeypatch.setattr("sys.stdin", io.StringIO("from stdin"))
        result = TaskResult(
            task_id="task-1",
            sandbox="demo",
            output_file=tmp_path / "o.json",
            log_file=tmp_path / "o.log",
            status="running",
        )
        with patch("sandbelt.sandbox.send_task", return_value=result) as m:
            assert _exit_code(["task", "demo", "-"]) == 0
        assert m.call_args[0] == ("demo", "from stdin")
        assert m.call_args.kwargs["wait"] is False


class TestCleanup:
    def test_all_implies_purges(self):
        with patch("sandbelt.sandbox.cleanup", return_value=CleanupResult()) as m:
            assert _exit_code(["cleanup", "--all"]) == 0
        m.assert_called_once_with("--all", remove_worktrees=True, remove_logs=True)

    def test_single_name(self):
        with patch("sandbelt.sandbox.cleanup", return_value=CleanupResult()) as m:
            _exit_code(["cleanup", "demo", "--logs"])
        m.assert_called_once_with("demo", remove_worktrees=False, remove_logs=True)


class TestConnect:
    def test_cancel_is_not_an_error(self):
        with patch("sandbelt.sandbox.connect", side_effect=Canceled):
            assert _exit_code(["connect"]) == 0

    def test_failed_connection(self):
        with patch(
            "sandbelt.sandbox.connect",
            return_value=ConnectResult(sandbox_name="demo", connected=False),
        ):
            assert _exit_code(["connect", "demo"]) == 1
