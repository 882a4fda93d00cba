"""Tests for the status report."""

from __future__ import annotations

import os

from conftest import FakeRuntime

from sandbelt.sandbox.status import RECENT_LOG_COUNT, display_status, get_status


def _touch(path, mtime):
    path.write_text("x")
    os.utime(path, (mtime, mtime))


class TestGetStatus:
    def test_empty(self):
        report = get_status(FakeRuntime())
        assert report.sessions == []
        assert report.recent_logs == []
        assert report.worktrees == []

    def test_recent_logs_are_newest_first_and_capped(self, settings):
        settings.logs_dir.mkdir(parents=True)
        for i in range(RECENT_LOG_COUNT + 2):
            _touch(settings.logs_dir / f"s{i}.log", 1_700_000_000 + i)
        _touch(settings.logs_dir / "notes.txt", 1_800_000_000)

        report = get_status(FakeRuntime())
        names = [f.name for f in report.recent_logs]
        assert names == ["s6.log", "s5.log", "s4.log", "s3.log", "s2.log"]

    def test_worktrees_are_directories(self, settings):
        settings.worktrees_dir.mkdir(parents=True)
        (settings.worktrees_dir / "b").mkdir()
        (settings.worktrees_dir / "a").mkdir()
        (settings.worktrees_dir / "stray.txt").write_text("x")
        report = get_status(FakeRuntime())
        assert [w.name for w in report.worktrees] == ["a", "b"]

    def test_listing_failure_still_reports(self, settings):
        settings.logs_dir.mkdir(parents=True)
        _touch(settings.logs_dir / "s.log", 1_700_000_000)
        report = get_status(FakeRuntime(fail_list=True))
        assert report.sessions == []
        assert [f.name for f in report.recent_logs] == ["s.log"]


class TestDisplayStatus:
    def test_sections(self, capsys):
        display_status(FakeRuntime({"demo": "running"}))
        out = capsys.readouterr().out
        assert "=== Running Sandboxes ===" in out
        assert "  demo (running)" in out
        assert "=== Recent Logs ===" in out
        assert "=== Worktrees ===" in out
