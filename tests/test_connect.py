"""Tests for reconnecting to running sessions."""

from __future__ import annotations

import shlex

import pytest
from conftest import FakeRuntime

from sandbelt.errors import Canceled, SessionNotFound
from sandbelt.model_config import ModelConfig
from sandbelt.sandbox.connect import connect, select_session
from sandbelt.types import RegistryEntry

MODEL = ModelConfig()


def _answers(*values):
    it = iter(values)
    return lambda _prompt: next(it)


class TestSelectSession:
    SESSIONS = [RegistryEntry("a", "running"), RegistryEntry("b", "running")]

    def test_pick_by_number(self):
        assert select_session(self.SESSIONS, _answers("2")) == "b"

    def test_reprompts_on_bad_input(self, capsys):
        assert select_session(self.SESSIONS, _answers("x", "9", "1")) == "a"
        assert capsys.readouterr().out.count("Enter a number between 0 and 2") == 2

    def test_zero_cancels(self):
        with pytest.raises(Canceled):
            select_session(self.SESSIONS, _answers("0"))

    def test_eof_cancels(self):
        def eof(_prompt):
            raise EOFError

        with pytest.raises(Canceled):
            select_session(self.SESSIONS, eof)


class TestConnect:
    def test_named_session(self):
        rt = FakeRuntime({"demo": "running"})
        result = connect("demo", runtime=rt, model=MODEL)
        assert result.connected
        op, command = rt.calls[-1]
        assert op == "start"
        assert shlex.split(command) == ["docker", "sandbox", "run", "demo"]

    def test_prompt_is_forwarded(self):
        rt = FakeRuntime({"demo": "running"})
        connect("demo", prompt="what's up", runtime=rt, model=MODEL)
        assert shlex.split(rt.calls[-1][1])[-3:] == ["--", "--print", "what's up"]

    def test_picker_offers_only_running(self, capsys):
        rt = FakeRuntime({"old": "exited", "demo": "running"})
        result = connect(runtime=rt, model=MODEL, choose=_answers("1"))
        assert result.sandbox_name == "demo"
        assert "old" not in capsys.readouterr().out

    def test_nothing_running(self):
        with pytest.raises(SessionNotFound, match="No running sandboxes"):
            connect(runtime=FakeRuntime({"old": "exited"}), model=MODEL)

    def test_runtime_failure_reports_not_connected(self):
        rt = FakeRuntime({"demo": "running"}, fail_start=True)
        result = connect("demo", runtime=rt, model=MODEL)
        assert not result.connected
