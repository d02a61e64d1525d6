"""Tests for ship.release.hooks."""

from __future__ import annotations

from pathlib import Path

import pytest

from ship.core.result import Err, Ok, Result
from ship.output.console import MockConsole
from ship.platform.process import NOT_STARTED, ProcessError
from ship.release import hooks as hooks_mod
from ship.release.hooks import HookError, run_hook, run_hooks


@pytest.fixture
def calls(monkeypatch: pytest.MonkeyPatch) -> list[list[str]]:
    seen: list[list[str]] = []

    def fake_run_silent(
        cmd: list[str], cwd: Path, env: dict[str, str] | None = None
    ) -> Result[None, ProcessError]:
        seen.append(cmd)
        if cmd[0] == "false":
            return Err(ProcessError(tuple(cmd), 1, "", ""))
        if cmd[0] == "missing-tool":
            return Err(ProcessError(tuple(cmd), NOT_STARTED, "", "No such file or directory"))
        return Ok(None)

    monkeypatch.setattr(hooks_mod, "run_silent", fake_run_silent)
    return seen


def test_splits_command_and_expands_home(calls: list[list[str]], tmp_path: Path) -> None:
    result = run_hook("pre-run", "bash ~/environment/busy.sh --quiet", cwd=tmp_path)

    assert isinstance(result, Ok)
    assert calls[0][0] == "bash"
    assert calls[0][1] == str(Path("~/environment/busy.sh").expanduser())
    assert calls[0][2] == "--quiet"


def test_nonzero_exit(calls: list[list[str]], tmp_path: Path) -> None:
    result = run_hook("post-run", "false", cwd=tmp_path)

    assert isinstance(result, Err)
    assert result.error == HookError(phase="post-run", command="false", message="exit 1")


def test_unstartable_command(calls: list[list[str]], tmp_path: Path) -> None:
    result = run_hook("pre-run", "missing-tool", cwd=tmp_path)

    assert isinstance(result, Err)
    assert "No such file" in result.error.message


def test_unparseable_command(calls: list[list[str]], tmp_path: Path) -> None:
    result = run_hook("pre-run", "bash 'unterminated", cwd=tmp_path)

    assert isinstance(result, Err)
    assert "cannot parse" in result.error.message
    assert calls == []


def test_run_hooks_continues_after_failure(calls: list[list[str]], tmp_path: Path) -> None:
    console = MockConsole()

    failures = run_hooks("post-run", ("false", "true"), cwd=tmp_path, console=console)

    assert [cmd[0] for cmd in calls] == ["false", "true"]
    assert len(failures) == 1
    assert console.has_warning()
    assert console.find("post-run hook failed")
