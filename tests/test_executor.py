"""Tests for launching builtins and external programs."""

from __future__ import annotations

import errno
import os
from pathlib import Path

import pytest

from jobsh.builtin import BuiltinKind, builtin_cd, builtin_echo
from jobsh.errors import ArityError, NotFoundError, SpawnError
from jobsh.executor import ForkedChild, call_builtin, fork_builtin, launch, report_error, run_external


def _fail_not_found(args: list[str]) -> int:
    raise NotFoundError(f"{args[1]}: No such file or directory")


def test_report_error_statuses(capsys: pytest.CaptureFixture[str]) -> None:
    assert report_error("cd", ArityError("ERROR: Too many arguments")) == 1
    assert report_error("cp", NotFoundError("x: No such file or directory")) == 1
    assert report_error("nope", SpawnError("command not found: nope", status=127)) == 127
    assert report_error("cd", OSError(errno.ENOENT, "No such file or directory")) == errno.ENOENT

    err = capsys.readouterr().err.splitlines()
    assert err == [
        "ERROR: Too many arguments",
        "jobsh: cp: x: No such file or directory",
        "jobsh: command not found: nope",
        "jobsh: cd: No such file or directory",
    ]


def test_call_builtin_converts_failures(capsys: pytest.CaptureFixture[str]) -> None:
    assert call_builtin(builtin_cd, ["cd", "a", "b"]) == 1
    assert "ERROR: Too many arguments" in capsys.readouterr().err


def test_foreground_builtin_runs_in_process(capsys: pytest.CaptureFixture[str]) -> None:
    assert launch(["echo", "hi"], BuiltinKind.ECHO, True, builtin_echo) == (0, None)
    assert capsys.readouterr().out == "hi\n"


def test_foreground_external_returns_exit_code() -> None:
    assert launch(["true"], BuiltinKind.EXTERNAL, True) == (0, None)
    assert launch(["false"], BuiltinKind.EXTERNAL, True) == (1, None)


def test_background_external_returns_pid() -> None:
    pid, handle = launch(["true"], BuiltinKind.EXTERNAL, False)

    assert pid == handle.pid
    assert handle.wait() == 0


def test_missing_program_is_spawn_error() -> None:
    with pytest.raises(SpawnError) as info:
        run_external(["jobsh-definitely-not-a-command"])
    assert info.value.status == 127


def test_non_executable_is_spawn_error(tmp_path: Path) -> None:
    script = tmp_path / "script.sh"
    script.write_text("#!/bin/sh\nexit 0\n")
    os.chmod(script, 0o644)

    with pytest.raises(SpawnError) as info:
        run_external([str(script)])
    assert info.value.status == 126


def test_background_builtin_does_not_touch_shell_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "sub").mkdir()

    pid, handle = launch(["cd", "sub"], BuiltinKind.CD, False, builtin_cd)

    assert isinstance(handle, ForkedChild)
    assert handle.wait() == 0
    assert Path.cwd() == tmp_path


def test_forked_builtin_failure_becomes_exit_code() -> None:
    child = fork_builtin(_fail_not_found, ["cp", "missing"])

    assert child.wait() == 1
    # once reaped the status is remembered
    assert child.poll() == 1


def test_forked_child_poll_until_done(tmp_path: Path) -> None:
    flag = tmp_path / "go"

    def _wait_for_flag(args: list[str]) -> int:
        while not flag.exists():
            pass
        return 4

    child = fork_builtin(_wait_for_flag, ["wait"])
    assert child.poll() is None

    flag.touch()
    assert child.wait() == 4


class _InterruptedProcess:
    """First wait() is cut short by Ctrl+C, the second one collects the child."""

    pid = 4321

    def __init__(self) -> None:
        self.waits = 0

    def wait(self) -> int:
        self.waits += 1
        if self.waits == 1:
            raise KeyboardInterrupt
        return -2


def test_interrupted_foreground_child_is_still_collected(monkeypatch: pytest.MonkeyPatch) -> None:
    proc = _InterruptedProcess()
    monkeypatch.setattr("jobsh.executor.run_external", lambda args, background=False: proc)

    with pytest.raises(KeyboardInterrupt):
        launch(["sleep", "10"], BuiltinKind.EXTERNAL, True)
    assert proc.waits == 2
