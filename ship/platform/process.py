"""The one place ship starts child processes.

Every ``docker`` call and every hook runs through one of three functions:

- :func:`run` captures output and returns stdout (tag, scripted login).
- :func:`run_streaming` echoes output line by line as it arrives and keeps
  the last lines for the error (build, push).
- :func:`run_silent` leaves the terminal to the child (interactive login,
  hooks).

None of them raises for a failing or missing program; all return
``Err(ProcessError)``.

    match run(["docker", "version", "--format", "{{.Server.Version}}"], cwd=root):
        case Ok(version):
            ...
        case Err(error) if not error.started:
            ...  # docker is not installed or not executable
        case Err(error):
            ...  # inspect error.output
"""

from __future__ import annotations

import subprocess
import sys
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ship.core.result import Err, Ok, Result

__all__ = ["NOT_STARTED", "TAIL_LINES", "ProcessError", "run", "run_silent", "run_streaming"]

NOT_STARTED = -1

# Lines of streamed output kept for diagnostics.
TAIL_LINES = 40


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that exited non-zero, timed out or never started.

    ``returncode`` is ``NOT_STARTED`` when there is no real exit status; the
    reason is then in ``stderr``.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def started(self) -> bool:
        return self.returncode != NOT_STARTED

    @property
    def output(self) -> str:
        """stderr then stdout, blank streams dropped."""
        return "\n".join(text for text in (self.stderr.strip(), self.stdout.strip()) if text)

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown = f"{shown} ..."
        return f"{shown} failed (exit {self.returncode})"


def _execute(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None,
    *,
    capture: bool,
    input: str | None = None,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    command = tuple(cmd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            input=input,
            capture_output=capture,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return Err(
            ProcessError(command, NOT_STARTED, partial, f"Command timed out after {timeout}s")
        )
    except OSError as e:
        return Err(ProcessError(command, NOT_STARTED, stderr=str(e)))

    stdout = proc.stdout or ""
    if proc.returncode != 0:
        return Err(ProcessError(command, proc.returncode, stdout, proc.stderr or ""))
    return Ok(stdout)


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    input: str | None = None,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run ``cmd`` in ``cwd`` and return its stdout.

    Args:
        cmd: Program and arguments.
        cwd: Working directory.
        env: Full environment for the child; None inherits ours.
        input: Text written to stdin, e.g. a registry password.
        timeout: Seconds before the child is killed; None waits forever.
    """
    return _execute(cmd, cwd, env, capture=True, input=input, timeout=timeout)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Run ``cmd`` attached to the terminal.

    Nothing is captured, so a failure carries only the exit code.
    """
    return _execute(cmd, cwd, env, capture=False).map(lambda _: None)


def _echo(line: str) -> None:
    sys.stdout.write(line)
    sys.stdout.flush()


def run_streaming(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    echo: Callable[[str], None] = _echo,
    tail: int = TAIL_LINES,
) -> Result[None, ProcessError]:
    """Run ``cmd``, echoing its merged stdout/stderr as it is produced.

    The last ``tail`` lines are kept; on failure they become the error's
    ``stderr`` so the diagnostic shows why docker gave up.
    """
    command = tuple(cmd)
    kept: deque[str] = deque(maxlen=tail)
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=str(cwd),
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
    except OSError as e:
        return Err(ProcessError(command, NOT_STARTED, stderr=str(e)))

    with proc:
        if proc.stdout is not None:
            for line in proc.stdout:
                echo(line)
                kept.append(line)
        returncode = proc.wait()

    if returncode != 0:
        return Err(ProcessError(command, returncode, stderr="".join(kept)))
    return Ok(None)
