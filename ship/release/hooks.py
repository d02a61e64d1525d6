"""Pre-run and post-run maintenance hooks.

Hooks are operator supplied commands (workspace preparation, disk
reclamation...). They are best effort: a failing hook is reported but never
changes the outcome of a release.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path

from ship.core.result import Err, Ok, Result
from ship.output.console import ConsoleProtocol, Style
from ship.platform.process import run_silent

__all__ = ["HookError", "run_hook", "run_hooks"]


@dataclass(frozen=True, slots=True)
class HookError:
    phase: str
    command: str
    message: str


def _argv(command: str) -> list[str]:
    return [str(Path(arg).expanduser()) if arg.startswith("~") else arg for arg in shlex.split(command)]


def run_hook(phase: str, command: str, *, cwd: Path) -> Result[None, HookError]:
    try:
        argv = _argv(command)
    except ValueError as e:
        return Err(HookError(phase=phase, command=command, message=f"cannot parse: {e}"))
    if not argv:
        return Ok(None)

    result = run_silent(argv, cwd=cwd)
    if isinstance(result, Err):
        error = result.error
        detail = f"exit {error.returncode}" if error.started else error.stderr.strip()
        return Err(HookError(phase=phase, command=command, message=detail))
    return Ok(None)


def run_hooks(
    phase: str,
    commands: tuple[str, ...],
    *,
    cwd: Path,
    console: ConsoleProtocol,
) -> list[HookError]:
    """Run every hook of a phase in order, returning the failures.

    A failing hook does not stop the following ones.
    """
    failures: list[HookError] = []
    for command in commands:
        console.print(f"{phase} hook: {command}", Style.DIM)
        result = run_hook(phase, command, cwd=cwd)
        if isinstance(result, Err):
            failures.append(result.error)
            console.warning(f"{phase} hook failed ({result.error.message}): {command}")
    return failures
