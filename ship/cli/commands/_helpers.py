"""Exit handling shared by the CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, Protocol

import typer

from ship.core.errors import ErrorCode
from ship.core.result import Err, Ok, Result
from ship.output.console import ConsoleProtocol, Style

if TYPE_CHECKING:
    from ship.cli.context import CLIContext


class Reportable(Protocol):
    @property
    def message(self) -> str: ...

    @property
    def hint(self) -> str | None: ...


def report(error: Reportable, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def exit_on_error[T](
    result: Result[T, Reportable],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.USER_ERROR,
) -> T:
    """Unwrap ``result`` or report its error and exit with ``error_code``."""
    match result:
        case Ok(value):
            return value
        case Err(error):
            report(error, ctx.console)
            exit_with_code(error_code)


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=int(code))
