from __future__ import annotations

import typer

from ship import __version__
from ship.cli.commands.release_cmd import release
from ship.cli.commands.show_cmd import show
from ship.cli.commands.version_cmd import next_version


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(release)
app.command()(show)
app.command("version")(next_version)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
) -> None:
    """Release a container image: build, tag, push, record."""
    del version


def main() -> None:
    app()
