"""Show command - print the last recorded release."""

from __future__ import annotations

from pathlib import Path

import typer

from ship.cli.commands._helpers import exit_on_error
from ship.cli.context import build_context
from ship.core.errors import ErrorCode
from ship.output.console import Style
from ship.release.descriptor import read_descriptor


def show(
    descriptor: Path | None = typer.Option(
        None, "--descriptor", help="Deployment descriptor path", show_default=False
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Path to ship.toml (default: search upward)", show_default=False
    ),
) -> None:
    """Show the release recorded in the deployment descriptor."""
    ctx = build_context(config)
    path = descriptor or ctx.config.descriptor

    recorded = exit_on_error(read_descriptor(path), ctx, ErrorCode.IO_ERROR)
    ctx.console.header(str(path))
    for key, value in recorded.as_pairs():
        ctx.console.print(f"{key}={value}")
    ctx.console.print(f"image: {recorded.image_uri}", Style.DIM)
