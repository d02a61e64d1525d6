"""Version command - print the version the next release would get."""

from __future__ import annotations

import typer

from ship.release.version import VersionStamper


def next_version() -> None:
    """Print the next release version (YYYYMMDD-HHMMSS)."""
    typer.echo(VersionStamper().next_version())
