from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from ship.cli.commands._helpers import exit_with_code, report
from ship.core.config import ReleaseConfig, find_config, load_config_or_default
from ship.core.errors import ErrorCode
from ship.core.result import Err
from ship.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    cwd: Path
    config_path: Path | None
    config: ReleaseConfig
    console: ConsoleProtocol
    environ: Mapping[str, str]


def build_context(config_path: Path | None = None) -> CLIContext:
    console = RichConsole()
    cwd = Path.cwd()
    environ = dict(os.environ)

    path = config_path.expanduser() if config_path is not None else find_config(cwd, environ)
    config_result = load_config_or_default(path, base_dir=cwd)
    if isinstance(config_result, Err):
        report(config_result.error, console)
        exit_with_code(ErrorCode.USER_ERROR)

    return CLIContext(
        cwd=cwd,
        config_path=path,
        config=config_result.value,
        console=console,
        environ=environ,
    )
