"""Operator-facing output for releases.

Everything the pipeline and the CLI say goes through ``ConsoleProtocol``.
``RichConsole`` renders to the terminal; ``MockConsole`` keeps records for
tests. Both share the level methods of ``_Levels`` and differ only in
``_emit``, so a prefix reads the same on screen and in a test assertion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    BOLD = auto()
    HEADER = auto()
    STEP = auto()

    def __str__(self) -> str:
        return self.name.lower()


# Level prefixes. Messages printed with print() carry none.
_PREFIX: dict[Style, str] = {
    Style.SUCCESS: "OK ",
    Style.ERROR: "error: ",
    Style.WARNING: "warning: ",
    Style.INFO: "info: ",
}

_RICH_STYLE: dict[Style, str] = {
    Style.DEFAULT: "",
    Style.SUCCESS: "green",
    Style.ERROR: "red bold",
    Style.WARNING: "yellow",
    Style.INFO: "cyan",
    Style.DIM: "dim",
    Style.BOLD: "bold",
    Style.HEADER: "blue bold",
    Style.STEP: "magenta",
}


class ConsoleProtocol(Protocol):
    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def step(self, title: str) -> None:
        """Banner between pipeline steps."""
        ...


class _Levels:
    def _emit(self, message: str, style: Style) -> None:
        raise NotImplementedError

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._emit(message, style)

    def success(self, message: str) -> None:
        self._emit(message, Style.SUCCESS)

    def error(self, message: str) -> None:
        self._emit(message, Style.ERROR)

    def warning(self, message: str) -> None:
        self._emit(message, Style.WARNING)

    def info(self, message: str) -> None:
        self._emit(message, Style.INFO)

    def header(self, message: str) -> None:
        self._emit(message, Style.HEADER)

    def step(self, title: str) -> None:
        self._emit(title, Style.STEP)


class RichConsole(_Levels):
    """Terminal console. Message text is never parsed as rich markup."""

    def __init__(self, *, stderr: bool = False) -> None:
        from rich.console import Console

        self._console = Console(stderr=stderr, highlight=False)

    def _emit(self, message: str, style: Style) -> None:
        from rich.rule import Rule
        from rich.text import Text

        rich_style = _RICH_STYLE[style]
        if style is Style.STEP:
            self._console.print(Rule(Text(message), style=rich_style))
            return
        if style is Style.HEADER:
            self._console.print()

        prefix = _PREFIX.get(style)
        if prefix is None:
            self._console.print(Text(message, style=rich_style))
        else:
            self._console.print(Text.assemble((prefix, rich_style), message))


@dataclass(frozen=True, slots=True)
class OutputRecord:
    message: str
    style: Style


@dataclass
class MockConsole(_Levels):
    """Records output with level prefixes applied, for assertions."""

    outputs: list[OutputRecord] = field(default_factory=list)

    def _emit(self, message: str, style: Style) -> None:
        self.outputs.append(OutputRecord(_PREFIX.get(style, "") + message, style))

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has(self, style: Style) -> bool:
        return any(o.style is style for o in self.outputs)

    def has_error(self) -> bool:
        return self.has(Style.ERROR)

    def has_warning(self) -> bool:
        return self.has(Style.WARNING)

    def has_success(self) -> bool:
        return self.has(Style.SUCCESS)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style is style)
