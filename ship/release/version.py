"""Release version stamps.

A release version is the wall-clock time of the run, ``YYYYMMDD-HHMMSS``.
Fields are zero padded and ordered from most to least significant, so plain
string comparison orders releases by time. Two runs in the same second get
the same version.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

__all__ = ["Clock", "VersionStamper", "format_version"]

Clock = Callable[[], datetime]


def format_version(moment: datetime) -> str:
    # strftime("%Y") is not zero padded for years below 1000 on every platform
    return (
        f"{moment.year:04d}{moment.month:02d}{moment.day:02d}"
        f"-{moment.hour:02d}{moment.minute:02d}{moment.second:02d}"
    )


class VersionStamper:
    def __init__(self, clock: Clock = datetime.now) -> None:
        self._clock = clock

    def next_version(self) -> str:
        return format_version(self._clock())
