"""Tests for ship.release.version."""

from __future__ import annotations

import re
from datetime import datetime

from ship.release.fakes import FakeClock
from ship.release.reference import ImageReference
from ship.core.result import Ok
from ship.release.version import VersionStamper, format_version


def test_format_is_zero_padded() -> None:
    assert format_version(datetime(2024, 1, 2, 3, 4, 5)) == "20240102-030405"


def test_years_below_1000_are_padded() -> None:
    assert format_version(datetime(999, 12, 31, 23, 59, 59)) == "09991231-235959"


def test_reads_the_injected_clock() -> None:
    clock = FakeClock(datetime(2024, 1, 1, 12, 0, 0))
    stamper = VersionStamper(clock)

    assert stamper.next_version() == "20240101-120000"
    clock.advance(61)
    assert stamper.next_version() == "20240101-120101"


def test_same_second_collides() -> None:
    clock = FakeClock(datetime(2024, 1, 1, 12, 0, 0, 100))
    stamper = VersionStamper(clock)
    first = stamper.next_version()
    clock.advance(0.5)
    assert stamper.next_version() == first


def test_later_versions_sort_after_earlier_ones() -> None:
    clock = FakeClock(datetime(2023, 12, 31, 23, 59, 58))
    stamper = VersionStamper(clock)
    # Crosses second, minute, hour, day, month and year boundaries.
    steps = [1, 1, 59, 3600, 86400, 31 * 86400, 400 * 86400, 1]

    previous = stamper.next_version()
    for seconds in steps:
        clock.advance(seconds)
        current = stamper.next_version()
        assert previous < current, (previous, current)
        previous = current


def test_version_is_a_valid_registry_tag() -> None:
    version = VersionStamper(FakeClock(datetime(2024, 6, 30, 8, 5, 9))).next_version()

    assert re.fullmatch(r"\d{8}-\d{6}", version)
    ref = ImageReference(registry="registry.test", repository="img", tag=version)
    assert isinstance(ref.validate(), Ok)


def test_default_clock_produces_a_version() -> None:
    assert re.fullmatch(r"\d{8}-\d{6}", VersionStamper().next_version())
