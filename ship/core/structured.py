"""Typed reads from parsed TOML.

``tomllib`` hands back plain dicts of ``object``. :class:`TomlTable` wraps
one table and narrows values on access; a value of the wrong shape reads as
absent, so defaults apply instead of a crash deep inside the release.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TypeGuard, cast

StrDict = dict[str, object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    if not isinstance(obj, dict):
        return False
    return all(isinstance(key, str) for key in cast(dict[object, object], obj))


@dataclass(frozen=True, slots=True)
class TomlTable:
    data: Mapping[str, object] = field(default_factory=dict)

    @classmethod
    def from_object(cls, obj: object) -> TomlTable | None:
        """Wrap ``obj`` if it is a table with string keys."""
        return cls(obj) if is_str_dict(obj) else None

    def get_str(self, key: str) -> str | None:
        """Stripped string value; blank strings read as absent."""
        value = self.data.get(key)
        if not isinstance(value, str):
            return None
        return value.strip() or None

    def get_int(self, key: str) -> int | None:
        value = self.data.get(key)
        # `port = true` parses as bool, an int subclass
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value

    def get_table(self, key: str) -> TomlTable:
        """Nested table, or an empty one when missing or malformed."""
        return TomlTable.from_object(self.data.get(key)) or TomlTable()

    def get_str_list(self, key: str) -> tuple[str, ...]:
        """Non-blank string items; anything else in the list is skipped."""
        value = self.data.get(key)
        if not isinstance(value, list):
            return ()
        items = (item.strip() for item in cast(list[object], value) if isinstance(item, str))
        return tuple(item for item in items if item)
