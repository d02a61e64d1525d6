"""File writes that other tools may read concurrently."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

__all__ = ["DEFAULT_FILE_MODE", "atomic_write_text"]

DEFAULT_FILE_MODE = 0o644


def _target_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return DEFAULT_FILE_MODE


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Replace ``path`` with ``content`` in one rename.

    A reader sees the old file or the new one, never a partial write. The
    new file keeps the permissions of the one it replaces (0644 when there
    was none). Raises OSError with the target left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = _target_mode(path)

    staged: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=encoding,
            newline="",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            staged = Path(handle.name)
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(staged, mode)
        os.replace(staged, path)
        staged = None
    finally:
        if staged is not None:
            staged.unlink(missing_ok=True)
