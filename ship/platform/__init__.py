"""Process spawning and file writes; nothing above this layer touches either directly."""

from .files import atomic_write_text
from .process import NOT_STARTED, ProcessError, run, run_silent, run_streaming

__all__ = ["NOT_STARTED", "ProcessError", "atomic_write_text", "run", "run_silent", "run_streaming"]
