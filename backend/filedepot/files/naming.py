"""Stored-name generation for uploaded files.

Stored names have the form ``<millisecond-epoch>.<ext>``. The generator is
monotonic within a process: when the clock has not advanced past the last
issued value (same tick or a clock step backwards) the timestamp is bumped
by one millisecond, so two uploads never receive the same name.
"""
import threading
import time
from pathlib import PurePosixPath
from typing import Callable, Optional


def extract_extension(filename: Optional[str]) -> str:
    """Lowercase extension of *filename* without the leading dot.

    Returns an empty string when there is no extension.
    """
    if not filename:
        return ""
    # Treat backslashes as separators too; browsers on Windows send them.
    suffix = PurePosixPath(filename.replace("\\", "/")).suffix
    return suffix.lower()[1:]


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class StoredNameGenerator:
    """Produces collision-free ``<timestamp>.<ext>`` names."""

    def __init__(self, clock: Callable[[], int] = _now_ms) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def _next_timestamp(self) -> int:
        with self._lock:
            stamp = max(self._clock(), self._last + 1)
            self._last = stamp
            return stamp

    def generate(self, original_name: Optional[str]) -> str:
        """Return a stored name for *original_name*.

        No input is rejected: a name without an extension yields a stored
        name ending in a trailing dot.
        """
        return f"{self._next_timestamp()}.{extract_extension(original_name)}"
