"""A simple microsecond timer for timing responses."""

from __future__ import annotations

import time


class Timer:
    """Measures elapsed wall time in microseconds.

    The timer starts on creation and can be restarted with ``start`` or
    by entering it as a context manager.
    """

    def __init__(self) -> None:
        self._start_ns = time.monotonic_ns()

    def start(self) -> None:
        """Reset the start time to now."""
        self._start_ns = time.monotonic_ns()

    def elapsed_us(self) -> int:
        """Return the microseconds elapsed since the timer was started."""
        return (time.monotonic_ns() - self._start_ns) // 1000

    def __enter__(self) -> "Timer":
        self.start()
        return self

    def __exit__(self, *args) -> None:
        return None