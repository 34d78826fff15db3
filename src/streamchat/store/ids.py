"""Monotonic identifier generation."""

import threading
import time
from collections.abc import Callable


class IdGenerator:
    """Generate millisecond-timestamp ids that never repeat or go backwards.

    Two ids requested within the same millisecond (or after a clock step
    backwards) are bumped past the last one issued.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_int(self) -> int:
        with self._lock:
            now = int(self._clock() * 1000)
            self._last = max(now, self._last + 1)
            return self._last

    def __call__(self) -> str:
        return str(self.next_int())


default_id_generator = IdGenerator()
