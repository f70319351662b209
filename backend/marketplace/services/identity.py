import time
from threading import Lock
from uuid import uuid4


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex}"


class MonotonicClock:
    """Wall clock in nanoseconds that never goes backwards between calls."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._last = 0

    def now(self) -> int:
        with self._lock:
            self._last = max(self._last, time.time_ns())
            return self._last
