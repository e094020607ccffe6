"""Time sources for voting deadlines."""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


class Clock(Protocol):
    """Source of the current timestamp in whole seconds."""

    def now(self) -> int:
        """Return the current timestamp."""


@dataclass
class SystemClock(Clock):
    """Wall clock that never goes backwards."""

    source: Callable[[], float] = time.time
    _last: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def now(self) -> int:
        """Return the source time, clamped to the last value returned."""
        current = int(self.source())
        with self._lock:
            self._last = max(self._last, current)
            return self._last
