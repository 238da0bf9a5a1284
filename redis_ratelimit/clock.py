"""Clock sources producing integer timestamps in a rate-limit time unit."""

from __future__ import annotations

import time
from enum import Enum
from typing import Protocol


class TimeUnit(str, Enum):
    seconds = "seconds"
    milliseconds = "milliseconds"


class Clock(Protocol):
    """Anything able to report the current time in a given unit."""

    def now(self, unit: TimeUnit) -> int:
        ...


class SystemClock:
    """Wall-clock time as Unix timestamps."""

    def now(self, unit: TimeUnit) -> int:
        """Return the current Unix time truncated to whole ``unit``s."""
        if unit is TimeUnit.milliseconds:
            return time.time_ns() // 1_000_000
        return int(time.time())


class ManualClock:
    """Deterministic clock for tests; holds a millisecond reading moved by hand."""

    def __init__(self, start_ms: int = 0) -> None:
        self._now_ms = start_ms

    def now(self, unit: TimeUnit) -> int:
        if unit is TimeUnit.milliseconds:
            return self._now_ms
        return self._now_ms // 1000

    def set(self, now_ms: int) -> None:
        self._now_ms = now_ms

    def advance(self, *, seconds: int = 0, milliseconds: int = 0) -> None:
        """Move the clock forward; going backwards is rejected."""
        delta = seconds * 1000 + milliseconds
        if delta < 0:
            raise ValueError("clock cannot move backwards")
        self._now_ms += delta
