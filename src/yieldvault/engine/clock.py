"""Injectable time source.

The vault never reads wall-clock time directly; it asks its Clock. Time is
whole seconds since the epoch, matching the granularity of the accrual rule.
"""

import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Abstract clock interface."""

    @abstractmethod
    def now(self) -> int:
        """Current time in whole seconds."""
        ...


class SystemClock(Clock):
    """Production clock backed by the system time."""

    def now(self) -> int:
        return int(time.time())


class ManualClock(Clock):
    """
    Deterministic clock for tests and simulation.

    Only moves when told to, and never backwards.
    """

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError(f"start must be non-negative, got {start}")
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """Move forward by seconds and return the new time."""
        if seconds < 0:
            raise ValueError(f"Cannot move clock backwards by {seconds}s")
        self._now += seconds
        return self._now

    def set(self, timestamp: int) -> None:
        """Jump to an absolute time at or after the current one."""
        if timestamp < self._now:
            raise ValueError(f"Cannot move clock from {self._now} back to {timestamp}")
        self._now = timestamp
