"""
Fixed-Period Ticker
Decides when the next tick is due. Dispatching the tick is the caller's job.
"""

import logging
from typing import Callable, Optional

from hwstats.core.utils import get_monotonic_s, ms_to_s

logger = logging.getLogger(__name__)


class Ticker:
    """
    Strict-cadence schedule with catch-up collapse.

    Deadlines sit on a fixed grid measured from ``reset()``. When a tick
    overruns one or more deadlines, the next tick is due immediately and
    every missed firing collapses into that single catch-up tick; the grid
    restarts from the catch-up time.
    """

    def __init__(self, interval_ms: float, clock: Callable[[], float] = get_monotonic_s):
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")

        self.interval_ms = interval_ms
        self.interval_s = ms_to_s(interval_ms)
        self.clock = clock

        self.deadline: Optional[float] = None
        self.skipped = 0

    def reset(self, now: Optional[float] = None) -> float:
        """Arm the ticker; the first deadline is one full interval away."""
        now = self.clock() if now is None else now
        self.deadline = now + self.interval_s
        self.skipped = 0
        return self.deadline

    def remaining(self, now: Optional[float] = None) -> float:
        """Seconds until the current deadline, never negative."""
        if self.deadline is None:
            raise RuntimeError("Ticker not armed, call reset() first")
        now = self.clock() if now is None else now
        return max(0.0, self.deadline - now)

    def due(self, now: Optional[float] = None) -> bool:
        return self.remaining(now) == 0.0

    def advance(self, now: Optional[float] = None) -> float:
        """Move to the deadline after the tick that just completed."""
        if self.deadline is None:
            raise RuntimeError("Ticker not armed, call reset() first")
        now = self.clock() if now is None else now

        next_deadline = self.deadline + self.interval_s
        if next_deadline <= now:
            missed = max(1, int((now - self.deadline) // self.interval_s))
            self.skipped += missed - 1
            if missed > 1:
                logger.debug(f"Tick overran, collapsing {missed} firings into one")
            next_deadline = now

        self.deadline = next_deadline
        return self.deadline
