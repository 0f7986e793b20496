"""Fixed-interval pacing for upload calls."""

from __future__ import annotations

import time
from typing import Callable


class FixedIntervalLimiter:
    """Sleeps a constant interval after every paced call.

    Not adaptive: the pause is the same regardless of how long the call
    took or whether it succeeded.
    """

    def __init__(self, interval: float, sleep: Callable[[float], None] = time.sleep):
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.interval = interval
        self._sleep = sleep
        self.calls = 0

    def pause(self) -> None:
        self.calls += 1
        if self.interval > 0:
            self._sleep(self.interval)
