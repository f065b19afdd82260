"""Timestamp-gated guard for side effects that should not run on every render."""

import time
from typing import Callable


class RateLimiter:
    """Allow an action at most once per interval.

    Used to keep diagnostic snapshots of the chat state from flooding the logs
    while tokens are streaming in.
    """

    def __init__(
        self,
        interval_seconds: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._last_run: float | None = None

    def should_run(self) -> bool:
        """Return True (and record the time) if the interval has elapsed."""
        now = self._clock()
        if self._last_run is None or now - self._last_run >= self.interval_seconds:
            self._last_run = now
            return True
        return False
