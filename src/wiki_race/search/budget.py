"""
Wall-clock budget for a single directional search.
"""

import time
from typing import Callable, Optional


class SearchBudget:
    """Cooperative deadline checked once per search tick.

    A slow link fetch or embedding inside a tick is never interrupted, so a
    search can overrun the budget by at most one external call.
    """

    def __init__(self, max_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic):
        if max_seconds <= 0:
            raise ValueError("max_seconds must be positive")
        self.max_seconds = max_seconds
        self._clock = clock
        self._started_at: Optional[float] = None

    def start(self) -> None:
        """Start measuring; calling it again has no effect."""
        if self._started_at is None:
            self._started_at = self._clock()

    @property
    def started(self) -> bool:
        return self._started_at is not None

    def elapsed(self) -> float:
        """Seconds since ``start()``; 0.0 before the search started."""
        if self._started_at is None:
            return 0.0
        return max(0.0, self._clock() - self._started_at)

    def exceeded(self) -> bool:
        return self.elapsed() > self.max_seconds
