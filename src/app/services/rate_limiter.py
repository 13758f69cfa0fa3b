"""
Fixed-window rate limiter keyed by identifier and action.

Counts live in process memory; expired windows are pruned on each check.
"""

import math
from datetime import UTC, datetime
from typing import Dict, Tuple

from .clock import Clock
from .dtos import RateLimitStatus


class RateLimiter:
    def __init__(self, clock: Clock):
        self.clock = clock
        # window key -> (count, reset timestamp)
        self._windows: Dict[str, Tuple[int, float]] = {}

    def check(self, key: str, limit: int, window_seconds: int) -> RateLimitStatus:
        """Count one hit for `key` and report whether it fits in the window"""
        now = self.clock.timestamp()
        window = math.floor(now / window_seconds)
        window_key = f"rate_limit:{key}:{window}"
        reset_at = (window + 1) * window_seconds

        count, _ = self._windows.get(window_key, (0, reset_at))
        count += 1
        self._windows[window_key] = (count, reset_at)
        self._prune(now)

        return RateLimitStatus(
            allowed=count <= limit,
            remaining=max(0, limit - count),
            reset_time=datetime.fromtimestamp(reset_at, UTC),
            total_hits=count,
        )

    def reset(self, key: str) -> None:
        prefix = f"rate_limit:{key}:"
        for window_key in [k for k in self._windows if k.startswith(prefix)]:
            del self._windows[window_key]

    def _prune(self, now: float) -> None:
        expired = [k for k, (_, reset_at) in self._windows.items() if reset_at <= now]
        for window_key in expired:
            del self._windows[window_key]
