"""Sliding-window request limiter keyed by client."""

import math
import time
from collections import deque
from typing import Deque, Dict, Optional, Tuple

from ..utils.logger import get_app_logger


class SlidingWindowRateLimiter:
    """
    Allow at most ``max_requests`` per key inside a trailing ``window_seconds``.

    One instance guards one endpoint family; construct it once at startup and
    hand it to the routes that need it.
    """

    def __init__(self, max_requests: int, window_seconds: float, max_keys: int = 10000):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_keys = max_keys
        self.logger = get_app_logger("ratelimit")
        self._requests: Dict[str, Deque[float]] = {}

    @staticmethod
    def _now(now: Optional[float]) -> float:
        return time.monotonic() if now is None else now

    def _prune(self, key: str, now: float) -> Deque[float]:
        timestamps = self._requests.get(key)
        if timestamps is None:
            return deque()
        cutoff = now - self.window_seconds
        while timestamps and timestamps[0] <= cutoff:
            timestamps.popleft()
        return timestamps

    def allow(self, key: str, now: Optional[float] = None) -> bool:
        """
        Record a request for ``key`` if it fits in the window.

        Args:
            key: Client key, usually the caller's address
            now: Monotonic timestamp override

        Returns:
            True if the request is allowed, False if the key is over its cap
        """
        now = self._now(now)
        timestamps = self._prune(key, now)

        if len(timestamps) >= self.max_requests:
            return False

        if key not in self._requests:
            if len(self._requests) >= self.max_keys:
                self.evict_stale(now)
            self._requests[key] = timestamps
        timestamps.append(now)
        return True

    def retry_after(self, key: str, now: Optional[float] = None) -> int:
        """Whole seconds until ``key`` may make another request (0 if it may now)."""
        now = self._now(now)
        timestamps = self._prune(key, now)
        if len(timestamps) < self.max_requests:
            return 0
        # The oldest counted request has to leave the window first
        wait = timestamps[0] + self.window_seconds - now
        return max(1, math.ceil(wait))

    def check(self, key: str, now: Optional[float] = None) -> Tuple[bool, Optional[int]]:
        """
        Combined allow + retry_after.

        Returns:
            (allowed, retry_after_seconds); retry_after is None when allowed
        """
        now = self._now(now)
        if self.allow(key, now):
            return True, None
        retry = self.retry_after(key, now)
        self.logger.warning(f"Rate limit exceeded for {key}; retry in {retry}s")
        return False, retry

    def evict_stale(self, now: Optional[float] = None) -> int:
        """Drop keys with no request inside the window. Returns the number removed."""
        now = self._now(now)
        stale = [key for key in list(self._requests) if not self._prune(key, now)]
        for key in stale:
            del self._requests[key]
        if stale:
            self.logger.debug(f"Evicted {len(stale)} idle rate limit keys")
        return len(stale)

    def reset(self, key: Optional[str] = None):
        """Forget one key, or every key when none is given."""
        if key is None:
            self._requests.clear()
        else:
            self._requests.pop(key, None)

    def __len__(self) -> int:
        return len(self._requests)
