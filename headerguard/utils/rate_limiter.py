"""Sliding-window rate limiter kept in process memory."""

import math
import time
from collections import deque
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after: int  # seconds until the oldest request leaves the window


class SlidingWindowRateLimiter:
    """
    Allow at most ``max_requests`` per client within ``window_seconds``.

    Clients with no request left in the window are forgotten: their own
    check drops them, and a sweep once per window drops idle ones.
    """

    def __init__(
        self, max_requests: int, window_seconds: int = 60, clock=time.monotonic
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._requests: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    def check(self, client_id: str) -> RateLimitDecision:
        """Record a request for ``client_id`` if it fits in the window."""
        now = self._clock()
        window_start = now - self.window_seconds

        if now - self._last_sweep >= self.window_seconds:
            self._sweep(window_start)
            self._last_sweep = now

        timestamps = self._requests.pop(client_id, None) or deque()
        # Remove old entries
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()

        if len(timestamps) >= self.max_requests:
            if not timestamps:
                return RateLimitDecision(
                    allowed=False, remaining=0, retry_after=self.window_seconds
                )
            self._requests[client_id] = timestamps
            retry_after = math.ceil(timestamps[0] + self.window_seconds - now)
            return RateLimitDecision(
                allowed=False, remaining=0, retry_after=max(1, retry_after)
            )

        timestamps.append(now)
        self._requests[client_id] = timestamps
        return RateLimitDecision(
            allowed=True,
            remaining=self.max_requests - len(timestamps),
            retry_after=0,
        )

    def _sweep(self, window_start: float) -> None:
        idle = [
            client_id
            for client_id, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for client_id in idle:
            del self._requests[client_id]

    def __len__(self) -> int:
        """Number of clients currently tracked."""
        return len(self._requests)

    def reset(self) -> None:
        self._requests.clear()
