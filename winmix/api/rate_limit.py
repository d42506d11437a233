from typing import Callable, Dict, Optional
from dataclasses import dataclass
import math
import threading
import time


@dataclass(frozen=True)
class RateLimitResult:
    success: bool
    limit: int
    remaining: int
    reset_at: float

    def retry_after(self, now: Optional[float] = None) -> int:
        now = time.time() if now is None else now
        return max(0, math.ceil(self.reset_at - now))


@dataclass
class _Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """
    Fixed-window request counter keyed by client identifier.

    The first request from an identifier opens a window of interval_seconds;
    up to `limit` requests pass inside it. Expired windows are dropped once
    the table grows past twice the limit.
    """
    def __init__(
        self,
        limit: int,
        interval_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
    ):
        if limit <= 0:
            raise ValueError("limit must be positive")
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.limit = limit
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()

    def _cleanup(self, now: float) -> None:
        expired = [key for key, window in self._windows.items() if now > window.reset_at]
        for key in expired:
            del self._windows[key]

    def hit(self, identifier: str) -> RateLimitResult:
        now = self._clock()
        key = f"rate_limit_{identifier}"

        with self._lock:
            if len(self._windows) > self.limit * 2:
                self._cleanup(now)

            window = self._windows.get(key)
            if window is None or now > window.reset_at:
                window = _Window(count=1, reset_at=now + self.interval_seconds)
                self._windows[key] = window
                return RateLimitResult(
                    success=True,
                    limit=self.limit,
                    remaining=self.limit - 1,
                    reset_at=window.reset_at,
                )

            success = window.count < self.limit
            if success:
                window.count += 1

            return RateLimitResult(
                success=success,
                limit=self.limit,
                remaining=max(0, self.limit - window.count),
                reset_at=window.reset_at,
            )

    def now(self) -> float:
        return self._clock()

    def tracked(self) -> int:
        return len(self._windows)
