"""
Token bucket rate limiter for outbound requests to the results site.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

# Float slack so a refill that lands on 0.9999999 still counts as a token
_EPSILON = 1e-9


class RateLimiter:
    """Token bucket rate limiter.

    ``rate_limit`` requests are allowed per ``time_window`` seconds. The bucket
    starts empty by default, so even the first request waits one slot.

    Callers that guard a longer piece of work call ``release()`` when it is
    done; the next ``acquire()`` then waits at least one interval counted from
    that moment, however long the work took (1 request / 2.0 s leaves a 2 s
    pause between the end of one club sync and the start of the next).
    """

    def __init__(
        self,
        rate_limit: int,
        time_window: float = 1.0,
        *,
        initial_tokens: float = 0.0,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """
        Initialize rate limiter.

        Args:
            rate_limit: Maximum number of requests per time window
            time_window: Time window in seconds
            initial_tokens: Tokens available right away (0 = start empty)
            clock: Monotonic clock, injectable for tests
            sleep: Async sleep, injectable for tests
        """
        if rate_limit < 1:
            raise ValueError("rate_limit must be >= 1")
        if time_window <= 0:
            raise ValueError("time_window must be > 0")
        self.rate_limit = rate_limit
        self.time_window = time_window
        self.tokens = min(float(initial_tokens), float(rate_limit))
        self._clock = clock or time.monotonic
        self._sleep = sleep or asyncio.sleep
        self.last_refill = self._clock()
        self._blocked_until = 0.0
        self._hold_until = 0.0
        self._lock = asyncio.Lock()
        self.logger = logging.getLogger("rate_limiter")

    @property
    def interval(self) -> float:
        """Seconds needed to refill one token."""
        return self.time_window / self.rate_limit

    def _refill(self, now: float) -> None:
        elapsed = max(0.0, now - self.last_refill)
        self.tokens = min(self.rate_limit, self.tokens + elapsed / self.interval)
        self.last_refill = max(self.last_refill, now)

    def penalize(self, seconds: float) -> None:
        """Block acquisition for *seconds* (e.g. after HTTP 429) and drain the bucket."""
        if seconds <= 0:
            return
        until = self._clock() + seconds
        self._blocked_until = max(self._blocked_until, until)
        self.tokens = 0.0
        # No refill while blocked
        self.last_refill = max(self.last_refill, self._blocked_until)
        self.logger.info(f"Rate limiter penalized for {seconds:.1f}s")

    def release(self) -> None:
        """End of the work guarded by the last token; starts a one-interval pause."""
        self._hold_until = max(self._hold_until, self._clock() + self.interval)

    async def acquire(self) -> float:
        """Acquire a token, waiting if necessary. Returns the seconds waited."""
        waited = 0.0
        async with self._lock:
            while True:
                now = self._clock()
                hold = max(self._blocked_until, self._hold_until)
                if now < hold:
                    delay = hold - now
                else:
                    self._refill(now)
                    if self.tokens >= 1 - _EPSILON:
                        self.tokens = max(0.0, self.tokens - 1)
                        return waited
                    delay = (1 - self.tokens) * self.interval
                await self._sleep(delay)
                waited += delay
