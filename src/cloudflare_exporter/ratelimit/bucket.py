# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Token bucket limiter for upstream API calls.

Every dispatch to the Cloudflare API, retries included, takes one token.
The bucket refills at ``rate`` tokens per second up to ``burst`` tokens, so
short bursts are allowed while the long-run call rate never exceeds
``rate``.
"""

import asyncio
import logging
import math
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class TokenBucketLimiter:
    """
    Asynchronous token bucket shared by all fetches of a cycle.

    Key Properties:
    - Never rejects: callers wait until their token is due
    - Reservation under lock, sleep outside the lock
    - FIFO fairness: the balance may go negative, each caller waits for its slot
    - Cancellation-safe: a cancelled waiter gives its reservation back
    """

    def __init__(
        self,
        rate: float,
        burst: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the limiter.

        Args:
            rate: Tokens added per second
            burst: Bucket capacity (maximum tokens available at once)
            clock: Monotonic clock, injectable for tests
        """
        if not math.isfinite(rate) or rate <= 0:
            raise ValueError(f"rate must be a positive finite number, got {rate}")
        if burst < 1:
            raise ValueError(f"burst must be at least 1, got {burst}")
        self.rate = float(rate)
        self.burst = int(burst)
        self._clock = clock
        self._tokens = float(burst)
        self._updated_at = clock()
        self._lock = asyncio.Lock()
        self._acquired = 0

    @property
    def acquired_count(self) -> int:
        """Total number of tokens handed out."""
        return self._acquired

    def _refill(self, now: float) -> None:
        elapsed = max(0.0, now - self._updated_at)
        self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
        self._updated_at = now

    async def acquire(self) -> float:
        """
        Wait for one token.

        Returns the delay (in seconds) that was applied.

        Raises:
            asyncio.CancelledError: If the waiting task is cancelled
        """
        # Phase 1: reserve a slot under the lock (fast, no I/O)
        async with self._lock:
            self._refill(self._clock())
            self._tokens -= 1.0
            self._acquired += 1
            wait_time = 0.0 if self._tokens >= 0 else -self._tokens / self.rate

        # Phase 2: sleep OUTSIDE the lock
        if wait_time > 0:
            try:
                await asyncio.sleep(wait_time)
            except asyncio.CancelledError:
                async with self._lock:
                    self._tokens += 1.0
                    self._acquired -= 1
                raise
            logger.debug(f"Rate limiter delayed upstream call by {wait_time:.3f}s")

        return wait_time


__all__ = ["TokenBucketLimiter"]
