"""Token-bucket rate limiter shared by all requests of one client."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Token bucket that refills lazily whenever it is checked.

    The bucket starts full, so the first ``max_tokens`` requests go straight
    through. There is no background timer: every check works out how many
    whole intervals have passed since the last refill and tops up by that.

    Waiters are not queued. When several coroutines are sleeping for a
    token, whichever checks first after a refill gets it, so a newcomer can
    overtake an older waiter.
    """

    def __init__(
        self,
        max_tokens: int,
        refill_interval: float,
        tokens_per_refill: int,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_tokens < 1 or tokens_per_refill < 1:
            raise ValueError("max_tokens and tokens_per_refill must be positive")
        if refill_interval <= 0:
            raise ValueError("refill_interval must be positive")
        self.max_tokens = max_tokens
        self.refill_interval = refill_interval
        self.tokens_per_refill = tokens_per_refill
        self._clock = clock
        self._sleep = sleep
        self._tokens = max_tokens
        self._last_refill = clock()
        self._lock = asyncio.Lock()

    @classmethod
    def for_jira_cloud(cls, **kwargs) -> RateLimiter:
        """100 requests per minute."""
        return cls(100, 60.0, 100, **kwargs)

    @property
    def available(self) -> int:
        self._refill()
        return self._tokens

    def _refill(self) -> float:
        """Top up for every whole interval passed. Returns time since last refill."""
        now = self._clock()
        elapsed = now - self._last_refill
        if elapsed >= self.refill_interval:
            intervals = int(elapsed // self.refill_interval)
            self._tokens = min(self.max_tokens, self._tokens + intervals * self.tokens_per_refill)
            self._last_refill += intervals * self.refill_interval
            elapsed = now - self._last_refill
        return elapsed

    def try_acquire(self) -> bool:
        """Take a token if one is available. Never waits."""
        self._refill()
        if self._tokens > 0:
            self._tokens -= 1
            return True
        return False

    async def acquire(self) -> None:
        """Take a token, sleeping until the next refill while the bucket is empty."""
        while True:
            async with self._lock:
                elapsed = self._refill()
                if self._tokens > 0:
                    self._tokens -= 1
                    return
                wait = self.refill_interval - elapsed
            logger.debug("rate limit reached, waiting %.2fs", wait)
            await self._sleep(wait)
