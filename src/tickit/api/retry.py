"""Retry with exponential backoff, aware of which errors are worth retrying."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from tickit.errors import (
    ApiError,
    AuthenticationError,
    IoError,
    NetworkError,
    TrackerError,
    ValidationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Client errors that will fail the same way on every attempt
NON_RETRYABLE_STATUSES = frozenset({400, 401, 403, 404, 422})


@dataclass(frozen=True)
class RetryConfig:
    max_retries: int = 3
    initial_delay: float = 0.1
    max_delay: float = 10.0
    backoff_multiplier: float = 2.0

    def __post_init__(self):
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be at least 1")
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")


def _aborts(error: TrackerError) -> bool:
    if isinstance(error, (AuthenticationError, ValidationError)):
        return True
    return isinstance(error, ApiError) and error.status in NON_RETRYABLE_STATUSES


def is_retryable(error: BaseException) -> bool:
    """Whether a request that failed with ``error`` might succeed if repeated."""
    if isinstance(error, (NetworkError, IoError)):
        return True
    if isinstance(error, ApiError):
        return error.status == 429 or error.status >= 500
    return False


async def retry(
    config: RetryConfig,
    operation: Callable[[], Awaitable[T]],
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or the retry budget is spent.

    ``operation`` is called afresh for every attempt. Authentication and
    validation failures, and 4xx client errors, are raised straight away.
    """
    delay = config.initial_delay
    for attempt in range(config.max_retries + 1):
        try:
            return await operation()
        except TrackerError as exc:
            if _aborts(exc) or attempt == config.max_retries:
                raise
            logger.debug("attempt %d failed (%s), retrying in %.2fs", attempt + 1, exc, delay)
        await sleep(delay)
        delay = min(delay * config.backoff_multiplier, config.max_delay)
    raise AssertionError("unreachable")
