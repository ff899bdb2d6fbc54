"""Retry with exponential backoff for async operations."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, List, Optional, TypeVar

from constants import (
    DEFAULT_EXPONENTIAL_BASE,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_DELAY,
    DEFAULT_MAX_RETRIES,
)

T = TypeVar("T")

RetryObserver = Callable[[int, Exception], None]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry bounds and delay schedule. Delays are in seconds."""

    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay: float = DEFAULT_INITIAL_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    exponential_base: float = DEFAULT_EXPONENTIAL_BASE
    on_retry: Optional[RetryObserver] = None

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be >= 0")
        if self.exponential_base <= 1:
            raise ValueError("exponential_base must be > 1")

    def with_observer(self, on_retry: Optional[RetryObserver]) -> "RetryPolicy":
        """Return a copy of the policy using a different retry observer."""
        return replace(self, on_retry=on_retry)


DEFAULT_RETRY_POLICY = RetryPolicy()


def compute_delays(policy: RetryPolicy) -> List[float]:
    """Return the waits slept before each retry, in order."""
    delays: List[float] = []
    delay = min(policy.initial_delay, policy.max_delay)
    for _ in range(policy.max_retries):
        delays.append(delay)
        delay = min(delay * policy.exponential_base, policy.max_delay)
    return delays


def _notify(policy: RetryPolicy, attempt: int, exc: Exception) -> None:
    if policy.on_retry is None:
        return
    try:
        policy.on_retry(attempt, exc)
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("on_retry observer failed")


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await ``operation`` until it succeeds or the policy's retries run out.

    Every ``Exception`` counts as a failure; the last one is re-raised
    unchanged once ``policy.max_retries`` retries have been spent. The
    observer receives the 1-based number of the attempt that failed.
    """
    delay = min(policy.initial_delay, policy.max_delay)
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            if attempt >= policy.max_retries:
                raise
            attempt += 1
            logger.debug(
                "Attempt %d/%d failed: %s. Retrying in %.2fs",
                attempt,
                policy.max_retries + 1,
                exc,
                delay,
            )
            _notify(policy, attempt, exc)
            await sleep(delay)
            delay = min(delay * policy.exponential_base, policy.max_delay)
