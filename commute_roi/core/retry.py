"""Retry and fallback combinators for flaky upstream calls.

Both combinators take zero-argument coroutine factories so the policy can
be exercised without any HTTP:

    values = await with_fallback(
        primary=lambda: with_retry(lambda: primary.elevations(chunk), policy),
        secondary=lambda: with_retry(lambda: secondary.elevations(chunk), policy),
    )

with_retry re-runs a call after rate limiting (HTTP 429) or a transport
failure, waiting backoff_base_s ** attempt between attempts. Any other
error propagates immediately. with_fallback runs the secondary call when
the primary raises UpstreamFailure, and raises a combined UpstreamFailure
when both fail.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

import httpx

from commute_roi.constants import ElevationConfig
from commute_roi.model.errors import RetryExhaustedError, UpstreamFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class RateLimitedError(UpstreamFailure):
    """Upstream answered with a rate-limit status (HTTP 429)."""

    def __init__(self, provider: str, status_code: int) -> None:
        super().__init__(f"{provider} rate limited (HTTP {status_code})")
        self.provider = provider
        self.status_code = status_code


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how long to retry a failing call.

    Attributes:
        max_attempts: Total attempts including the first one
        backoff_base_s: Wait before attempt n+1 is backoff_base_s ** n seconds
        retry_on: Exception types that trigger another attempt
    """

    max_attempts: int = ElevationConfig.MAX_ATTEMPTS
    backoff_base_s: float = ElevationConfig.BACKOFF_BASE_S
    retry_on: tuple[type[BaseException], ...] = field(default=(RateLimitedError, httpx.TransportError))

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")

    def backoff_s(self, attempt: int) -> float:
        """Seconds to wait after a failed attempt (1-based)."""
        return self.backoff_base_s**attempt


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Await fn(), retrying retryable failures with exponential backoff.

    Args:
        fn: Zero-argument factory returning a fresh awaitable per attempt
        policy: Retry policy (defaults to ElevationConfig values)
        sleep: Awaitable sleep, injectable for tests

    Returns:
        The first successful result.

    Raises:
        RetryExhaustedError: If every attempt failed with a retryable error.
        Exception: Any non-retryable error from fn, unchanged.
    """
    policy = policy or RetryPolicy()
    last_error: Exception | None = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await fn()
        except policy.retry_on as e:
            last_error = e
            if attempt == policy.max_attempts:
                break
            wait_s = policy.backoff_s(attempt)
            logger.warning(f"{e}; retrying in {wait_s:.0f}s (attempt {attempt}/{policy.max_attempts})")
            await sleep(wait_s)

    raise RetryExhaustedError(attempts=policy.max_attempts, last_error=last_error)


async def with_fallback(
    primary: Callable[[], Awaitable[T]],
    secondary: Callable[[], Awaitable[T]],
) -> T:
    """Await primary(), falling back to secondary() on UpstreamFailure.

    Raises:
        UpstreamFailure: If both calls fail, naming both errors.
    """
    try:
        return await primary()
    except UpstreamFailure as primary_error:
        logger.warning(f"Primary provider failed ({primary_error}), trying fallback")
        try:
            return await secondary()
        except UpstreamFailure as fallback_error:
            logger.error(f"Both providers failed. Primary: {primary_error}, Fallback: {fallback_error}")
            raise UpstreamFailure(
                f"All providers failed. Primary: {primary_error.message}, Fallback: {fallback_error.message}"
            ) from fallback_error
