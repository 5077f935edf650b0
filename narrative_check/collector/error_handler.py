"""Retry logic and failure tracking for upstream Reddit requests."""

import asyncio
import logging
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, TypeVar, cast

import aiohttp
from aiohttp.client_exceptions import ClientResponseError

from narrative_check.collector.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

T = TypeVar("T")
AsyncFunc = Callable[..., Awaitable[T]]


class ConsecutiveErrorTracker:
    """Tracks consecutive failures of one kind against an abort threshold."""

    def __init__(self, threshold: int, label: str = "401", prometheus_exporter=None):
        """
        Initialize the error tracker.

        Args:
            threshold: Number of consecutive errors that triggers an abort
            label: Error type reported to metrics
            prometheus_exporter: Optional Prometheus exporter for metrics
        """
        self.threshold = threshold
        self.label = label
        self.consecutive_errors = 0
        self.prometheus_exporter = prometheus_exporter

    def record_error(self) -> None:
        self.consecutive_errors += 1
        logger.warning(f"Consecutive {self.label} errors: {self.consecutive_errors}/{self.threshold}")

        if self.prometheus_exporter:
            self.prometheus_exporter.record_api_error(self.label)

    def record_success(self) -> None:
        if self.consecutive_errors > 0:
            logger.info(f"Resetting consecutive {self.label} counter (was {self.consecutive_errors})")
            self.consecutive_errors = 0

    def should_abort(self) -> bool:
        return self.consecutive_errors >= self.threshold


def with_exponential_backoff(
    max_retries: Optional[int] = None,
    initial_backoff: float = 1.0,
    max_backoff: float = 32.0,
    backoff_factor: float = 2.0,
    rate_limiter: Optional[RateLimiter] = None,
) -> Callable[[AsyncFunc[T]], AsyncFunc[T]]:
    """
    Decorator for retrying async request methods with exponential backoff.

    Server errors (5xx), connection errors and timeouts are retried. A 429 is
    handed to the rate limiter and retried without consuming the budget. Other
    HTTP errors are re-raised at once. When decorating a method, ``max_retries``
    and ``rate_limiter`` default to the instance's attributes of the same name.

    Args:
        max_retries: Maximum number of retry attempts
        initial_backoff: Initial backoff time in seconds
        max_backoff: Maximum backoff time in seconds
        backoff_factor: Multiplier for backoff time between retries
        rate_limiter: Rate limiter for handling 429 responses

    Returns:
        Decorator function
    """
    def decorator(func: AsyncFunc[T]) -> AsyncFunc[T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            owner = args[0] if args else None
            retries_allowed = max_retries
            if retries_allowed is None:
                retries_allowed = getattr(owner, "max_retries", 3)
            limiter = rate_limiter or getattr(owner, "rate_limiter", None)

            retries = 0
            backoff = initial_backoff

            while True:
                try:
                    return await func(*args, **kwargs)

                except ClientResponseError as e:
                    if e.status == 429 and limiter:
                        retry_after = e.headers.get("Retry-After") if e.headers else None
                        await limiter.handle_429(retry_after)
                        continue

                    if 500 <= e.status < 600:
                        if retries >= retries_allowed:
                            logger.error(f"Max retries ({retries_allowed}) exceeded: {e}")
                            raise

                        logger.warning(
                            f"Server error {e.status}: {e.message}. "
                            f"Retrying in {backoff:.2f}s ({retries + 1}/{retries_allowed})"
                        )
                        await asyncio.sleep(backoff)
                        retries += 1
                        backoff = min(backoff * backoff_factor, max_backoff)
                        continue

                    logger.warning(f"Client error {e.status}: {e.message}")
                    raise

                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    if retries >= retries_allowed:
                        logger.error(f"Max retries ({retries_allowed}) exceeded: {e!r}")
                        raise

                    logger.warning(
                        f"Error: {e!r}. "
                        f"Retrying in {backoff:.2f}s ({retries + 1}/{retries_allowed})"
                    )
                    await asyncio.sleep(backoff)
                    retries += 1
                    backoff = min(backoff * backoff_factor, max_backoff)

        return cast(AsyncFunc[T], wrapper)
    return decorator
