"""Rate limiting for sequential Reddit search requests."""

import asyncio
import logging
import time
from typing import Any, Mapping, Optional

from narrative_check.config import RateLimitConfig

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Paces upstream requests.

    Enforces a minimum interval between requests and watches the
    X-Ratelimit headers Reddit returns so the quota is never exhausted.
    """

    def __init__(self, config: RateLimitConfig, clock=time.monotonic):
        """
        Initialize the rate limiter with configuration.

        Args:
            config: Rate limiting configuration
            clock: Monotonic time source, injectable for tests
        """
        self.config = config
        self._clock = clock
        self.remaining_calls: Optional[int] = None
        self.reset_at: Optional[float] = None
        self.last_request_time: Optional[float] = None
        self.min_interval = 60.0 / self.config.max_requests_per_minute

    async def pre_request(self) -> None:
        """Sleep as needed before issuing the next request."""
        if self.last_request_time is not None:
            elapsed = self._clock() - self.last_request_time
            if elapsed < self.min_interval:
                await asyncio.sleep(self.min_interval - elapsed)

        if (self.remaining_calls is not None
                and self.reset_at is not None
                and self.remaining_calls < self.config.min_remaining_calls):
            wait_time = self.reset_at - self._clock() + self.config.sleep_buffer_sec
            if wait_time > 0:
                logger.info(f"Rate limit approaching: {self.remaining_calls} calls remaining. "
                            f"Sleeping for {wait_time:.2f}s until reset.")
                await asyncio.sleep(wait_time)
            self.remaining_calls = None
            self.reset_at = None

        self.last_request_time = self._clock()

    def update_from_headers(self, headers: Mapping[str, Any]) -> None:
        """
        Update rate limit tracking from Reddit API response headers.

        Args:
            headers: Response headers from a Reddit API request
        """
        lowered = {str(k).lower(): v for k, v in headers.items()}

        if "x-ratelimit-remaining" in lowered:
            try:
                self.remaining_calls = int(float(lowered["x-ratelimit-remaining"]))
            except (ValueError, TypeError):
                logger.warning("Failed to parse x-ratelimit-remaining header")

        if "x-ratelimit-reset" in lowered:
            try:
                self.reset_at = self._clock() + float(lowered["x-ratelimit-reset"])
            except (ValueError, TypeError):
                logger.warning("Failed to parse x-ratelimit-reset header")

        if self.remaining_calls is not None and self.reset_at is not None:
            logger.debug(f"Rate limit status: {self.remaining_calls} calls remaining, "
                         f"reset in {self.reset_at - self._clock():.2f}s")

    async def handle_429(self, retry_after: Optional[str] = None) -> None:
        """
        Handle a 429 Too Many Requests response.

        Args:
            retry_after: Value of the Retry-After header, if available
        """
        wait_seconds = 60.0
        if retry_after:
            try:
                wait_seconds = float(retry_after)
            except (ValueError, TypeError):
                pass

        wait_seconds += self.config.sleep_buffer_sec

        logger.warning(f"Rate limited (429). Waiting for {wait_seconds:.2f}s before retrying.")
        await asyncio.sleep(wait_seconds)

        self.remaining_calls = None
        self.reset_at = None
