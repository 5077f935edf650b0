"""Tests for the rate limiter module."""

import asyncio
import unittest
from unittest.mock import AsyncMock, patch

from narrative_check.collector.rate_limiter import RateLimiter
from narrative_check.config import RateLimitConfig


class FakeClock:
    def __init__(self, value: float = 100.0):
        self.value = value

    def __call__(self) -> float:
        return self.value


class TestRateLimiter(unittest.TestCase):
    """Test cases for the RateLimiter class."""

    def setUp(self):
        self.config = RateLimitConfig(
            max_requests_per_minute=60,  # 1 request per second
            min_remaining_calls=5,
            sleep_buffer_sec=1,
        )
        self.clock = FakeClock()
        self.rate_limiter = RateLimiter(self.config, clock=self.clock)

    @patch("narrative_check.collector.rate_limiter.asyncio.sleep", new_callable=AsyncMock)
    def test_pre_request_enforces_min_interval(self, mock_sleep):
        self.rate_limiter.last_request_time = 100.0
        self.clock.value = 100.5

        asyncio.run(self.rate_limiter.pre_request())

        mock_sleep.assert_awaited_once_with(0.5)

    @patch("narrative_check.collector.rate_limiter.asyncio.sleep", new_callable=AsyncMock)
    def test_pre_request_no_sleep_needed(self, mock_sleep):
        self.rate_limiter.last_request_time = 100.0
        self.clock.value = 101.5

        asyncio.run(self.rate_limiter.pre_request())

        mock_sleep.assert_not_awaited()
        self.assertEqual(self.rate_limiter.last_request_time, 101.5)

    @patch("narrative_check.collector.rate_limiter.asyncio.sleep", new_callable=AsyncMock)
    def test_pre_request_waits_for_quota_reset(self, mock_sleep):
        self.rate_limiter.update_from_headers({"X-Ratelimit-Remaining": "2", "X-Ratelimit-Reset": "10"})

        asyncio.run(self.rate_limiter.pre_request())

        # reset in 10s plus a 1s buffer
        mock_sleep.assert_awaited_once_with(11.0)
        self.assertIsNone(self.rate_limiter.remaining_calls)
        self.assertIsNone(self.rate_limiter.reset_at)

    def test_update_from_headers_is_case_insensitive(self):
        self.rate_limiter.update_from_headers({"x-ratelimit-remaining": "42.0", "X-RATELIMIT-RESET": "30"})

        self.assertEqual(self.rate_limiter.remaining_calls, 42)
        self.assertEqual(self.rate_limiter.reset_at, 130.0)

    def test_update_from_headers_ignores_garbage(self):
        self.rate_limiter.update_from_headers({"x-ratelimit-remaining": "lots"})

        self.assertIsNone(self.rate_limiter.remaining_calls)

    @patch("narrative_check.collector.rate_limiter.asyncio.sleep", new_callable=AsyncMock)
    def test_handle_429_uses_retry_after(self, mock_sleep):
        asyncio.run(self.rate_limiter.handle_429("5"))

        mock_sleep.assert_awaited_once_with(6.0)

    @patch("narrative_check.collector.rate_limiter.asyncio.sleep", new_callable=AsyncMock)
    def test_handle_429_defaults_to_a_minute(self, mock_sleep):
        asyncio.run(self.rate_limiter.handle_429(None))

        mock_sleep.assert_awaited_once_with(61.0)


if __name__ == "__main__":
    unittest.main()
