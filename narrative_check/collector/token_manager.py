"""Bearer token acquisition and caching for the Reddit API."""

import asyncio
import logging
import time
from typing import Callable, Optional

import aiohttp

from narrative_check.exceptions import AuthError

logger = logging.getLogger(__name__)

TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
DEFAULT_TOKEN_LIFETIME = 3600


class TokenManager:
    """
    Acquires an application-only OAuth token and caches it until expiry.

    The cached token is the only state shared between gathering sessions.
    Concurrent callers may both refresh an expired token; the exchange is
    idempotent so the duplicate request is harmless and no lock is taken.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        session: aiohttp.ClientSession,
        user_agent: str = "NarrativeCheck/1.0",
        token_url: str = TOKEN_URL,
        clock: Callable[[], float] = time.time,
        prometheus_exporter=None,
    ):
        """
        Initialize the token manager.

        Args:
            client_id: Reddit application client id
            client_secret: Reddit application client secret
            session: HTTP session used for the credential exchange
            user_agent: User-Agent header sent to Reddit
            token_url: Credential exchange endpoint
            clock: Wall-clock source in seconds, injectable for tests
            prometheus_exporter: Optional Prometheus exporter for metrics
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.session = session
        self.user_agent = user_agent
        self.token_url = token_url
        self.prometheus_exporter = prometheus_exporter
        self._clock = clock
        self._token: Optional[str] = None
        self._expires_at: float = 0.0

    @property
    def expires_at(self) -> float:
        return self._expires_at

    async def get_token(self) -> str:
        """
        Return a valid bearer token, exchanging credentials if needed.

        Raises:
            AuthError: If the credential exchange fails or returns a non-success status
        """
        if self._token and self._clock() < self._expires_at:
            return self._token

        logger.info("Requesting new Reddit access token")
        auth = aiohttp.BasicAuth(self.client_id, self.client_secret)

        try:
            async with self.session.post(
                self.token_url,
                data={"grant_type": "client_credentials"},
                auth=auth,
                headers={"User-Agent": self.user_agent},
            ) as response:
                if response.status != 200:
                    logger.error(f"Reddit auth failed: {response.status}")
                    raise AuthError(response.status)
                payload = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Reddit credential exchange failed: {e!r}")
            raise AuthError(None, f"Reddit credential exchange failed: {e!r}") from e

        token = payload.get("access_token")
        if not token:
            raise AuthError(response.status, "Reddit auth response did not include an access token")

        self._token = token
        lifetime = float(payload.get("expires_in") or DEFAULT_TOKEN_LIFETIME)
        self._expires_at = self._clock() + lifetime

        if self.prometheus_exporter:
            self.prometheus_exporter.record_token_refresh()

        logger.debug(f"Reddit access token valid for {lifetime:.0f}s")
        return self._token

    def invalidate(self) -> None:
        """Drop the cached token so the next call performs a fresh exchange."""
        self._token = None
        self._expires_at = 0.0
