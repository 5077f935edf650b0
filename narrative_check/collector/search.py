"""Multi-strategy Reddit search for company discussion."""

import asyncio
import logging
import time
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

import aiohttp
from aiohttp.client_exceptions import ClientResponseError

from narrative_check.collector.error_handler import ConsecutiveErrorTracker, with_exponential_backoff
from narrative_check.collector.filters import RelevanceFilter
from narrative_check.collector.rate_limiter import RateLimiter
from narrative_check.collector.token_manager import TokenManager
from narrative_check.config import DEFAULT_SUBREDDITS
from narrative_check.exceptions import AuthError, UpstreamRequestError
from narrative_check.models.document import Document
from narrative_check.models.mapping import listing_to_documents

logger = logging.getLogger(__name__)

SEARCH_URL = "https://oauth.reddit.com/r/{subreddit}/search.json"


@dataclass(frozen=True)
class SearchStrategy:
    """One query string and the subreddits it is run against."""

    name: str
    query: str
    subreddits: Sequence[str]


def build_strategies(company: str, subreddits: Sequence[str] = DEFAULT_SUBREDDITS) -> List[SearchStrategy]:
    """
    The fixed, ordered strategy battery for a company.

    Not every query runs against every subreddit; each variant is scoped to
    the communities where it is most likely to surface real discussion.
    Earlier strategies win when the candidate cap is reached.
    """
    return [
        SearchStrategy("direct", company, list(subreddits[0:5])),
        SearchStrategy("ticker", f"${company.upper()}", list(subreddits[0:5])),
        SearchStrategy("quoted", f'"{company}"', list(subreddits[5:10])),
        SearchStrategy("dd", f"{company} DD", ["stocks", "wallstreetbets", "investing"]),
        SearchStrategy("analysis", f"{company} analysis", ["SecurityAnalysis", "valueinvesting"]),
        SearchStrategy("bullish", f"{company} bullish", ["wallstreetbets", "options"]),
        SearchStrategy("bearish", f"{company} bearish", ["stocks", "investing"]),
    ]


class RedditSearchClient:
    """Issues single authenticated subreddit search requests."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        token_manager: TokenManager,
        rate_limiter: RateLimiter,
        user_agent: str = "NarrativeCheck/1.0",
        page_size: int = 100,
        sort: str = "relevance",
        time_filter: str = "year",
        max_retries: int = 2,
        prometheus_exporter=None,
    ):
        self.session = session
        self.token_manager = token_manager
        self.rate_limiter = rate_limiter
        self.user_agent = user_agent
        self.page_size = page_size
        self.sort = sort
        self.time_filter = time_filter
        self.max_retries = max_retries
        self.prometheus_exporter = prometheus_exporter

    async def search(self, query: str, subreddit: str) -> List[Dict[str, Any]]:
        """
        Search one subreddit.

        Args:
            query: Free-text search query
            subreddit: Subreddit to restrict the search to

        Returns:
            Raw listing ``data`` mappings in relevance order

        Raises:
            UpstreamRequestError: If the request fails after retries
            AuthError: If the bearer token cannot be obtained
        """
        token = await self.token_manager.get_token()
        try:
            return await self._fetch_listing(query, subreddit, token)
        except ClientResponseError as e:
            if self.prometheus_exporter:
                error_type = "5xx" if 500 <= e.status < 600 else str(e.status)
                self.prometheus_exporter.record_api_error(error_type)
            if e.status == 401:
                self.token_manager.invalidate()
            raise UpstreamRequestError(e.status, subreddit, query) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            if self.prometheus_exporter:
                self.prometheus_exporter.record_api_error("connection")
            raise UpstreamRequestError(
                None, subreddit, query, f"Search r/{subreddit} for {query!r} failed: {e!r}"
            ) from e

    @with_exponential_backoff()
    async def _fetch_listing(self, query: str, subreddit: str, token: str) -> List[Dict[str, Any]]:
        await self.rate_limiter.pre_request()

        if self.prometheus_exporter:
            self.prometheus_exporter.record_search_request(subreddit)
            timer = self.prometheus_exporter.time_request()
        else:
            timer = None

        params = {
            "q": query,
            "restrict_sr": "true",
            "sort": self.sort,
            "t": self.time_filter,
            "limit": self.page_size,
        }
        headers = {"Authorization": f"Bearer {token}", "User-Agent": self.user_agent}

        with timer if timer else nullcontext():
            async with self.session.get(
                SEARCH_URL.format(subreddit=subreddit), params=params, headers=headers
            ) as response:
                self.rate_limiter.update_from_headers(response.headers)
                response.raise_for_status()
                payload = await response.json()

        if not isinstance(payload, dict):
            return []
        children = (payload.get("data") or {}).get("children") or []
        return [child.get("data") or {} for child in children if isinstance(child, dict)]


class SearchExecutor:
    """
    Runs the strategy battery sequentially and accumulates relevant candidates.

    Requests are issued one at a time. A failed request is logged and skipped.
    Accumulation stops once the number of relevant candidates (before
    deduplication) reaches the cap; the check runs after each completed
    request, so later strategies never execute once it is hit.
    """

    def __init__(
        self,
        search_client: RedditSearchClient,
        relevance_filter: Optional[RelevanceFilter] = None,
        subreddits: Sequence[str] = DEFAULT_SUBREDDITS,
        raw_candidate_cap: int = 200,
        auth_failure_threshold: int = 3,
        strategy_builder: Callable[[str, Sequence[str]], List[SearchStrategy]] = build_strategies,
        clock: Callable[[], float] = time.time,
        prometheus_exporter=None,
    ):
        self.search_client = search_client
        self.relevance_filter = relevance_filter or RelevanceFilter()
        self.subreddits = list(subreddits)
        self.raw_candidate_cap = raw_candidate_cap
        self.auth_failure_threshold = auth_failure_threshold
        self.strategy_builder = strategy_builder
        self._clock = clock
        self.prometheus_exporter = prometheus_exporter
        # Requests issued by the most recently completed search
        self.requests_issued = 0

    async def search(self, company: str) -> List[Document]:
        """
        Gather relevant candidate documents for a company.

        The 401 counter is scoped to this call, so concurrent or successive
        searches on one executor never see each other's failures.

        Args:
            company: Company name or ticker

        Returns:
            Relevant documents in accumulation order, possibly with duplicates

        Raises:
            AuthError: If credentials cannot be obtained or repeated 401s occur
        """
        now = self._clock()
        candidates: List[Document] = []
        auth_tracker = ConsecutiveErrorTracker(
            self.auth_failure_threshold, label="401", prometheus_exporter=self.prometheus_exporter
        )
        issued = 0

        for strategy in self.strategy_builder(company, self.subreddits):
            logger.info(f"Running '{strategy.name}' strategy: {strategy.query!r} "
                        f"across {len(strategy.subreddits)} subreddits")

            for subreddit in strategy.subreddits:
                issued += 1
                try:
                    items = await self.search_client.search(strategy.query, subreddit)
                except UpstreamRequestError as e:
                    logger.warning(f"Error searching r/{subreddit} for {strategy.query!r}: {e}")
                    if e.status_code == 401:
                        _record_auth_failure(auth_tracker)
                    continue

                auth_tracker.record_success()
                kept = self.relevance_filter.apply(listing_to_documents(items), company, now)
                candidates.extend(kept)

                if self.prometheus_exporter:
                    self.prometheus_exporter.record_candidates(subreddit, len(kept))
                logger.debug(f"r/{subreddit} returned {len(items)} items, {len(kept)} relevant")

                if len(candidates) >= self.raw_candidate_cap:
                    logger.info(f"Candidate cap of {self.raw_candidate_cap} reached after {issued} requests")
                    self.requests_issued = issued
                    return candidates

        logger.info(f"Collected {len(candidates)} candidates for {company} in {issued} requests")
        self.requests_issued = issued
        return candidates


def _record_auth_failure(tracker: ConsecutiveErrorTracker) -> None:
    tracker.record_error()
    if tracker.should_abort():
        logger.error(f"Aborting search after {tracker.consecutive_errors} consecutive authorization failures")
        raise AuthError(401, "Reddit search repeatedly rejected the bearer token")
