"""Reddit collection: authentication, pacing, search, filtering and deduplication."""

from narrative_check.collector.dedup import dedupe, rank_by_engagement
from narrative_check.collector.filters import RelevanceFilter
from narrative_check.collector.rate_limiter import RateLimiter
from narrative_check.collector.search import RedditSearchClient, SearchExecutor, build_strategies
from narrative_check.collector.token_manager import TokenManager

__all__ = [
    "RateLimiter",
    "RedditSearchClient",
    "RelevanceFilter",
    "SearchExecutor",
    "TokenManager",
    "build_strategies",
    "dedupe",
    "rank_by_engagement",
]
