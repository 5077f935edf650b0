"""Retail-interest metrics computed from an already classified corpus."""

import time
from typing import Dict, List, Optional, Sequence

from narrative_check.analysis.rules import Category, scan
from narrative_check.analysis.stats import percent, round_half_up, total_engagement
from narrative_check.collector.filters import SECONDS_PER_DAY
from narrative_check.models.document import Document
from narrative_check.models.report import RetailMetrics
from narrative_check.models.sentiment import CorpusResult

WEEK = 7 * SECONDS_PER_DAY


def weekly_trend(documents: Sequence[Document], now: Optional[float] = None) -> str:
    """
    Compare post volume in the last seven days with the seven days before.

    Returns ``stable`` when either week has no posts.
    """
    if now is None:
        now = time.time()
    week_ago = now - WEEK
    two_weeks_ago = now - 2 * WEEK

    this_week = sum(1 for d in documents if d.created_utc > week_ago)
    last_week = sum(1 for d in documents if two_weeks_ago < d.created_utc <= week_ago)

    if this_week == 0 or last_week == 0:
        return "stable"

    change = (this_week - last_week) / last_week * 100
    if change > 50:
        return "surging"
    if change > 20:
        return "increasing"
    if change < -50:
        return "declining sharply"
    if change < -20:
        return "decreasing"
    return "stable"


def trending_topics(documents: Sequence[Document], now: Optional[float] = None, limit: int = 5) -> List[str]:
    """Most frequent trending-topic labels over the last seven days of posts."""
    if now is None:
        now = time.time()

    counts: Dict[str, int] = {}
    for document in documents:
        if now - document.created_utc > WEEK:
            continue
        for hit in scan(document.text.lower(), Category.TRENDING):
            counts[hit.label] = counts.get(hit.label, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [topic for topic, _ in ranked[:limit]]


def sentiment_breakdown(corpus: CorpusResult) -> Dict[str, int]:
    total = corpus.total
    return {
        "bullish": percent(len(corpus.bullish), total),
        "bearish": percent(len(corpus.bearish), total),
        "neutral": percent(len(corpus.neutral), total),
    }


def retail_metrics(corpus: CorpusResult, now: Optional[float] = None) -> RetailMetrics:
    """
    Volume, engagement and community spread of a corpus.

    Args:
        corpus: Classified corpus
        now: Reference time for the weekly trend

    Returns:
        RetailMetrics for the corpus
    """
    documents = corpus.documents
    engagement = total_engagement(documents)

    subreddit_counts: Dict[str, int] = {}
    for document in documents:
        subreddit_counts[document.subreddit] = subreddit_counts.get(document.subreddit, 0) + 1
    top_subreddits = [
        name for name, _ in sorted(subreddit_counts.items(), key=lambda item: item[1], reverse=True)[:3]
    ]

    return RetailMetrics(
        total_posts=len(documents),
        total_engagement=engagement,
        average_engagement=round_half_up(engagement / len(documents)) if documents else 0,
        sentiment_breakdown=sentiment_breakdown(corpus),
        top_subreddits=top_subreddits,
        weekly_trend=weekly_trend(documents, now),
    )
