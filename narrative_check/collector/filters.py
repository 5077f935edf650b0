"""Relevance and recency predicates applied to every search candidate."""

import time
from typing import Iterable, Optional, Sequence

from narrative_check.config import GENERIC_THREAD_PHRASES
from narrative_check.models.document import Document

SECONDS_PER_DAY = 24 * 60 * 60


def mentions_company(document: Document, company: str) -> bool:
    """Case-insensitive substring match of the company in title or body."""
    needle = company.lower()
    return needle in document.title.lower() or needle in document.body.lower()


def is_generic_thread(document: Document, phrases: Iterable[str] = GENERIC_THREAD_PHRASES) -> bool:
    """True for recurring megathreads that say nothing about a single company."""
    title = document.title.lower()
    return any(phrase in title for phrase in phrases)


def has_min_engagement(document: Document, min_score: int = 5, min_comments: int = 3) -> bool:
    return document.score >= min_score or document.num_comments >= min_comments


def is_recent(document: Document, now: float, window_days: int = 90) -> bool:
    return document.created_utc >= now - window_days * SECONDS_PER_DAY


class RelevanceFilter:
    """All four candidate predicates combined with logical AND."""

    def __init__(
        self,
        window_days: int = 90,
        min_score: int = 5,
        min_comments: int = 3,
        generic_phrases: Sequence[str] = GENERIC_THREAD_PHRASES,
    ):
        self.window_days = window_days
        self.min_score = min_score
        self.min_comments = min_comments
        self.generic_phrases = [phrase.lower() for phrase in generic_phrases]

    @classmethod
    def from_config(cls, search_config) -> "RelevanceFilter":
        return cls(
            window_days=search_config.window_days,
            min_score=search_config.min_score,
            min_comments=search_config.min_comments,
            generic_phrases=search_config.generic_phrases,
        )

    def accepts(self, document: Document, company: str, now: Optional[float] = None) -> bool:
        if now is None:
            now = time.time()
        return (
            mentions_company(document, company)
            and not is_generic_thread(document, self.generic_phrases)
            and has_min_engagement(document, self.min_score, self.min_comments)
            and is_recent(document, now, self.window_days)
        )

    def apply(self, documents: Iterable[Document], company: str, now: Optional[float] = None):
        if now is None:
            now = time.time()
        return [d for d in documents if self.accepts(d, company, now)]
