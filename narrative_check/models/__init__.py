"""Data models shared across the gathering pipeline."""

from narrative_check.models.document import Document
from narrative_check.models.report import DivergenceReport, FinancialReality, NarrativeReport, RetailMetrics
from narrative_check.models.sentiment import (
    Bucket,
    CorpusResult,
    Excerpt,
    NarrativeBullet,
    SentimentVerdict,
    SourceReference,
    ThemeTally,
)

__all__ = [
    "Bucket",
    "CorpusResult",
    "DivergenceReport",
    "Document",
    "Excerpt",
    "FinancialReality",
    "NarrativeBullet",
    "NarrativeReport",
    "RetailMetrics",
    "SentimentVerdict",
    "SourceReference",
    "ThemeTally",
]
