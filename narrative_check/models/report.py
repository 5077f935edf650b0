"""Report models returned to callers of a gathering session."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from narrative_check.models.sentiment import CorpusResult, NarrativeBullet


class FinancialReality(BaseModel):
    """Fundamentals, risks and trends drawn from official financial sources."""

    company: str
    fundamentals: List[str]
    risks: List[str]
    trends: List[str]
    source: str  # e.g. "10-K Q1 2025"
    date: str


class DivergenceReport(BaseModel):
    """How far the social narrative sits from the financial reality."""

    score: int  # 0-100, higher means more divergence
    level: str  # low | medium | high
    summary: str
    key_points: List[str]


class RetailMetrics(BaseModel):
    """Volume, engagement and community spread of a corpus."""

    total_posts: int
    total_engagement: int
    average_engagement: int
    sentiment_breakdown: Dict[str, int]
    top_subreddits: List[str]
    weekly_trend: str


@dataclass
class NarrativeReport:
    """Everything one gathering session hands back to its caller."""

    company: str
    corpus: CorpusResult
    bullets: List[NarrativeBullet]
    citations: List[str]
    provenance: str
    summary_tier: str = "local"
    financial: Optional[FinancialReality] = None
    divergence: Optional[DivergenceReport] = None
    retail: Optional[RetailMetrics] = None
    trending_topics: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "company": self.company,
            "bullets": [bullet.model_dump() for bullet in self.bullets],
            "citations": list(self.citations),
            "provenance": self.provenance,
            "summary_tier": self.summary_tier,
            "key_themes": list(self.corpus.key_themes),
            "retail": self.retail.model_dump() if self.retail else None,
            "trending_topics": list(self.trending_topics),
            "financial": self.financial.model_dump() if self.financial else None,
            "divergence": self.divergence.model_dump() if self.divergence else None,
        }
