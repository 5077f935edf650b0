"""Sentiment, theme and narrative models produced by a gathering session."""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from narrative_check.models.document import Document


class Bucket(str, Enum):
    """Coarse sentiment classification of a document."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"

    @classmethod
    def from_score(cls, score: int) -> "Bucket":
        """Threshold a signed score: strictly above 1 is bullish, strictly below -1 bearish."""
        if score > 1:
            return cls.BULLISH
        if score < -1:
            return cls.BEARISH
        return cls.NEUTRAL


class SentimentVerdict(BaseModel):
    """Outcome of classifying one document."""

    model_config = ConfigDict(frozen=True)

    score: int
    bucket: Bucket
    matched_rules: Tuple[str, ...] = ()


class SourceReference(BaseModel):
    """Title and URL of the document a bullet draws on."""

    model_config = ConfigDict(frozen=True)

    title: str
    url: str

    @classmethod
    def from_document(cls, document: Document) -> "SourceReference":
        return cls(title=document.title, url=document.permalink)


class Excerpt(BaseModel):
    """Literal text captured from a document, with where it came from."""

    model_config = ConfigDict(frozen=True)

    text: str
    source: Optional[SourceReference] = None


class NarrativeBullet(BaseModel):
    """A single synthesized narrative point."""

    model_config = ConfigDict(frozen=True)

    MARKER: ClassVar[str] = "•"

    text: str
    source: Optional[SourceReference] = None

    def render(self) -> str:
        """Text prefixed with the bullet marker."""
        return f"{self.MARKER} {self.text}"


class ThemeTally:
    """
    Running count of theme occurrences across a corpus.

    Each theme also keeps a directional lean (+1 per bullish document, -1 per
    bearish document that matched it) and up to five illustrative excerpts.
    Once frozen the tally rejects further updates.
    """

    MAX_EXCERPTS = 5

    def __init__(self):
        self._counts: Dict[str, int] = {}
        self._lean: Dict[str, int] = {}
        self._excerpts: Dict[str, List[Excerpt]] = {}
        self._frozen = False

    def record(self, theme: str, lean: int = 0, excerpt: Optional[Excerpt] = None) -> None:
        if self._frozen:
            raise RuntimeError("ThemeTally is read-only after classification")

        self._counts[theme] = self._counts.get(theme, 0) + 1
        self._lean[theme] = self._lean.get(theme, 0) + lean
        excerpts = self._excerpts.setdefault(theme, [])
        if excerpt and excerpt.text and len(excerpts) < self.MAX_EXCERPTS:
            excerpts.append(excerpt)

    def freeze(self) -> "ThemeTally":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def count(self, theme: str) -> int:
        return self._counts.get(theme, 0)

    def lean(self, theme: str) -> int:
        return self._lean.get(theme, 0)

    def excerpts(self, theme: str) -> List[Excerpt]:
        return list(self._excerpts.get(theme, []))

    def top(self, limit: int = 5) -> List[str]:
        """Theme labels by descending count; first-seen order breaks ties."""
        ranked = sorted(self._counts.items(), key=lambda item: item[1], reverse=True)
        return [theme for theme, _ in ranked[:limit]]

    def as_dict(self) -> Dict[str, int]:
        return dict(self._counts)

    def __contains__(self, theme: object) -> bool:
        return theme in self._counts

    def __len__(self) -> int:
        return len(self._counts)


@dataclass
class CorpusResult:
    """
    Aggregate output of one gathering session.

    The three bucket sequences are ordered by descending engagement. Citations
    are permalinks ranked by engagement across all buckets.
    """

    company: str
    bullish: List[Document] = field(default_factory=list)
    bearish: List[Document] = field(default_factory=list)
    neutral: List[Document] = field(default_factory=list)
    key_themes: List[str] = field(default_factory=list)
    citations: List[str] = field(default_factory=list)
    verdicts: Dict[str, SentimentVerdict] = field(default_factory=dict)
    theme_tally: ThemeTally = field(default_factory=ThemeTally)

    @property
    def total(self) -> int:
        return len(self.bullish) + len(self.bearish) + len(self.neutral)

    @property
    def documents(self) -> List[Document]:
        """Bullish, then bearish, then neutral documents."""
        return [*self.bullish, *self.bearish, *self.neutral]

    @property
    def subreddits(self) -> List[str]:
        """Distinct collections the corpus was drawn from, in first-seen order."""
        seen: Dict[str, None] = {}
        for document in self.documents:
            seen.setdefault(document.subreddit, None)
        return list(seen)

    def bucket_of(self, document: Document) -> Bucket:
        verdict = self.verdicts.get(document.permalink)
        return verdict.bucket if verdict else Bucket.NEUTRAL
