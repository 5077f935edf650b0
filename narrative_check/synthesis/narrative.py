"""Local narrative synthesis: five evidence-backed bullets from a classified corpus."""

import logging
import re
import time
from typing import Callable, List, Optional, Sequence

from narrative_check.analysis.sentiment import classify
from narrative_check.analysis.stats import format_fixed, percent, total_engagement
from narrative_check.analysis.themes import REASON_POOL_SIZE, extract_primary_driver, extract_specific_reason
from narrative_check.exceptions import EmptyCorpusError
from narrative_check.models.document import Document
from narrative_check.models.sentiment import Bucket, CorpusResult, NarrativeBullet, SourceReference
from narrative_check.synthesis.insights import unique_insight

logger = logging.getLogger(__name__)

BULLET_COUNT = 5

_FIGURE = re.compile(r"\$?\d+\.?\d*[BMK%]?")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_OPINION_FIGURE = re.compile(r"\d+%|\$\d+[BM]?|\d+x")
OPINION_INDICATORS = ("because", "due to", "expect", "believe", "shows", "indicates")


def degenerate_bullet(company: str) -> NarrativeBullet:
    return NarrativeBullet(text=f"Limited Reddit discussion about {company} in the past 90 days")


def ensure_non_empty(corpus: CorpusResult) -> CorpusResult:
    """
    Raises:
        EmptyCorpusError: If no documents survived filtering
    """
    if corpus.total == 0:
        raise EmptyCorpusError(corpus.company)
    return corpus


def _engagement_label(document: Document) -> str:
    return f"{document.score} upvotes, {document.num_comments} comments"


class NarrativeSynthesizer:
    """
    Composes the ordered narrative bullets for a corpus.

    Generators run in a fixed order and each falls back to a generic sentence
    when it finds no signal, so a non-empty corpus always yields exactly five
    bullets. Fallback sentences never carry a source.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    def synthesize(self, corpus: CorpusResult, company: str, now: Optional[float] = None) -> List[NarrativeBullet]:
        try:
            ensure_non_empty(corpus)
        except EmptyCorpusError as e:
            logger.info(f"{e}; returning limited-discussion bullet")
            return [degenerate_bullet(company)]

        if now is None:
            now = self._clock()

        bullets = [
            self.sentiment_bullet(corpus, company),
            self.topic_bullet(corpus, company),
            self.bull_bullet(corpus, company),
            self.bear_bullet(corpus, company),
            unique_insight(corpus, company, now),
        ]
        logger.info(f"Synthesized {len(bullets)} narrative bullets for {company}")
        return bullets

    def sentiment_bullet(self, corpus: CorpusResult, company: str) -> NarrativeBullet:
        total = corpus.total
        bullish = percent(len(corpus.bullish), total)
        bearish = percent(len(corpus.bearish), total)
        driver = extract_primary_driver(corpus, company)

        ratio = total_engagement(corpus.bullish) / max(total_engagement(corpus.bearish), 1)
        ratio_text = format_fixed(ratio, 1)

        if bullish > bearish + 10:
            text = (f"{bullish}% bullish vs {bearish}% bearish across {total} posts, "
                    f"primarily driven by {driver.description}, "
                    f"with bull posts getting {ratio_text}x more engagement")
        elif bearish > bullish + 10:
            text = (f"{bearish}% bearish vs {bullish}% bullish sentiment, mainly due to {driver.description}, "
                    f"though bull/bear engagement ratio is {ratio_text}x")
        else:
            text = (f"Split sentiment ({bullish}% bullish, {bearish}% bearish) as investors debate "
                    f"{driver.description}, with {'bulls' if ratio > 1 else 'bears'} more engaged")
        return NarrativeBullet(text=text, source=driver.source)

    def topic_bullet(self, corpus: CorpusResult, company: str) -> NarrativeBullet:
        top = corpus.theme_tally.top(1)
        if not top:
            return NarrativeBullet(text=f"Primary discussion theme unclear across varied {company} posts")

        theme = top[0]
        lean = corpus.theme_tally.lean(theme)
        sentiment = "bullish" if lean > 0 else "bearish" if lean < 0 else "mixed"

        excerpts = corpus.theme_tally.excerpts(theme)
        detail = excerpts[0].text if excerpts else f"{theme.lower()} metrics"
        source = excerpts[0].source if excerpts else None

        text = f"{theme} discussions center on {detail}, with {sentiment} sentiment"
        metric = _FIGURE.search(detail)
        if metric:
            text += f" ({metric.group(0)})"
        return NarrativeBullet(text=text, source=source)

    def bull_bullet(self, corpus: CorpusResult, company: str) -> NarrativeBullet:
        if not corpus.bullish:
            return NarrativeBullet(text=f"No clear bullish thesis stands out in {company} discussion")

        top = corpus.bullish[0]
        reason = extract_specific_reason(corpus.bullish[:REASON_POOL_SIZE], Bucket.BULLISH)
        if reason.detail:
            text = f"Bulls highlight {reason.reason}: {reason.detail} ({_engagement_label(top)})"
        else:
            text = f"Bulls emphasize {reason.reason} for {company} ({_engagement_label(top)})"
        return NarrativeBullet(text=text, source=SourceReference.from_document(top))

    def bear_bullet(self, corpus: CorpusResult, company: str) -> NarrativeBullet:
        if not corpus.bearish:
            return NarrativeBullet(text=f"No substantive bearish case raised in {company} discussion")

        top = corpus.bearish[0]
        reason = extract_specific_reason(corpus.bearish[:REASON_POOL_SIZE], Bucket.BEARISH)
        if reason.detail:
            text = f"Bears worry about {reason.reason}: {reason.detail} ({_engagement_label(top)})"
        else:
            text = f"Bears concerned about {reason.reason} for {company} ({_engagement_label(top)})"
        return NarrativeBullet(text=text, source=SourceReference.from_document(top))


def extract_key_opinion(document: Document, company: str) -> str:
    """
    The sentence that best states an opinion about the company.

    Prefers a sentence mentioning the company that carries a figure or an
    opinion indicator; falls back to the (truncated) title.
    """
    needle = company.lower()
    for sentence in _SENTENCE_SPLIT.split(document.text):
        if len(sentence.strip()) <= 20:
            continue
        lowered = sentence.lower()
        if needle not in lowered:
            continue
        if _OPINION_FIGURE.search(sentence) or any(word in lowered for word in OPINION_INDICATORS):
            return sentence.strip()[:150] + ("..." if len(sentence) > 150 else "")

    title = document.title
    return title[:100] + "..." if len(title) > 100 else title


def document_bullets(documents: Sequence[Document], company: str, limit: int = BULLET_COUNT) -> List[NarrativeBullet]:
    """One bullet per document: bucket, community, engagement and key opinion."""
    bullets = []
    for document in documents[:limit]:
        bucket = classify(document, company).bucket
        opinion = extract_key_opinion(document, company)
        bullets.append(NarrativeBullet(
            text=f"{bucket.value.capitalize()} on r/{document.subreddit} ({_engagement_label(document)}) - {opinion}",
            source=SourceReference.from_document(document),
        ))
    return bullets
