"""Classification phase of a gathering session."""

import logging
from typing import Dict, List, Sequence

from narrative_check.analysis.sentiment import classify
from narrative_check.analysis.themes import extract_themes
from narrative_check.collector.dedup import rank_by_engagement
from narrative_check.models.document import Document
from narrative_check.models.sentiment import (
    Bucket,
    CorpusResult,
    SentimentVerdict,
    SourceReference,
    ThemeTally,
)

logger = logging.getLogger(__name__)

KEY_THEME_LIMIT = 5

_LEAN = {Bucket.BULLISH: 1, Bucket.BEARISH: -1, Bucket.NEUTRAL: 0}


def build_corpus(documents: Sequence[Document], company: str, citation_limit: int = 10) -> CorpusResult:
    """
    Classify documents, tally their themes and bucket them by sentiment.

    Args:
        documents: Deduplicated, relevance-filtered documents
        company: Company the session is about
        citation_limit: Maximum number of citation permalinks

    Returns:
        CorpusResult with a frozen theme tally
    """
    buckets: Dict[Bucket, List[Document]] = {bucket: [] for bucket in Bucket}
    verdicts: Dict[str, SentimentVerdict] = {}
    tally = ThemeTally()

    for document in documents:
        verdict = classify(document, company)
        verdicts[document.permalink] = verdict
        buckets[verdict.bucket].append(document)
        extract_themes(document.text, tally, _LEAN[verdict.bucket], SourceReference.from_document(document))

    tally.freeze()
    citations = [document.permalink for document in rank_by_engagement(documents)[:citation_limit]]

    corpus = CorpusResult(
        company=company,
        bullish=rank_by_engagement(buckets[Bucket.BULLISH]),
        bearish=rank_by_engagement(buckets[Bucket.BEARISH]),
        neutral=rank_by_engagement(buckets[Bucket.NEUTRAL]),
        key_themes=tally.top(KEY_THEME_LIMIT),
        citations=citations,
        verdicts=verdicts,
        theme_tally=tally,
    )

    logger.info(
        f"Classified {corpus.total} documents for {company}: {len(corpus.bullish)} bullish, "
        f"{len(corpus.bearish)} bearish, {len(corpus.neutral)} neutral"
    )
    return corpus
