"""Deterministic lexical sentiment classifier."""

import logging

from narrative_check.analysis.rules import Category, scan
from narrative_check.models.document import Document
from narrative_check.models.sentiment import Bucket, SentimentVerdict

logger = logging.getLogger(__name__)


def score_text(text: str) -> SentimentVerdict:
    """
    Score lower-cased text against the sentiment and metric rules.

    Both rule groups are summed independently, so a figure such as
    "12% growth" counts once as a qualitative "growth" match and again as a
    numeric growth metric.
    """
    lowered = text.lower()
    score = 0
    matched = []

    for category in (Category.SENTIMENT, Category.METRIC):
        for hit in scan(lowered, category):
            score += hit.rule.weight
            matched.append(hit.label)

    return SentimentVerdict(score=score, bucket=Bucket.from_score(score), matched_rules=tuple(matched))


def classify(document: Document, company: str) -> SentimentVerdict:
    """
    Classify one document.

    Args:
        document: Document to classify
        company: Company the gathering session is about

    Returns:
        Verdict with the summed score, its bucket and the matched rule labels
    """
    verdict = score_text(document.text)
    logger.debug(f"{document.permalink} scored {verdict.score} ({verdict.bucket.value}) for {company}")
    return verdict
