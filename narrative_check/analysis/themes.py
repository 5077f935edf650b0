"""Theme, driver and reason extraction."""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from narrative_check.analysis.rules import Category, scan
from narrative_check.models.document import Document
from narrative_check.models.sentiment import Bucket, CorpusResult, Excerpt, SourceReference, ThemeTally

DRIVER_POOL_SIZE = 10
REASON_POOL_SIZE = 5

DRIVER_DESCRIPTIONS = {
    "earnings": "recent earnings results",
    "revenue": "revenue growth trends",
    "guidance": "forward guidance changes",
    "valuation": "valuation concerns",
    "competition": "competitive positioning",
    "product": "product announcements",
    "financials": "balance sheet metrics",
}

DEFAULT_REASONS = {
    Bucket.BULLISH: "positive fundamentals",
    Bucket.BEARISH: "risk factors",
}

_FIGURE = re.compile(r"\$?\d+\.?\d*[BMK%]?")


@dataclass(frozen=True)
class PrimaryDriver:
    description: str
    source: Optional[SourceReference] = None


@dataclass(frozen=True)
class SpecificReason:
    reason: str
    detail: Optional[str] = None
    source: Optional[SourceReference] = None


def theme_hits(text: str) -> List[Tuple[str, str]]:
    """
    Coarse themes matched by ``text`` with an illustrative excerpt for each.

    A topic-detail match that maps onto the theme is preferred as the excerpt
    because it usually carries a figure; otherwise the coarse match is used.
    """
    details: Dict[str, str] = {}
    for hit in scan(text, Category.TOPIC_DETAIL):
        details.setdefault(hit.rule.theme, hit.text)
    return [(hit.label, details.get(hit.label, hit.text)) for hit in scan(text, Category.THEME)]


def extract_themes(text: str, tally: ThemeTally, lean: int = 0,
                   source: Optional[SourceReference] = None) -> List[str]:
    """
    Record every coarse theme ``text`` matches into ``tally``.

    Args:
        text: Document text
        tally: Session-scoped tally to update
        lean: +1 for a bullish document, -1 for bearish, 0 otherwise
        source: Where the excerpts came from

    Returns:
        Labels of the themes recorded
    """
    recorded = []
    for theme, excerpt in theme_hits(text):
        tally.record(theme, lean, Excerpt(text=excerpt, source=source))
        recorded.append(theme)
    return recorded


def _top_label(counts: Dict[str, int]) -> Optional[str]:
    if not counts:
        return None
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)[0][0]


def extract_primary_driver(corpus: CorpusResult, company: str) -> PrimaryDriver:
    """
    The single most frequent driver among the most engaged directional documents.

    Only the top bullish and top bearish documents are scanned. The first
    extractable match of a driver is kept as a literal example and preferred
    over the generic description.
    """
    pool = [*corpus.bullish[:DRIVER_POOL_SIZE], *corpus.bearish[:DRIVER_POOL_SIZE]]
    counts: Dict[str, int] = {}
    examples: Dict[str, Tuple[str, Document]] = {}

    for document in pool:
        for hit in scan(document.text, Category.DRIVER):
            counts[hit.label] = counts.get(hit.label, 0) + 1
            if hit.rule.extract and hit.group(1) and hit.label not in examples:
                examples[hit.label] = (hit.text, document)

    top = _top_label(counts)
    if top is None:
        return PrimaryDriver(f"{company} fundamentals")
    if top in examples:
        example, document = examples[top]
        return PrimaryDriver(example, SourceReference.from_document(document))
    return PrimaryDriver(DRIVER_DESCRIPTIONS.get(top, "market dynamics"))


def extract_specific_reason(documents: Sequence[Document], bucket: Bucket) -> SpecificReason:
    """
    The most frequent bull or bear reason across ``documents``.

    A detail is kept only when the matched text contains a figure.
    """
    category = Category.BULL_REASON if bucket == Bucket.BULLISH else Category.BEAR_REASON
    counts: Dict[str, int] = {}
    details: Dict[str, Tuple[str, Document]] = {}

    for document in documents:
        for hit in scan(document.text, category):
            counts[hit.label] = counts.get(hit.label, 0) + 1
            if hit.label not in details and _FIGURE.search(hit.text):
                details[hit.label] = (hit.text, document)

    top = _top_label(counts)
    if top is None:
        return SpecificReason(DEFAULT_REASONS.get(bucket, "mixed signals"))
    if top in details:
        detail, document = details[top]
        return SpecificReason(top, detail, SourceReference.from_document(document))
    return SpecificReason(top)
