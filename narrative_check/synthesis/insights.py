"""Generators for the unique-insight bullet, tried in a fixed fallback order."""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from narrative_check.analysis.rules import Category, first_hit, scan
from narrative_check.analysis.stats import format_fixed, round_half_up, total_engagement
from narrative_check.collector.filters import SECONDS_PER_DAY
from narrative_check.models.document import Document
from narrative_check.models.sentiment import Bucket, CorpusResult, NarrativeBullet, SourceReference

logger = logging.getLogger(__name__)

MIN_OPTION_MENTIONS = 5
MIN_RECENT_POSTS = 5


def _ranked(counts: Dict[str, int]) -> List[Tuple[str, int]]:
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


def _source(document: Optional[Document]) -> Optional[SourceReference]:
    return SourceReference.from_document(document) if document else None


def option_insight(documents: Sequence[Document]) -> Optional[NarrativeBullet]:
    """Call/put positioning; needs at least five strike mentions across the corpus."""
    calls = puts = 0
    details: List[Tuple[str, Document]] = []

    for document in documents:
        call_hit = first_hit(document.text, Category.OPTION, "calls")
        put_hit = first_hit(document.text, Category.OPTION, "puts")
        flow_hit = first_hit(document.text, Category.OPTION, "flow")
        if call_hit:
            calls += 1
            details.append((f"{call_hit.group(1)} calls", document))
        if put_hit:
            puts += 1
            details.append((f"{put_hit.group(1)} puts", document))
        if flow_hit:
            details.append((f"{flow_hit.group(1)} in option flow", document))

    if calls + puts < MIN_OPTION_MENTIONS:
        return None

    ratio = calls / (puts or 1)
    detail, document = details[0] if details else ("various strikes", None)

    if ratio > 2:
        text = (f"Heavy call activity ({calls}:{puts} ratio) with focus on {detail} "
                f"suggesting bullish positioning")
    elif ratio < 0.5:
        text = f"Put buying dominating ({puts}:{calls} ratio) particularly {detail} indicating hedging"
    else:
        text = f"Mixed option activity ({calls} calls, {puts} puts) with {detail} showing uncertainty"
    return NarrativeBullet(text=text, source=_source(document))


def comparison_insight(documents: Sequence[Document]) -> Optional[NarrativeBullet]:
    """Most frequent "vs."/"compared to"/"versus" counterpart."""
    counts: Dict[str, int] = {}
    first_seen: Dict[str, Document] = {}

    for document in documents:
        for hit in scan(document.text, Category.COMPARISON):
            competitor = hit.group(1)
            if competitor and len(competitor) > 2:
                counts[competitor] = counts.get(competitor, 0) + 1
                first_seen.setdefault(competitor, document)

    if not counts:
        return None

    competitor, count = _ranked(counts)[0]
    return NarrativeBullet(
        text=f"Frequent comparisons to {competitor} ({count} mentions) with investors debating relative positioning",
        source=_source(first_seen[competitor]),
    )


def technical_insight(documents: Sequence[Document]) -> Optional[NarrativeBullet]:
    """Support, resistance, moving-average and price-target levels."""
    counts: Dict[str, int] = {}
    levels: Dict[str, Tuple[str, Document]] = {}

    for document in documents:
        for hit in scan(document.text, Category.TECHNICAL):
            counts[hit.label] = counts.get(hit.label, 0) + 1
            levels.setdefault(hit.label, (hit.group(1), document))

    if not counts:
        return None

    kind, count = _ranked(counts)[0]
    level, document = levels[kind]
    if kind == "support":
        text = f"Technical traders watching {level} support level ({count} mentions)"
    elif kind == "resistance":
        text = f"Key resistance at {level} being discussed by {count} traders"
    elif kind == "target":
        text = f"Price targets clustering around {level} ({count} mentions)"
    else:
        text = f"Technical analysis focusing on {level}-day moving average"
    return NarrativeBullet(text=text, source=_source(document))


def institutional_insight(documents: Sequence[Document]) -> Optional[NarrativeBullet]:
    """Named buyers or sellers of shares, or generic insider/institutional flow."""
    counts: Dict[str, int] = {}
    actions: Dict[str, Tuple[str, Document]] = {}

    for document in documents:
        for hit in scan(document.text, Category.INSTITUTIONAL):
            entity = (hit.group(1) or hit.label).strip()
            counts[entity] = counts.get(entity, 0) + 1
            actions.setdefault(entity, (hit.label, document))

    if not counts:
        return None

    entity, count = _ranked(counts)[0]
    action, document = actions[entity]
    if entity == action:
        text = f"{action.capitalize()} generating {count} discussions"
    else:
        text = f"{entity} activity ({action}) generating {count} discussions"
    return NarrativeBullet(text=text, source=_source(document))


def momentum_insight(corpus: CorpusResult, company: str, now: float) -> NarrativeBullet:
    """
    Posting momentum among directional documents. Never fails.

    With five or more directional posts in the last 24 hours a strongly
    one-sided day is reported; otherwise the weekly posting rate is rated.
    """
    directional = [*corpus.bullish, *corpus.bearish]
    day_ago = now - SECONDS_PER_DAY
    week_ago = now - 7 * SECONDS_PER_DAY

    recent = [d for d in directional if d.created_utc > day_ago]
    week = [d for d in directional if d.created_utc > week_ago]

    if len(recent) >= MIN_RECENT_POSTS:
        average = round_half_up(total_engagement(recent) / len(recent))
        bullish_share = sum(1 for d in recent if corpus.bucket_of(d) == Bucket.BULLISH) / len(recent)

        if bullish_share > 0.7:
            return NarrativeBullet(
                text=(f"Momentum building with {len(recent)} posts in 24hrs (avg {average} engagement), "
                      f"{round_half_up(bullish_share * 100)}% bullish")
            )
        if bullish_share < 0.3:
            return NarrativeBullet(
                text=(f"Negative momentum with {len(recent)} posts today, "
                      f"{round_half_up((1 - bullish_share) * 100)}% bearish")
            )

    per_day = len(week) / 7
    interest = "high" if per_day > 5 else "moderate" if per_day > 2 else "low"
    return NarrativeBullet(
        text=f"{company} averaging {format_fixed(per_day, 1)} posts/day this week, {interest} retail interest"
    )


INSIGHT_TIERS: Tuple[Callable[[Sequence[Document]], Optional[NarrativeBullet]], ...] = (
    option_insight,
    comparison_insight,
    technical_insight,
    institutional_insight,
)


def unique_insight(corpus: CorpusResult, company: str, now: float) -> NarrativeBullet:
    """First insight tier that finds signal, else the momentum fallback."""
    documents = corpus.documents
    for tier in INSIGHT_TIERS:
        bullet = tier(documents)
        if bullet is not None:
            logger.debug(f"Unique insight for {company} from {tier.__name__}")
            return bullet
    return momentum_insight(corpus, company, now)
