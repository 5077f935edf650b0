"""Divergence between the Reddit narrative and the financial reality."""

from typing import Sequence, Tuple

from narrative_check.analysis.stats import round_half_up
from narrative_check.models.report import DivergenceReport, FinancialReality

POSITIVE_TERMS = (
    "growth", "profit", "increase", "success", "positive", "strong", "innovation",
    "beat", "exceed", "outperform", "surge", "rising", "momentum", "bullish",
)

NEGATIVE_TERMS = (
    "decline", "loss", "decrease", "failure", "negative", "weak", "problem",
    "miss", "below", "underperform", "drop", "falling", "slowdown", "bearish",
)


def term_counts(text: str) -> Tuple[int, int]:
    """Number of distinct positive and negative terms present in ``text``."""
    lowered = text.lower()
    positive = sum(1 for term in POSITIVE_TERMS if term in lowered)
    negative = sum(1 for term in NEGATIVE_TERMS if term in lowered)
    return positive, negative


def lexical_sentiment(text: str) -> float:
    """(positive - negative) / (positive + negative), or 0 with no terms."""
    positive, negative = term_counts(text)
    if positive + negative == 0:
        return 0.0
    return (positive - negative) / (positive + negative)


def divergence_level(score: int) -> str:
    if score < 30:
        return "low"
    if score < 60:
        return "medium"
    return "high"


def compute_divergence(narratives: Sequence[str], financial: FinancialReality, company: str) -> DivergenceReport:
    """
    Score how far the narrative tone sits from the tone of the financial data.

    Args:
        narratives: Narrative bullet texts
        financial: Financial reality for the same company
        company: Company name used in the summary

    Returns:
        DivergenceReport with a 0-100 score and at least two key points
    """
    narrative_text = " ".join(narratives).lower()
    financial_text = " ".join([*financial.fundamentals, *financial.risks, *financial.trends]).lower()

    narrative_sentiment = lexical_sentiment(narrative_text)
    financial_sentiment = lexical_sentiment(financial_text)
    gap = abs(narrative_sentiment - financial_sentiment)

    key_points = []
    if narrative_sentiment > 0 and financial_sentiment < 0:
        key_points.append("Reddit portrays the company positively while financials show concerning indicators.")
    elif narrative_sentiment < 0 and financial_sentiment > 0:
        key_points.append("Reddit portrays the company negatively despite positive financial indicators.")

    if "growth" in narrative_text and "decline" in financial_text:
        key_points.append("Reddit mentions growth while financial data indicates decline in key areas.")
    if "profit" in narrative_text and "loss" in financial_text:
        key_points.append("Reddit highlights profitability while financial statements show losses.")

    if not key_points:
        if gap > 0.5:
            key_points.append("Reddit narrative and financial reality show significant differences in overall tone.")
        elif gap > 0.2:
            key_points.append("Some discrepancies exist between Reddit discussion and financial data.")
        else:
            key_points.append("Reddit narrative aligns reasonably well with financial reality.")

    if len(key_points) == 1:
        key_points.append("Consider both retail narratives and official financial data when evaluating this company.")

    score = min(100, round_half_up(gap * 100))
    level = divergence_level(score)

    if level == "low":
        summary = f"Reddit narratives generally align with financial realities for {company}."
    elif level == "medium":
        summary = f"Some notable differences exist between how {company} is portrayed on Reddit vs. financial data."
    else:
        summary = f"Significant divergence between Reddit portrayal and financial reality for {company}."

    return DivergenceReport(score=score, level=level, summary=summary, key_points=key_points)
