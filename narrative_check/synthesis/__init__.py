"""Narrative synthesis, external summarization and financial comparison."""

from narrative_check.synthesis.divergence import compute_divergence
from narrative_check.synthesis.financial import fetch_financial_reality
from narrative_check.synthesis.narrative import NarrativeSynthesizer, degenerate_bullet, document_bullets
from narrative_check.synthesis.summarizer import ExternalSummarizer, SonarClient, SummaryTier

__all__ = [
    "ExternalSummarizer",
    "NarrativeSynthesizer",
    "SonarClient",
    "SummaryTier",
    "compute_divergence",
    "degenerate_bullet",
    "document_bullets",
    "fetch_financial_reality",
]
