"""Rule-based classification and extraction over gathered documents."""

from narrative_check.analysis.corpus import build_corpus
from narrative_check.analysis.sentiment import classify
from narrative_check.analysis.themes import extract_primary_driver, extract_specific_reason, extract_themes

__all__ = [
    "build_corpus",
    "classify",
    "extract_primary_driver",
    "extract_specific_reason",
    "extract_themes",
]
