"""Small numeric helpers shared by the analysis and synthesis layers."""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from narrative_check.models.document import Document


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return math.floor(value + 0.5)


def format_fixed(value: float, digits: int = 1) -> str:
    """Fixed-point string of the exact binary value, halves rounded away from zero."""
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def total_engagement(documents: Iterable[Document]) -> int:
    return sum(document.engagement for document in documents)
