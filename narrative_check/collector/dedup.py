"""Permalink-based deduplication of gathered documents."""

from typing import Iterable, List

from narrative_check.models.document import Document


def dedupe(documents: Iterable[Document]) -> List[Document]:
    """
    Drop documents whose permalink was already seen.

    Stable: the first occurrence wins and the relative order of kept
    documents is preserved.
    """
    seen = set()
    unique = []
    for document in documents:
        if document.permalink in seen:
            continue
        seen.add(document.permalink)
        unique.append(document)
    return unique


def rank_by_engagement(documents: Iterable[Document]) -> List[Document]:
    """Sort by descending upvotes plus replies; ties keep their input order."""
    return sorted(documents, key=lambda d: d.engagement, reverse=True)
