"""Mapping functions to convert Reddit search listing items to Documents."""

import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from narrative_check.models.document import Document

logger = logging.getLogger(__name__)

REDDIT_BASE_URL = "https://reddit.com"


def listing_item_to_document(item: Dict[str, Any]) -> Document:
    """
    Convert the ``data`` object of a search listing child to a Document.

    Args:
        item: The ``child["data"]`` mapping from a Reddit listing response

    Returns:
        A Document with an absolute permalink
    """
    permalink = item.get("permalink") or ""
    if permalink.startswith("/"):
        permalink = f"{REDDIT_BASE_URL}{permalink}"

    return Document(
        permalink=permalink,
        title=item.get("title") or "",
        body=item.get("selftext") or "",
        subreddit=item.get("subreddit") or "",
        score=int(item.get("score") or 0),
        num_comments=int(item.get("num_comments") or 0),
        created_utc=float(item.get("created_utc") or 0.0),
        url=item.get("url") or "",
    )


def listing_to_documents(items: List[Dict[str, Any]]) -> List[Document]:
    """
    Convert listing items to Documents, skipping malformed entries.

    Args:
        items: Listing ``data`` mappings

    Returns:
        List of Documents in listing order
    """
    documents = []

    for item in items:
        try:
            documents.append(listing_item_to_document(item))
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning(f"Failed to convert listing item {item.get('id')}: {str(e)}")

    return documents
