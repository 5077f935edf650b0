"""Exception types raised by the narrative gathering pipeline."""

from typing import Optional


class NarrativeCheckError(Exception):
    """Base class for all pipeline errors."""


class AuthError(NarrativeCheckError):
    """Credential exchange (or repeated search authorization) failed.

    Fatal for a gathering session; callers should retry after a delay.
    """

    def __init__(self, status_code: Optional[int], message: Optional[str] = None):
        self.status_code = status_code
        super().__init__(message or f"Reddit auth failed: {status_code}")


class UpstreamRequestError(NarrativeCheckError):
    """A single search request failed; recovered by the search executor."""

    def __init__(
        self,
        status_code: Optional[int],
        subreddit: str,
        query: str,
        message: Optional[str] = None,
    ):
        self.status_code = status_code
        self.subreddit = subreddit
        self.query = query
        super().__init__(
            message or f"Search r/{subreddit} for {query!r} failed (status={status_code})"
        )


class EmptyCorpusError(NarrativeCheckError):
    """No documents survived filtering for the requested company."""

    def __init__(self, company: str):
        self.company = company
        super().__init__(f"No relevant Reddit documents found for {company}")


class ExternalSummarizerError(NarrativeCheckError):
    """The external summarizer failed or returned unusable content."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
