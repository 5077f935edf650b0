"""Document model for a single fetched Reddit submission."""

from pydantic import BaseModel, ConfigDict, Field


class Document(BaseModel):
    """
    A social post as returned by the upstream search API.

    The permalink is the identity of a document within a gathering session.
    Instances are immutable once fetched.
    """

    model_config = ConfigDict(frozen=True)

    permalink: str
    title: str
    body: str = ""
    subreddit: str
    score: int  # upvotes minus downvotes, may be negative
    num_comments: int = Field(default=0, ge=0)
    created_utc: float
    url: str = ""

    @property
    def engagement(self) -> int:
        """Upvotes plus replies; the ranking key used throughout the pipeline."""
        return self.score + self.num_comments

    @property
    def text(self) -> str:
        """Title and body joined the way every pattern catalog reads them."""
        return f"{self.title} {self.body}"
