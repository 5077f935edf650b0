"""Document builders and HTTP fakes shared by the tests."""

from typing import Any, Dict, List, Optional

from aiohttp.client_exceptions import ClientResponseError

from narrative_check.models.document import Document

NOW = 1_750_000_000.0
DAY = 24 * 60 * 60


def make_document(
    permalink: str = "https://reddit.com/r/stocks/comments/abc/post/",
    title: str = "TSLA discussion",
    body: str = "",
    subreddit: str = "stocks",
    score: int = 10,
    num_comments: int = 5,
    created_utc: float = NOW - DAY,
) -> Document:
    return Document(
        permalink=permalink,
        title=title,
        body=body,
        subreddit=subreddit,
        score=score,
        num_comments=num_comments,
        created_utc=created_utc,
        url=permalink,
    )


def listing_item(index: int, title: str = "TSLA update", **overrides: Any) -> Dict[str, Any]:
    item = {
        "id": f"id{index}",
        "permalink": f"/r/stocks/comments/id{index}/post/",
        "title": title,
        "selftext": "",
        "subreddit": "stocks",
        "score": 50,
        "num_comments": 10,
        "created_utc": NOW - DAY,
        "url": f"https://example.com/{index}",
    }
    item.update(overrides)
    return item


class FakeRequestInfo:
    def __init__(self, url: str = "https://oauth.reddit.com/r/stocks/search.json"):
        self.real_url = url


def response_error(status: int, headers: Optional[Dict[str, str]] = None) -> ClientResponseError:
    return ClientResponseError(
        request_info=FakeRequestInfo(),
        history=(),
        status=status,
        message=f"HTTP {status}",
        headers=headers or {},
    )


class FakeResponse:
    """Minimal stand-in for an aiohttp response used as an async context manager."""

    def __init__(self, status: int = 200, payload: Any = None, headers: Optional[Dict[str, str]] = None):
        self.status = status
        self._payload = payload if payload is not None else {}
        self.headers = headers or {}

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    async def json(self) -> Any:
        return self._payload

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise response_error(self.status, self.headers)


class FakeSession:
    """Returns queued FakeResponses for get/post and records the calls."""

    def __init__(self, get_responses: Optional[List[FakeResponse]] = None,
                 post_responses: Optional[List[FakeResponse]] = None):
        self.get_responses = list(get_responses or [])
        self.post_responses = list(post_responses or [])
        self.get_calls: List[Dict[str, Any]] = []
        self.post_calls: List[Dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.get_calls.append({"url": url, **kwargs})
        return self.get_responses.pop(0)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.post_calls.append({"url": url, **kwargs})
        return self.post_responses.pop(0)


def listing(items: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"kind": "Listing", "data": {"children": [{"kind": "t3", "data": item} for item in items]}}
