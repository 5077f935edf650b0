"""
External summarizer adapter backed by the Perplexity Sonar chat API.

The adapter walks a forward-only chain of tiers: a rich request carrying the
whole corpus, a narrow request scoped to reddit.com, and finally a static set
of placeholder bullets. Each tier is tried only after the previous one errored
or produced no bullets.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import httpx

from narrative_check.config import SummarizerConfig
from narrative_check.exceptions import ExternalSummarizerError
from narrative_check.models.sentiment import CorpusResult, NarrativeBullet

logger = logging.getLogger(__name__)

BULLET_COUNT = 5

STATIC_FALLBACK_BULLETS = (
    "Insufficient Reddit data to characterize overall sentiment for {company}",
    "Insufficient data to identify a dominant discussion topic for {company}",
    "Insufficient data to summarize the bullish case for {company}",
    "Insufficient data to summarize the bearish case for {company}",
    "Insufficient data to surface a distinctive retail insight for {company}",
)

PADDING_BULLET = "No further distinct Reddit narrative identified for {company}"


class SummaryTier(str, Enum):
    RICH = "rich"
    NARROW = "narrow"
    STATIC = "static"

    def next(self) -> "SummaryTier":
        order = list(SummaryTier)
        return order[min(order.index(self) + 1, len(order) - 1)]


class SonarClient:
    """
    Async client for the Perplexity chat completions endpoint.

    Returns the raw message content of the first choice; all transport and
    payload failures surface as ExternalSummarizerError.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.perplexity.ai/chat/completions",
        model: str = "sonar-pro",
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the Sonar client.

        Args:
            api_key: Perplexity API key
            base_url: Chat completions endpoint
            model: Model name sent with every request
            timeout: Request timeout in seconds
            client: Optional preconfigured HTTP client (owned by the caller)
        """
        self.base_url = base_url
        self.model = model
        self.headers = {"Content-Type": "application/json", "Authorization": f"Bearer {api_key}"}
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @classmethod
    def from_config(cls, config: SummarizerConfig, client: Optional[httpx.AsyncClient] = None) -> "SonarClient":
        return cls(config.api_key, config.base_url, config.model, config.timeout_sec, client)

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def complete(self, messages: List[Dict[str, str]], **options: Any) -> str:
        """
        Send one chat completion request.

        Args:
            messages: Chat messages
            **options: Extra request body fields (temperature, search filters)

        Returns:
            Message content of the first choice

        Raises:
            ExternalSummarizerError: On transport failure, non-200 status or an unusable body
        """
        payload = {"model": self.model, "messages": messages, **options}

        try:
            response = await self.client.post(self.base_url, json=payload, headers=self.headers)
        except httpx.TimeoutException as e:
            raise ExternalSummarizerError("Sonar request timed out") from e
        except httpx.HTTPError as e:
            raise ExternalSummarizerError(f"Sonar request failed: {str(e)}") from e

        if response.status_code != 200:
            logger.error(f"Sonar API error: {response.status_code} - {response.text[:200]}")
            raise ExternalSummarizerError(
                f"Sonar request failed ({response.status_code})", status_code=response.status_code
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ExternalSummarizerError("Invalid or empty response from Sonar") from e

        if not content:
            raise ExternalSummarizerError("Invalid or empty response from Sonar")
        return content


def _date(created_utc: float) -> str:
    return datetime.fromtimestamp(created_utc, tz=timezone.utc).strftime("%Y-%m-%d")


def build_rich_prompt(corpus: CorpusResult, company: str, body_char_limit: int = 1000) -> List[Dict[str, str]]:
    """Serialize every corpus document into one structured prompt."""
    entries = []
    for index, document in enumerate(corpus.documents, start=1):
        entries.append(
            f"[{index}] Title: {document.title}\n"
            f"Subreddit: r/{document.subreddit}\n"
            f"Engagement: {document.score} upvotes, {document.num_comments} comments\n"
            f"Date: {_date(document.created_utc)}\n"
            f"Text: {document.body[:body_char_limit]}\n"
            f"URL: {document.permalink}"
        )

    system = (
        "You analyze retail investor discussion from Reddit. For the posts provided:\n"
        "1. Classify each post as bullish, bearish or neutral.\n"
        "2. Compute the percentage of posts in each class.\n"
        "3. Extract explicit metrics mentioned (percentages, dollar figures, multiples).\n"
        f"4. Write exactly {BULLET_COUNT} bullets, each on its own line starting with \"• \", "
        "covering overall sentiment, the dominant topic, the bull case, the bear case and one unique insight. "
        "Cite concrete figures from the posts. Output only the bullets."
    )
    user = f"Company: {company}\nPosts ({corpus.total}):\n\n" + "\n\n".join(entries)
    return [{"role": "system", "content": system}, {"role": "user", "content": user}]


def build_narrow_prompt(company: str) -> List[Dict[str, str]]:
    system = (
        "Summarize how Reddit investors currently discuss the company. "
        f"Write {BULLET_COUNT} short bullets, each on its own line starting with \"• \". "
        "Output only the bullets."
    )
    return [{"role": "system", "content": system}, {"role": "user", "content": f"Company: {company}"}]


def parse_bullets(content: str, company: str) -> List[NarrativeBullet]:
    """
    Select lines that start with the bullet marker.

    More than five are truncated; fewer are padded with unsourced placeholder
    bullets. No marker lines at all yields an empty list.
    """
    marker = NarrativeBullet.MARKER
    texts = []
    for line in content.splitlines():
        stripped = line.strip()
        if stripped.startswith(marker):
            text = stripped[len(marker):].strip()
            if text:
                texts.append(text)

    if not texts:
        return []

    bullets = [NarrativeBullet(text=text) for text in texts[:BULLET_COUNT]]
    while len(bullets) < BULLET_COUNT:
        bullets.append(NarrativeBullet(text=PADDING_BULLET.format(company=company)))
    return bullets


def static_bullets(company: str) -> List[NarrativeBullet]:
    return [NarrativeBullet(text=text.format(company=company)) for text in STATIC_FALLBACK_BULLETS]


class ExternalSummarizer:
    """Runs the rich, narrow and static tiers in order."""

    def __init__(self, client: SonarClient, config: Optional[SummarizerConfig] = None, prometheus_exporter=None):
        self.client = client
        self.config = config or SummarizerConfig()
        self.prometheus_exporter = prometheus_exporter

    async def summarize(self, corpus: CorpusResult, company: str) -> Tuple[List[NarrativeBullet], SummaryTier]:
        """
        Produce exactly five bullets and the tier that produced them.

        Never raises for summarizer failures; the static tier always succeeds.
        """
        tier = SummaryTier.RICH
        while tier is not SummaryTier.STATIC:
            try:
                bullets = await self._attempt(tier, corpus, company)
            except ExternalSummarizerError as e:
                logger.warning(f"Summarizer {tier.value} tier failed for {company}: {e}")
                self._record(tier, "error")
            else:
                if bullets:
                    logger.info(f"Summarizer {tier.value} tier produced {len(bullets)} bullets for {company}")
                    self._record(tier, "success")
                    return bullets, tier
                logger.warning(f"Summarizer {tier.value} tier returned no bullets for {company}")
                self._record(tier, "empty")
            tier = tier.next()

        self._record(tier, "success")
        return static_bullets(company), tier

    async def _attempt(self, tier: SummaryTier, corpus: CorpusResult, company: str) -> List[NarrativeBullet]:
        if tier is SummaryTier.RICH:
            content = await self.client.complete(
                build_rich_prompt(corpus, company, self.config.body_char_limit),
                temperature=self.config.temperature,
            )
        else:
            content = await self.client.complete(
                build_narrow_prompt(company),
                temperature=self.config.temperature,
                search_domain_filter=[self.config.narrow_domain],
            )
        return parse_bullets(content, company)

    def _record(self, tier: SummaryTier, outcome: str) -> None:
        if self.prometheus_exporter:
            self.prometheus_exporter.record_summarizer_outcome(tier.value, outcome)
