"""End-to-end gathering session orchestration."""

import logging
import time
from typing import Callable, List, Optional, Tuple

import aiohttp
import httpx

from narrative_check.analysis.corpus import build_corpus
from narrative_check.analysis.retail import retail_metrics, trending_topics
from narrative_check.collector.dedup import dedupe, rank_by_engagement
from narrative_check.collector.filters import RelevanceFilter
from narrative_check.collector.rate_limiter import RateLimiter
from narrative_check.collector.search import RedditSearchClient, SearchExecutor
from narrative_check.collector.token_manager import TokenManager
from narrative_check.config import Config
from narrative_check.exceptions import EmptyCorpusError, ExternalSummarizerError
from narrative_check.models.report import DivergenceReport, FinancialReality, NarrativeReport
from narrative_check.models.sentiment import CorpusResult, NarrativeBullet
from narrative_check.synthesis.divergence import compute_divergence
from narrative_check.synthesis.financial import fetch_financial_reality
from narrative_check.synthesis.narrative import NarrativeSynthesizer, degenerate_bullet, ensure_non_empty
from narrative_check.synthesis.summarizer import ExternalSummarizer, SonarClient, SummaryTier

logger = logging.getLogger(__name__)


class NarrativeService:
    """
    Runs gathering sessions for companies.

    Owns the aiohttp session used for Reddit and the Sonar client used for
    the external summarizer unless they are supplied by the caller. Use as an
    async context manager. Cancelling ``analyze`` abandons in-flight requests
    and delivers nothing.
    """

    def __init__(
        self,
        config: Config,
        session: Optional[aiohttp.ClientSession] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        search_executor: Optional[SearchExecutor] = None,
        sonar_client: Optional[SonarClient] = None,
        synthesizer: Optional[NarrativeSynthesizer] = None,
        prometheus_exporter=None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self.session = session
        self.http_client = http_client
        self.executor = search_executor
        self.sonar_client = sonar_client
        self.synthesizer = synthesizer or NarrativeSynthesizer(clock=clock)
        self.prometheus_exporter = prometheus_exporter
        self._clock = clock
        self._owns_session = False
        self._owns_sonar_client = False
        self.token_manager: Optional[TokenManager] = None
        self.summarizer: Optional[ExternalSummarizer] = None

    @classmethod
    def from_config(cls, config: Config, prometheus_exporter=None) -> "NarrativeService":
        return cls(config, prometheus_exporter=prometheus_exporter)

    async def __aenter__(self) -> "NarrativeService":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Create the HTTP clients and wire the pipeline components."""
        if self.executor is None:
            if self.session is None:
                self.session = aiohttp.ClientSession()
                self._owns_session = True
            self.executor = self._build_executor(self.session)

        summarizer_config = self.config.summarizer
        if self.sonar_client is None and summarizer_config.api_key:
            self.sonar_client = SonarClient.from_config(summarizer_config, self.http_client)
            self._owns_sonar_client = True

        if self.sonar_client is not None and summarizer_config.enabled:
            self.summarizer = ExternalSummarizer(self.sonar_client, summarizer_config, self.prometheus_exporter)

        logger.info(f"Narrative service ready (external summarizer {'on' if self.summarizer else 'off'})")

    async def close(self) -> None:
        if self._owns_sonar_client and self.sonar_client is not None:
            await self.sonar_client.close()
            self.sonar_client = None
            self.summarizer = None
            self._owns_sonar_client = False
        if self._owns_session and self.session is not None:
            await self.session.close()
            self.session = None
            self._owns_session = False

    def _build_executor(self, session: aiohttp.ClientSession) -> SearchExecutor:
        search = self.config.search
        self.token_manager = TokenManager(
            self.config.client_id,
            self.config.client_secret,
            session,
            user_agent=self.config.user_agent,
            prometheus_exporter=self.prometheus_exporter,
        )
        client = RedditSearchClient(
            session,
            self.token_manager,
            RateLimiter(self.config.rate_limit),
            user_agent=self.config.user_agent,
            page_size=search.page_size,
            sort=search.sort,
            time_filter=search.time_filter,
            max_retries=search.max_retries,
            prometheus_exporter=self.prometheus_exporter,
        )
        return SearchExecutor(
            client,
            RelevanceFilter.from_config(search),
            subreddits=search.subreddits,
            raw_candidate_cap=search.raw_candidate_cap,
            auth_failure_threshold=search.auth_failure_threshold,
            clock=self._clock,
            prometheus_exporter=self.prometheus_exporter,
        )

    async def gather(self, company: str) -> CorpusResult:
        """
        Search, deduplicate, rank and classify.

        Raises:
            AuthError: If Reddit credentials are rejected
        """
        if self.executor is None:
            raise RuntimeError("NarrativeService used before start()")

        search = self.config.search
        candidates = await self.executor.search(company)
        unique = dedupe(candidates)
        ranked = rank_by_engagement(unique)[:search.analysis_cap]
        logger.info(f"Found {len(unique)} unique posts for {company}, analyzing {len(ranked)}")
        return build_corpus(ranked, company, search.citation_limit)

    async def analyze(self, company: str, with_financials: bool = False) -> NarrativeReport:
        """
        Run one gathering session.

        Args:
            company: Company name or ticker
            with_financials: Also fetch the financial reality and divergence score

        Returns:
            NarrativeReport for the company

        Raises:
            AuthError: If Reddit credentials are rejected
        """
        now = self._clock()
        corpus = await self.gather(company)
        bullets, tier = await self._narrate(corpus, company, now)

        financial, divergence = None, None
        if with_financials:
            financial, divergence = await self._financials(company, bullets, now)

        window = self.config.search.window_days
        provenance = (f"Based on {corpus.total} Reddit posts from {len(corpus.subreddits)} communities "
                      f"over the past {window} days")

        return NarrativeReport(
            company=company,
            corpus=corpus,
            bullets=bullets,
            citations=list(corpus.citations),
            provenance=provenance,
            summary_tier=tier,
            financial=financial,
            divergence=divergence,
            retail=retail_metrics(corpus, now),
            trending_topics=trending_topics(corpus.documents, now),
        )

    async def _narrate(self, corpus: CorpusResult, company: str, now: float) -> Tuple[List[NarrativeBullet], str]:
        try:
            ensure_non_empty(corpus)
        except EmptyCorpusError as e:
            logger.warning(f"{e}; reporting limited discussion")
            return [degenerate_bullet(company)], "degenerate"

        if self.summarizer is None:
            return self.synthesizer.synthesize(corpus, company, now), "local"

        bullets, tier = await self.summarizer.summarize(corpus, company)
        if tier is SummaryTier.STATIC:
            logger.warning(f"External summarizer exhausted for {company}; using local synthesis")
            return self.synthesizer.synthesize(corpus, company, now), "local"
        return bullets, tier.value

    async def _financials(
        self, company: str, bullets: List[NarrativeBullet], now: float
    ) -> Tuple[Optional[FinancialReality], Optional[DivergenceReport]]:
        if self.sonar_client is None:
            logger.warning("Financial reality requested but PERPLEXITY_API_KEY is not configured")
            return None, None

        try:
            financial = await fetch_financial_reality(self.sonar_client, company, self.config.summarizer, now)
        except ExternalSummarizerError as e:
            logger.warning(f"Financial reality unavailable for {company}: {e}")
            return None, None

        return financial, compute_divergence([bullet.text for bullet in bullets], financial, company)
