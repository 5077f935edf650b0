"""Prometheus metrics for monitoring NarrativeCheck gathering sessions."""

import logging
import time
from typing import Optional

from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)

SEARCH_REQUESTS = Counter(
    "narrative_check_search_requests_total",
    "Number of upstream search requests issued",
    ["subreddit"],
)

API_ERRORS = Counter(
    "narrative_check_api_errors_total",
    "Number of upstream API errors encountered",
    ["error_type"],
)

CANDIDATES_COLLECTED = Counter(
    "narrative_check_candidates_collected_total",
    "Number of candidate documents that passed relevance filtering",
    ["subreddit"],
)

TOKEN_REFRESHES = Counter(
    "narrative_check_token_refreshes_total",
    "Number of bearer token exchanges performed",
)

SUMMARIZER_OUTCOMES = Counter(
    "narrative_check_summarizer_outcomes_total",
    "External summarizer tier outcomes",
    ["tier", "outcome"],
)

REQUEST_DURATION = Histogram(
    "narrative_check_request_duration_seconds",
    "Duration of upstream search requests in seconds",
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)


class PrometheusExporter:
    """Prometheus metrics exporter for NarrativeCheck."""

    def __init__(self, port: int = 8000):
        """
        Initialize the Prometheus exporter.

        Args:
            port: Port to expose metrics on
        """
        self.port = port
        self.server_started = False

    def start_server(self) -> None:
        """Start the Prometheus metrics server."""
        if not self.server_started:
            try:
                start_http_server(self.port)
                self.server_started = True
                logger.info(f"Started Prometheus metrics server on port {self.port}")
            except OSError as e:
                logger.error(f"Failed to start Prometheus metrics server: {str(e)}")

    def record_search_request(self, subreddit: str) -> None:
        SEARCH_REQUESTS.labels(subreddit=subreddit).inc()

    def record_api_error(self, error_type: str) -> None:
        """
        Record an API error.

        Args:
            error_type: Type of API error (e.g., '5xx', '401', '429', 'connection')
        """
        API_ERRORS.labels(error_type=error_type).inc()

    def record_candidates(self, subreddit: str, count: int) -> None:
        if count > 0:
            CANDIDATES_COLLECTED.labels(subreddit=subreddit).inc(count)

    def record_token_refresh(self) -> None:
        TOKEN_REFRESHES.inc()

    def record_summarizer_outcome(self, tier: str, outcome: str) -> None:
        SUMMARIZER_OUTCOMES.labels(tier=tier, outcome=outcome).inc()

    def time_request(self) -> "RequestTimer":
        """
        Create a context manager for timing API requests.

        Returns:
            RequestTimer context manager
        """
        return RequestTimer()


class RequestTimer:
    """Context manager for timing API requests."""

    def __init__(self):
        self.start_time: Optional[float] = None

    def __enter__(self) -> "RequestTimer":
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is not None:
            REQUEST_DURATION.observe(time.time() - self.start_time)
