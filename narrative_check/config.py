"""Configuration handling for NarrativeCheck."""

import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

DEFAULT_SUBREDDITS = [
    "stocks",
    "wallstreetbets",
    "investing",
    "StockMarket",
    "options",
    "SecurityAnalysis",
    "valueinvesting",
    "pennystocks",
    "smallstreetbets",
    "thetagang",
    "dividends",
    "stockstobuy",
    "daytrading",
    "algotrading",
    "UKInvesting",
    "CanadianInvestor",
    "ASX_Bets",
    "IndiaInvestments",
    "EuropeInvesting",
]

GENERIC_THREAD_PHRASES = [
    "daily discussion",
    "weekend discussion",
    "what are your moves",
    "weekly thread",
    "rate my portfolio",
]

FINANCIAL_DOMAINS = [
    "sec.gov",
    "investor.gov",
    "bloomberg.com",
    "wsj.com",
    "reuters.com",
    "ft.com",
    "cnbc.com",
    "fool.com",
    "investopedia.com",
]


@dataclass
class RateLimitConfig:
    """Rate limiting configuration."""

    max_requests_per_minute: int = 60
    min_remaining_calls: int = 5
    sleep_buffer_sec: int = 2


@dataclass
class SearchConfig:
    """Search, filtering and ranking parameters for a gathering session."""

    subreddits: List[str] = field(default_factory=lambda: list(DEFAULT_SUBREDDITS))
    page_size: int = 100
    sort: str = "relevance"
    time_filter: str = "year"
    raw_candidate_cap: int = 200
    window_days: int = 90
    min_score: int = 5
    min_comments: int = 3
    analysis_cap: int = 150
    citation_limit: int = 10
    generic_phrases: List[str] = field(default_factory=lambda: list(GENERIC_THREAD_PHRASES))
    max_retries: int = 2
    auth_failure_threshold: int = 3


@dataclass
class SummarizerConfig:
    """External summarizer (Perplexity Sonar) settings."""

    enabled: bool = False
    api_key: str = ""
    base_url: str = "https://api.perplexity.ai/chat/completions"
    model: str = "sonar-pro"
    temperature: float = 0.2
    timeout_sec: float = 60.0
    body_char_limit: int = 1000
    narrow_domain: str = "reddit.com"
    financial_domains: List[str] = field(default_factory=lambda: list(FINANCIAL_DOMAINS))

    @property
    def is_active(self) -> bool:
        """True when the summarizer is both enabled and has credentials."""
        return self.enabled and bool(self.api_key)


@dataclass
class MonitoringConfig:
    """Monitoring configuration."""

    enable_prometheus: bool = False
    prometheus_port: int = 8000


@dataclass
class Config:
    """Application configuration combining environment variables and YAML config."""

    # Reddit API credentials from environment
    client_id: str = ""
    client_secret: str = ""
    user_agent: str = "NarrativeCheck/1.0"

    log_file: Optional[str] = None
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    summarizer: SummarizerConfig = field(default_factory=SummarizerConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    @classmethod
    def from_files(cls, config_path: Optional[str] = None, env_path: Optional[str] = None) -> "Config":
        """
        Load configuration from a YAML file and environment variables.

        Args:
            config_path: Optional path to a YAML configuration file
            env_path: Optional path to .env file (defaults to .env in current directory)

        Returns:
            Config instance with merged configuration
        """
        if env_path:
            load_dotenv(env_path)
        else:
            load_dotenv()

        config = cls()
        config.client_id = os.getenv("REDDIT_CLIENT_ID", "")
        config.client_secret = os.getenv("REDDIT_CLIENT_SECRET", "")
        config.user_agent = os.getenv("REDDIT_USER_AGENT", "NarrativeCheck/1.0")
        config.summarizer.api_key = os.getenv("PERPLEXITY_API_KEY", "")
        config.summarizer.enabled = bool(config.summarizer.api_key)
        config.summarizer.base_url = os.getenv("PERPLEXITY_BASE_URL", config.summarizer.base_url)

        if config_path and os.path.exists(config_path):
            with open(config_path, "r", encoding="utf-8") as file:
                yaml_config = yaml.safe_load(file)

            if yaml_config:
                config._merge(yaml_config)

        return config

    def _merge(self, yaml_config: Dict[str, Any]) -> None:
        """Overlay YAML values onto this config; secrets stay env-only."""
        nested = {
            "rate_limit": self.rate_limit,
            "search": self.search,
            "summarizer": self.summarizer,
            "monitoring": self.monitoring,
        }
        for key, value in yaml_config.items():
            if key in nested:
                if isinstance(value, dict):
                    _apply(nested[key], value, skip={"api_key"})
            elif key in {"client_id", "client_secret"}:
                continue
            elif hasattr(self, key):
                setattr(self, key, value)

    def validate(self) -> List[str]:
        """
        Validate configuration and return a list of validation errors.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not self.client_id:
            errors.append("Missing REDDIT_CLIENT_ID in environment")
        if not self.client_secret:
            errors.append("Missing REDDIT_CLIENT_SECRET in environment")

        if not self.search.subreddits:
            errors.append("No subreddits specified in configuration")
        if self.search.window_days <= 0:
            errors.append("search.window_days must be greater than 0")
        if self.search.raw_candidate_cap <= 0:
            errors.append("search.raw_candidate_cap must be greater than 0")
        if not 0 < self.search.page_size <= 100:
            errors.append("search.page_size must be between 1 and 100")
        if self.search.auth_failure_threshold <= 0:
            errors.append("search.auth_failure_threshold must be greater than 0")

        if self.rate_limit.max_requests_per_minute <= 0:
            errors.append("rate_limit.max_requests_per_minute must be greater than 0")

        if self.summarizer.enabled and not self.summarizer.api_key:
            errors.append("Summarizer enabled but PERPLEXITY_API_KEY is not set")

        return errors


def _apply(target: Any, values: Dict[str, Any], skip: set) -> None:
    known = {f.name for f in fields(target)}
    for key, value in values.items():
        if key in known and key not in skip:
            setattr(target, key, value)
