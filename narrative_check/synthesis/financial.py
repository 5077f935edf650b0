"""Financial reality retrieval from official and financial-press sources."""

import json
import logging
import re
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from narrative_check.config import SummarizerConfig
from narrative_check.exceptions import ExternalSummarizerError
from narrative_check.models.report import FinancialReality
from narrative_check.synthesis.summarizer import SonarClient

logger = logging.getLogger(__name__)

LOOKBACK_DAYS = 365

SYSTEM_PROMPT = """Extract key financial information for the given company from its most recent \
SEC filings, annual reports, earnings calls or press releases.

Report:
1. fundamentals: 3-5 key metrics and financial health indicators
2. risks: 3-5 key risks or challenges named in the filings
3. trends: 3-5 important trends or outlook points

Give each item a one-line explanation of its significance. Use only verifiable information from \
official sources and name the filing the data comes from and its date.

Answer with JSON only:
{"fundamentals": [...], "risks": [...], "trends": [...], "source": "e.g. 10-K Q1 2025", "date": "e.g. March 15, 2025"}"""

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```")
_SECTIONS = {
    "fundamentals": re.compile(r"Fundamentals:?([\s\S]*?)(?=Risks:|Trends:|$)", re.IGNORECASE),
    "risks": re.compile(r"Risks:?([\s\S]*?)(?=Fundamentals:|Trends:|$)", re.IGNORECASE),
    "trends": re.compile(r"Trends:?([\s\S]*?)(?=Fundamentals:|Risks:|$)", re.IGNORECASE),
}
_LIST_MARKER = re.compile(r"^[-•*]\s*")


def _today(now: float) -> str:
    return datetime.fromtimestamp(now, tz=timezone.utc).strftime("%Y-%m-%d")


def _section_lines(text: Optional[str]) -> List[str]:
    if not text:
        return ["No data available"]
    lines = [_LIST_MARKER.sub("", line).strip() for line in text.split("\n")]
    lines = [line for line in lines if line]
    return lines or ["No data available"]


def parse_financial_content(content: str, company: str, now: Optional[float] = None) -> FinancialReality:
    """
    Parse a Sonar answer into a FinancialReality.

    JSON (optionally inside a ```json fence) is preferred. Otherwise the
    Fundamentals/Risks/Trends sections are cut out of the plain text.
    """
    if now is None:
        now = time.time()

    fenced = _JSON_FENCE.search(content)
    raw = fenced.group(1) if fenced else content

    try:
        data: Dict[str, Any] = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("financial answer is not a JSON object")
    except ValueError as e:
        logger.warning(f"Failed to parse financial JSON for {company}: {str(e)}")
        sections = {name: pattern.search(content) for name, pattern in _SECTIONS.items()}
        return FinancialReality(
            company=company,
            fundamentals=_section_lines(sections["fundamentals"] and sections["fundamentals"].group(1)),
            risks=_section_lines(sections["risks"] and sections["risks"].group(1)),
            trends=_section_lines(sections["trends"] and sections["trends"].group(1)),
            source="Data extracted from recent financial reports",
            date=_today(now),
        )

    return FinancialReality(
        company=company,
        fundamentals=[str(item) for item in data.get("fundamentals") or []] or ["No fundamental data available"],
        risks=[str(item) for item in data.get("risks") or []] or ["No risk data available"],
        trends=[str(item) for item in data.get("trends") or []] or ["No trend data available"],
        source=str(data.get("source") or "Recent financial data"),
        date=str(data.get("date") or _today(now)),
    )


async def fetch_financial_reality(
    client: SonarClient,
    company: str,
    config: Optional[SummarizerConfig] = None,
    now: Optional[float] = None,
) -> FinancialReality:
    """
    Retrieve fundamentals, risks and trends for a company.

    Args:
        client: Sonar client
        company: Company name or ticker
        config: Summarizer settings (domains, temperature)
        now: Reference time for the one-year lookback

    Returns:
        FinancialReality for the company

    Raises:
        ExternalSummarizerError: If the request fails
    """
    config = config or SummarizerConfig()
    if now is None:
        now = time.time()

    since = datetime.fromtimestamp(now, tz=timezone.utc) - timedelta(days=LOOKBACK_DAYS)
    domains = [*config.financial_domains, f"{company.lower()}.com"]

    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": f"Company: {company}\n\nExtract the financial reality (fundamentals, "
                                    f"risks, trends) from the most recent official filings or earnings reports."},
    ]

    logger.info(f"Fetching financial reality for {company}")
    try:
        content = await client.complete(
            messages,
            temperature=config.temperature,
            search_domain_filter=domains,
            search_after_date_filter=since.strftime("%m/%d/%Y"),
        )
    except ExternalSummarizerError:
        logger.error(f"Financial reality unavailable for {company}")
        raise

    return parse_financial_content(content, company, now)
