"""
Declarative lexical rule table.

Every pattern the classifier, theme extractor and insight generators use lives
in ``RULES``. Each rule belongs to one category; consumers ask for the hits of
a category with :func:`scan` rather than keeping their own pattern lists.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Optional, Pattern, Tuple


class Category(str, Enum):
    """What a rule is used for."""

    SENTIMENT = "sentiment"          # qualitative signed weight
    METRIC = "metric"                # numeric signed weight, scored independently of SENTIMENT
    THEME = "theme"                  # coarse corpus-wide theme
    TOPIC_DETAIL = "topic_detail"    # excerpt-bearing detail mapped onto a coarse theme
    DRIVER = "driver"                # primary sentiment driver
    BULL_REASON = "bull_reason"
    BEAR_REASON = "bear_reason"
    OPTION = "option"
    COMPARISON = "comparison"
    TECHNICAL = "technical"
    INSTITUTIONAL = "institutional"
    TRENDING = "trending"


@dataclass(frozen=True)
class Rule:
    category: Category
    label: str
    pattern: Pattern[str]
    weight: int = 0
    extract: bool = False
    theme: Optional[str] = None


@dataclass(frozen=True)
class Hit:
    """First match of a rule against a piece of text."""

    rule: Rule
    match: "re.Match[str]"

    @property
    def label(self) -> str:
        return self.rule.label

    @property
    def text(self) -> str:
        return self.match.group(0).strip()

    def group(self, index: int = 1) -> Optional[str]:
        """First non-empty capture group at or after ``index``."""
        for value in self.match.groups()[index - 1:]:
            if value:
                return value
        return None


def _rule(category: Category, label: str, regex: str, weight: int = 0,
          extract: bool = False, theme: Optional[str] = None, flags: int = re.IGNORECASE) -> Rule:
    return Rule(category, label, re.compile(regex, flags), weight, extract, theme)


S, M, T, D = Category.SENTIMENT, Category.METRIC, Category.THEME, Category.TOPIC_DETAIL

RULES: Tuple[Rule, ...] = (
    # Strong bullish
    _rule(S, "strong buy signal", r"strong\s*buy", 3),
    _rule(S, "call options", r"calls?\s*on\s*\$?\w+", 2),
    _rule(S, "accumulation", r"loading\s*up", 2),
    _rule(S, "undervaluation", r"undervalued", 2),
    _rule(S, "dip buying", r"buy\s*the\s*dip", 2),
    _rule(S, "extreme bullishness", r"to\s*the\s*moon", 2),
    _rule(S, "earnings beat", r"earnings\s*beat", 2),
    _rule(S, "raised guidance", r"raised\s*guidance", 2),
    # Moderate bullish
    _rule(S, "buy recommendation", r"\bbuy\b", 1),
    _rule(S, "long position", r"\blong\b", 1),
    _rule(S, "bullish sentiment", r"bullish", 1),
    _rule(S, "upside potential", r"upside", 1),
    _rule(S, "growth prospects", r"growth", 1),
    # Strong bearish
    _rule(S, "strong sell signal", r"strong\s*sell", -3),
    _rule(S, "put options", r"puts?\s*on\s*\$?\w+", -2),
    _rule(S, "overvaluation", r"overvalued", -2),
    _rule(S, "avoid recommendation", r"stay\s*away", -2),
    _rule(S, "bubble concerns", r"bubble", -2),
    _rule(S, "earnings miss", r"earnings\s*miss", -2),
    _rule(S, "lowered guidance", r"lowered\s*guidance", -2),
    # Moderate bearish
    _rule(S, "sell recommendation", r"\bsell\b", -1),
    _rule(S, "short position", r"\bshort\b", -1),
    _rule(S, "bearish sentiment", r"bearish", -1),
    _rule(S, "downside risk", r"downside", -1),
    _rule(S, "declining metrics", r"declining", -1),

    _rule(M, "growth metrics", r"\d+%\s*growth", 1),
    _rule(M, "decline metrics", r"\d+%\s*decline", -1),
    _rule(M, "valuation discussion", r"p/e\s*(?:ratio\s*)?(?:of\s*)?\d+", 0),

    # Financial performance
    _rule(T, "Earnings Performance", r"earnings?\s*(?:report|results?|beat|miss)"),
    _rule(T, "Revenue Trends", r"revenue\s*(?:growth|decline|beat|miss)"),
    _rule(T, "Forward Guidance", r"guidance?\s*(?:raised|lowered|maintained)"),
    _rule(T, "Profit Margins", r"margin\s*(?:expansion|compression|improvement)"),
    _rule(T, "Cash Generation", r"cash\s*flow|free\s*cash"),
    # Valuation
    _rule(T, "P/E Valuation", r"p/e\s*(?:ratio)?|price\s*earnings"),
    _rule(T, "Price Targets", r"price\s*target"),
    _rule(T, "Valuation Views", r"(?:under|over)valued"),
    _rule(T, "Market Capitalization", r"market\s*cap"),
    # Growth and innovation
    _rule(T, "Product Innovation", r"product\s*(?:launch|announcement|innovation)"),
    _rule(T, "AI/Technology", r"\bai\b|artificial\s*intelligence|machine\s*learning"),
    _rule(T, "Market Expansion", r"expansion|new\s*market"),
    _rule(T, "User Growth", r"user\s*growth|customer\s*acquisition"),
    # Competition
    _rule(T, "Competitive Position", r"competition|competitor|market\s*share"),
    _rule(T, "Industry Position", r"industry\s*(?:leader|trends)"),
    _rule(T, "Market Disruption", r"disruption|disrupt"),
    # Risk factors
    _rule(T, "Regulatory Issues", r"regulation|regulatory|government"),
    _rule(T, "Legal Concerns", r"lawsuit|legal|litigation"),
    _rule(T, "Financial Health", r"debt|leverage|balance\s*sheet"),
    _rule(T, "Macro Risks", r"recession|macro"),
    # Trading activity
    _rule(T, "Options Activity", r"options?\s*(?:flow|activity)"),
    _rule(T, "Institutional Flow", r"institutional\s*(?:buying|selling)"),
    _rule(T, "Insider Trading", r"insider\s*(?:buying|selling)"),
    _rule(T, "Short Interest", r"short\s*(?:interest|squeeze)"),
    # Technical analysis
    _rule(T, "Technical Levels", r"support|resistance"),
    _rule(T, "Moving Averages", r"moving\s*average"),
    _rule(T, "Chart Patterns", r"breakout|breakdown"),

    _rule(D, "Earnings", r"earnings.{0,20}(\$\d+\.?\d*|\d+%)", theme="Earnings Performance"),
    _rule(D, "Earnings", r"\bEPS.{0,20}(\$\d+\.?\d*)", theme="Earnings Performance"),
    _rule(D, "Earnings", r"beat.{0,20}by.{0,20}(\d+%|\$\d+\.?\d*)", theme="Earnings Performance"),
    _rule(D, "Earnings", r"miss.{0,20}by.{0,20}(\d+%|\$\d+\.?\d*)", theme="Earnings Performance"),
    _rule(D, "Revenue", r"revenue.{0,20}(\$\d+\.?\d*[BMK]?|\d+%)", theme="Revenue Trends"),
    _rule(D, "Revenue", r"sales.{0,20}(growth|decline).{0,20}(\d+%)", theme="Revenue Trends"),
    _rule(D, "Revenue", r"YoY.{0,20}(growth|decline).{0,20}(\d+%)", theme="Revenue Trends"),
    _rule(D, "Valuation", r"P/E.{0,20}(\d+)", theme="P/E Valuation"),
    _rule(D, "Valuation", r"valued.{0,20}at.{0,20}(\d+x)", theme="Valuation Views"),
    _rule(D, "Valuation", r"price.{0,20}target.{0,20}(\$\d+)", theme="Price Targets"),
    _rule(D, "Valuation", r"market.{0,20}cap.{0,20}(\$\d+\.?\d*[BMT])", theme="Market Capitalization"),
    _rule(D, "Product", r"(\d+[MK]?).{0,20}users", theme="User Growth"),
    _rule(D, "Product", r"launched.{0,20}([\w\s]+)", theme="Product Innovation"),
    _rule(D, "Product", r"new.{0,20}product.{0,20}([\w\s]+)", theme="Product Innovation"),
    _rule(D, "Competition", r"market.{0,20}share.{0,20}(\d+%)", theme="Competitive Position"),
    _rule(D, "Competition", r"vs.{0,20}competitor.{0,20}([\w\s]+)", theme="Competitive Position"),
    _rule(D, "Competition", r"losing.{0,20}to.{0,20}([\w\s]+)", theme="Competitive Position"),

    _rule(Category.DRIVER, "earnings", r"earnings.{0,20}(\d+%|beat|miss)", extract=True),
    _rule(Category.DRIVER, "revenue", r"revenue.{0,20}(\d+%|growth|decline)", extract=True),
    _rule(Category.DRIVER, "guidance", r"guidance.{0,20}(raised|lowered|cut)", extract=True),
    _rule(Category.DRIVER, "valuation", r"p/e.{0,20}(\d+)", extract=True),
    _rule(Category.DRIVER, "competition", r"competition|competitor|market share"),
    _rule(Category.DRIVER, "product", r"product|launch|innovation"),
    _rule(Category.DRIVER, "financials", r"debt|cash|balance sheet"),

    _rule(Category.BULL_REASON, "earnings beat", r"earnings.{0,50}beat.{0,20}(\$?\d+\.?\d*|\d+%)"),
    _rule(Category.BULL_REASON, "revenue growth", r"revenue.{0,50}growth.{0,20}(\d+%)"),
    _rule(Category.BULL_REASON, "raised guidance", r"guidance.{0,50}raised.{0,20}(\$?\d+\.?\d*[BM]?)"),
    _rule(Category.BULL_REASON, "margin expansion", r"margin.{0,50}expansion.{0,20}(\d+\.?\d*%?)"),
    _rule(Category.BULL_REASON, "strong cash position", r"cash.{0,50}position.{0,20}(\$?\d+\.?\d*[BM])"),
    _rule(Category.BULL_REASON, "market share gains", r"market.{0,50}share.{0,50}gain"),
    _rule(Category.BULL_REASON, "product innovation", r"new.{0,50}product.{0,50}launch"),

    _rule(Category.BEAR_REASON, "earnings miss", r"earnings.{0,50}miss.{0,20}(\$?\d+\.?\d*|\d+%)"),
    _rule(Category.BEAR_REASON, "revenue decline", r"revenue.{0,50}decline.{0,20}(\d+%)"),
    _rule(Category.BEAR_REASON, "lowered guidance", r"guidance.{0,50}(?:cut|lowered).{0,20}(\$?\d+\.?\d*[BM]?)"),
    _rule(Category.BEAR_REASON, "margin pressure", r"margin.{0,50}compression.{0,20}(\d+\.?\d*%?)"),
    _rule(Category.BEAR_REASON, "debt levels", r"debt.{0,50}concern.{0,20}(\$?\d+\.?\d*[BM])"),
    _rule(Category.BEAR_REASON, "competitive threats", r"competition.{0,50}pressure"),
    _rule(Category.BEAR_REASON, "valuation concerns", r"valuation.{0,50}(?:high|expensive)"),

    _rule(Category.OPTION, "calls", r"(\$\d+)\s*calls?"),
    _rule(Category.OPTION, "puts", r"(\$\d+)\s*puts?"),
    _rule(Category.OPTION, "flow", r"option\s*flow.{0,50}(\$?\d+[MK])"),

    _rule(Category.COMPARISON, "comparison", r"\bvs\.?\s*(\w+)|\bcompared\s*to\s*(\w+)|\bversus\s*(\w+)"),

    _rule(Category.TECHNICAL, "support", r"support\s*(?:at\s*)?\$?(\d+)"),
    _rule(Category.TECHNICAL, "resistance", r"resistance\s*(?:at\s*)?\$?(\d+)"),
    _rule(Category.TECHNICAL, "MA", r"(\d+)\s*day\s*moving\s*average"),
    _rule(Category.TECHNICAL, "target", r"target\s*(?:price\s*)?\$?(\d+)"),

    # Named entities are one to four capitalized words directly before the verb.
    _rule(Category.INSTITUTIONAL, "buying",
          r"\b((?:[A-Z][\w&.]*\s+){0,3}[A-Z][\w&.]*)\s+(?i:bought|purchased|acquired)\s*(?:\d+[MK]?)?\s*(?i:shares)",
          flags=0),
    _rule(Category.INSTITUTIONAL, "selling",
          r"\b((?:[A-Z][\w&.]*\s+){0,3}[A-Z][\w&.]*)\s+(?i:sold|dumped|reduced)\s*(?:\d+[MK]?)?\s*(?i:shares)",
          flags=0),
    _rule(Category.INSTITUTIONAL, "insider activity", r"insider\s*(?:buying|selling)"),
    _rule(Category.INSTITUTIONAL, "institutional flow", r"institutional\s*(?:buying|selling)"),

    _rule(Category.TRENDING, "Earnings", r"earnings|eps|revenue|guidance"),
    _rule(Category.TRENDING, "Product News", r"product|launch|announcement|release"),
    _rule(Category.TRENDING, "M&A Activity", r"merger|acquisition|buyout|deal"),
    _rule(Category.TRENDING, "Regulatory News", r"fda|approval|trial|drug"),
    _rule(Category.TRENDING, "Restructuring", r"layoff|restructure|cost.cutting"),
    _rule(Category.TRENDING, "Capital Return", r"dividend|buyback|share.repurchase"),
    _rule(Category.TRENDING, "Legal Issues", r"lawsuit|investigation|\bsec\b"),
    _rule(Category.TRENDING, "Partnerships", r"partnership|collaboration|joint"),
    _rule(Category.TRENDING, "Forward Guidance", r"guidance|forecast|outlook"),
    _rule(Category.TRENDING, "Analyst Actions", r"analyst|upgrade|downgrade|price.target"),
)

del S, M, T, D

_BY_CATEGORY: Dict[Category, Tuple[Rule, ...]] = {
    category: tuple(rule for rule in RULES if rule.category == category) for category in Category
}


def rules_for(category: Category) -> Tuple[Rule, ...]:
    return _BY_CATEGORY[category]


def scan(text: str, category: Category) -> Iterator[Hit]:
    """Yield the first match of every rule in ``category``, in table order."""
    for rule in rules_for(category):
        match = rule.pattern.search(text)
        if match:
            yield Hit(rule, match)


def first_hit(text: str, category: Category, label: Optional[str] = None) -> Optional[Hit]:
    for hit in scan(text, category):
        if label is None or hit.label == label:
            return hit
    return None
