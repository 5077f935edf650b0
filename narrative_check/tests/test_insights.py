"""Tests for the unique-insight generators."""

import unittest

from narrative_check.analysis.corpus import build_corpus
from narrative_check.synthesis.insights import (
    comparison_insight,
    institutional_insight,
    momentum_insight,
    option_insight,
    technical_insight,
    unique_insight,
)
from narrative_check.tests.helpers import DAY, NOW, make_document


def docs(*titles, **kwargs):
    return [make_document(permalink=f"p{i}", title=title, **kwargs) for i, title in enumerate(titles)]


class TestOptionInsight(unittest.TestCase):

    def test_heavy_calls(self):
        documents = docs(*(["TSLA $250 calls"] * 4), "TSLA $200 puts")

        bullet = option_insight(documents)

        self.assertEqual(
            bullet.text,
            "Heavy call activity (4:1 ratio) with focus on $250 calls suggesting bullish positioning",
        )
        self.assertEqual(bullet.source.url, "p0")

    def test_put_dominance(self):
        bullet = option_insight(docs("TSLA $200 puts", "TSLA $190 puts", "TSLA $180 puts", "TSLA $300 calls",
                                     "TSLA $150 puts"))

        self.assertEqual(bullet.text, "Put buying dominating (4:1 ratio) particularly $200 puts indicating hedging")

    def test_mixed(self):
        bullet = option_insight(docs("$250 calls", "$260 calls", "$200 puts", "$190 puts", "$300 calls and $100 puts"))

        self.assertTrue(bullet.text.startswith("Mixed option activity (3 calls, 3 puts)"))

    def test_needs_five_mentions(self):
        self.assertIsNone(option_insight(docs(*(["TSLA $250 calls"] * 4))))


class TestOtherInsights(unittest.TestCase):

    def test_comparison(self):
        bullet = comparison_insight(docs("TSLA vs RIVN lately", "TSLA compared to ford", "TSLA vs RIVN again"))

        self.assertEqual(
            bullet.text,
            "Frequent comparisons to RIVN (2 mentions) with investors debating relative positioning",
        )

    def test_short_comparison_targets_ignored(self):
        self.assertIsNone(comparison_insight(docs("TSLA vs GM")))

    def test_technical(self):
        bullet = technical_insight(docs("TSLA support at $180", "TSLA support 175"))

        self.assertEqual(bullet.text, "Technical traders watching 180 support level (2 mentions)")

    def test_moving_average(self):
        bullet = technical_insight(docs("TSLA bouncing off the 200 day moving average"))

        self.assertEqual(bullet.text, "Technical analysis focusing on 200-day moving average")

    def test_named_institution(self):
        bullet = institutional_insight(docs("Cathie Wood bought 100K shares of TSLA"))

        self.assertEqual(bullet.text, "Cathie Wood activity (buying) generating 1 discussions")

    def test_generic_insider_activity(self):
        bullet = institutional_insight(docs("Heavy insider buying on TSLA"))

        self.assertEqual(bullet.text, "Insider activity generating 1 discussions")

    def test_nothing_found(self):
        quiet = docs("TSLA strong buy")

        self.assertIsNone(comparison_insight(quiet))
        self.assertIsNone(technical_insight(quiet))
        self.assertIsNone(institutional_insight(quiet))


class TestMomentumInsight(unittest.TestCase):

    def test_bullish_day(self):
        corpus = build_corpus(docs(*(["TSLA strong buy"] * 5), created_utc=NOW - 3600), "TSLA")

        bullet = momentum_insight(corpus, "TSLA", NOW)

        self.assertEqual(bullet.text, "Momentum building with 5 posts in 24hrs (avg 15 engagement), 100% bullish")
        self.assertIsNone(bullet.source)

    def test_bearish_day(self):
        corpus = build_corpus(docs(*(["TSLA strong sell"] * 5), created_utc=NOW - 3600), "TSLA")

        self.assertEqual(momentum_insight(corpus, "TSLA", NOW).text, "Negative momentum with 5 posts today, 100% bearish")

    def test_weekly_rate(self):
        corpus = build_corpus(docs(*(["TSLA strong buy"] * 21), created_utc=NOW - 2 * DAY), "TSLA")

        self.assertEqual(
            momentum_insight(corpus, "TSLA", NOW).text,
            "TSLA averaging 3.0 posts/day this week, moderate retail interest",
        )

    def test_neutral_posts_are_not_momentum(self):
        corpus = build_corpus(docs(*(["TSLA news"] * 10), created_utc=NOW - 3600), "TSLA")

        self.assertEqual(
            momentum_insight(corpus, "TSLA", NOW).text,
            "TSLA averaging 0.0 posts/day this week, low retail interest",
        )


class TestUniqueInsight(unittest.TestCase):

    def test_options_take_precedence(self):
        titles = ["TSLA $250 calls vs RIVN"] * 5
        corpus = build_corpus(docs(*titles), "TSLA")

        self.assertTrue(unique_insight(corpus, "TSLA", NOW).text.startswith("Heavy call activity"))

    def test_comparison_before_technical(self):
        corpus = build_corpus(docs("TSLA vs RIVN, support at 180"), "TSLA")

        self.assertTrue(unique_insight(corpus, "TSLA", NOW).text.startswith("Frequent comparisons to RIVN"))
