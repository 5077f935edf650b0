"""Tests for local narrative synthesis."""

import unittest

import pytest

from narrative_check.analysis.corpus import build_corpus
from narrative_check.collector.filters import RelevanceFilter
from narrative_check.exceptions import EmptyCorpusError
from narrative_check.models.sentiment import CorpusResult
from narrative_check.synthesis.narrative import (
    BULLET_COUNT,
    NarrativeSynthesizer,
    degenerate_bullet,
    document_bullets,
    ensure_non_empty,
    extract_key_opinion,
)
from narrative_check.tests.helpers import NOW, make_document


def bullish_scenario():
    documents = [
        make_document(permalink=f"bull{i}", title="TSLA strong buy", body="Earnings beat 15% this quarter")
        for i in range(8)
    ]
    documents += [make_document(permalink=f"meh{i}", title="TSLA time to sell") for i in range(2)]
    return build_corpus(documents, "TSLA")


class TestNarrativeSynthesizer(unittest.TestCase):

    def setUp(self):
        self.synthesizer = NarrativeSynthesizer(clock=lambda: NOW)

    def test_clean_bullish_narrative(self):
        bullets = self.synthesizer.synthesize(bullish_scenario(), "TSLA")

        self.assertEqual(len(bullets), BULLET_COUNT)
        first = bullets[0].text
        self.assertTrue(first.startswith("80% bullish vs 0% bearish across 10 posts"))
        self.assertIn("earnings beat 15%", first.lower())
        self.assertEqual(bullets[0].source.url, "bull0")

    def test_bullet_order(self):
        bullets = self.synthesizer.synthesize(bullish_scenario(), "TSLA")

        self.assertEqual(
            bullets[1].text,
            "Earnings Performance discussions center on Earnings beat 15%, with bullish sentiment (15%)",
        )
        self.assertTrue(bullets[2].text.startswith("Bulls highlight earnings beat: "))
        self.assertEqual(bullets[3].text, "No substantive bearish case raised in TSLA discussion")
        self.assertEqual(bullets[4].text, "TSLA averaging 1.1 posts/day this week, low retail interest")

    def test_fallback_bullets_have_no_source(self):
        bullets = self.synthesizer.synthesize(bullish_scenario(), "TSLA")

        self.assertIsNone(bullets[3].source)
        self.assertIsNone(bullets[4].source)

    def test_empty_corpus_yields_single_bullet(self):
        bullets = self.synthesizer.synthesize(CorpusResult(company="TSLA"), "TSLA")

        self.assertEqual(bullets, [degenerate_bullet("TSLA")])
        self.assertEqual(bullets[0].text, "Limited Reddit discussion about TSLA in the past 90 days")
        self.assertIsNone(bullets[0].source)

    def test_no_mentions_means_limited_discussion(self):
        candidates = [make_document(permalink=f"p{i}", title="Rivian deliveries", score=100) for i in range(5)]
        relevant = RelevanceFilter().apply(candidates, "TSLA", NOW)

        bullets = self.synthesizer.synthesize(build_corpus(relevant, "TSLA"), "TSLA")

        self.assertEqual(len(bullets), 1)
        self.assertIn("Limited Reddit discussion", bullets[0].text)

    def test_engagement_ratio(self):
        documents = [make_document(permalink=f"b{i}", title="TSLA strong buy", score=10, num_comments=0)
                     for i in range(3)]
        documents.append(make_document(permalink="s", title="TSLA strong sell", score=20, num_comments=0))

        bullet = self.synthesizer.sentiment_bullet(build_corpus(documents, "TSLA"), "TSLA")

        self.assertEqual(
            bullet.text,
            "75% bullish vs 25% bearish across 4 posts, primarily driven by TSLA fundamentals, "
            "with bull posts getting 1.5x more engagement",
        )
        self.assertIsNone(bullet.source)

    def test_bearish_wording(self):
        documents = [make_document(permalink=f"b{i}", title="TSLA overvalued, stay away") for i in range(3)]
        documents.append(make_document(permalink="n", title="TSLA news"))

        bullet = self.synthesizer.sentiment_bullet(build_corpus(documents, "TSLA"), "TSLA")

        self.assertTrue(bullet.text.startswith("75% bearish vs 0% bullish sentiment, mainly due to TSLA fundamentals"))
        self.assertTrue(bullet.text.endswith("engagement ratio is 0.0x"))

    def test_split_wording(self):
        documents = [
            make_document(permalink="b", title="TSLA strong buy", score=30, num_comments=0),
            make_document(permalink="s", title="TSLA strong sell", score=20, num_comments=0),
        ]

        bullet = self.synthesizer.sentiment_bullet(build_corpus(documents, "TSLA"), "TSLA")

        self.assertEqual(
            bullet.text,
            "Split sentiment (50% bullish, 50% bearish) as investors debate TSLA fundamentals, with bulls more engaged",
        )

    def test_topic_fallback(self):
        corpus = build_corpus([make_document(title="TSLA strong buy")], "TSLA")

        bullet = self.synthesizer.topic_bullet(corpus, "TSLA")

        self.assertEqual(bullet.text, "Primary discussion theme unclear across varied TSLA posts")

    def test_bear_bullet_cites_top_bearish_post(self):
        documents = [
            make_document(permalink="small", title="TSLA strong sell", score=1),
            make_document(permalink="big", title="TSLA strong sell, competition pressure mounting", score=80),
        ]

        bullet = self.synthesizer.bear_bullet(build_corpus(documents, "TSLA"), "TSLA")

        self.assertEqual(bullet.text, "Bears concerned about competitive threats for TSLA (80 upvotes, 5 comments)")
        self.assertEqual(bullet.source.url, "big")


def test_ensure_non_empty_raises():
    with pytest.raises(EmptyCorpusError) as excinfo:
        ensure_non_empty(CorpusResult(company="TSLA"))

    assert excinfo.value.company == "TSLA"


def test_extract_key_opinion_prefers_opinion_sentence():
    document = make_document(
        title="TSLA thoughts",
        body="I believe TSLA will double because deliveries are up. Short.",
    )

    assert extract_key_opinion(document, "TSLA") == "TSLA thoughts I believe TSLA will double because deliveries are up"


def test_extract_key_opinion_falls_back_to_title():
    title = "TSLA " + "x" * 120
    document = make_document(title=title)

    assert extract_key_opinion(document, "TSLA") == title[:100] + "..."


def test_document_bullets():
    documents = [
        make_document(permalink=f"p{i}", title="TSLA strong buy", subreddit="wallstreetbets") for i in range(7)
    ]

    bullets = document_bullets(documents, "TSLA")

    assert len(bullets) == 5
    assert bullets[0].text == "Bullish on r/wallstreetbets (10 upvotes, 5 comments) - TSLA strong buy"
    assert bullets[0].source.url == "p0"
