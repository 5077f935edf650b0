"""Tests for the candidate relevance predicates."""

import unittest

from narrative_check.collector.filters import (
    SECONDS_PER_DAY,
    RelevanceFilter,
    has_min_engagement,
    is_generic_thread,
    is_recent,
    mentions_company,
)
from narrative_check.config import SearchConfig
from narrative_check.tests.helpers import NOW, make_document


class TestPredicates(unittest.TestCase):

    def test_mentions_company_in_title_or_body(self):
        self.assertTrue(mentions_company(make_document(title="tsla to the moon"), "TSLA"))
        self.assertTrue(mentions_company(make_document(title="Thoughts?", body="Holding Tsla"), "TSLA"))
        self.assertFalse(mentions_company(make_document(title="Thoughts?", body="Holding F"), "TSLA"))

    def test_generic_threads_are_case_insensitive(self):
        self.assertTrue(is_generic_thread(make_document(title="TSLA Daily Discussion Thread")))
        self.assertTrue(is_generic_thread(make_document(title="What Are Your Moves Tomorrow")))
        self.assertFalse(is_generic_thread(make_document(title="TSLA earnings discussion")))

    def test_engagement_floor(self):
        self.assertTrue(has_min_engagement(make_document(score=5, num_comments=0)))
        self.assertTrue(has_min_engagement(make_document(score=0, num_comments=3)))
        self.assertFalse(has_min_engagement(make_document(score=4, num_comments=2)))
        self.assertFalse(has_min_engagement(make_document(score=-20, num_comments=2)))

    def test_recency_window_is_inclusive(self):
        boundary = NOW - 90 * SECONDS_PER_DAY
        self.assertTrue(is_recent(make_document(created_utc=boundary), NOW))
        self.assertFalse(is_recent(make_document(created_utc=boundary - 1), NOW))
        self.assertTrue(is_recent(make_document(created_utc=NOW - 2 * SECONDS_PER_DAY), NOW, window_days=7))


class TestRelevanceFilter(unittest.TestCase):

    def setUp(self):
        self.relevance_filter = RelevanceFilter()

    def test_accepts_only_when_every_predicate_holds(self):
        good = make_document(title="TSLA thesis", score=10)

        self.assertTrue(self.relevance_filter.accepts(good, "TSLA", NOW))
        self.assertFalse(self.relevance_filter.accepts(
            make_document(title="TSLA daily discussion", score=10), "TSLA", NOW))
        self.assertFalse(self.relevance_filter.accepts(
            make_document(title="TSLA thesis", score=1, num_comments=0), "TSLA", NOW))
        self.assertFalse(self.relevance_filter.accepts(
            make_document(title="TSLA thesis", created_utc=NOW - 120 * SECONDS_PER_DAY), "TSLA", NOW))
        self.assertFalse(self.relevance_filter.accepts(
            make_document(title="Rivian thesis"), "TSLA", NOW))

    def test_apply_preserves_order(self):
        documents = [
            make_document(permalink="p1", title="TSLA one"),
            make_document(permalink="p2", title="nothing here"),
            make_document(permalink="p3", title="TSLA three"),
        ]

        kept = self.relevance_filter.apply(documents, "TSLA", NOW)

        self.assertEqual([d.permalink for d in kept], ["p1", "p3"])

    def test_from_config(self):
        config = SearchConfig(window_days=7, min_score=50, min_comments=10, generic_phrases=["Megathread"])

        relevance_filter = RelevanceFilter.from_config(config)

        self.assertEqual(relevance_filter.window_days, 7)
        self.assertEqual(relevance_filter.min_score, 50)
        self.assertEqual(relevance_filter.generic_phrases, ["megathread"])
        self.assertFalse(relevance_filter.accepts(
            make_document(title="TSLA megathread", score=100), "TSLA", NOW))


if __name__ == "__main__":
    unittest.main()
