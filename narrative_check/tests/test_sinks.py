"""Tests for report sinks."""

import io
import json
import unittest

from narrative_check.analysis.corpus import build_corpus
from narrative_check.models.report import DivergenceReport, FinancialReality, NarrativeReport
from narrative_check.models.sentiment import NarrativeBullet, SourceReference
from narrative_check.sinks import ConsoleSink, JsonSink
from narrative_check.tests.helpers import make_document


def sample_report(**overrides) -> NarrativeReport:
    corpus = build_corpus([make_document(permalink="p1", title="TSLA undervalued")], "TSLA")
    values = dict(
        company="TSLA",
        corpus=corpus,
        bullets=[
            NarrativeBullet(text="100% bullish", source=SourceReference(title="TSLA undervalued", url="p1")),
            NarrativeBullet(text="No substantive bearish case raised in TSLA discussion"),
        ],
        citations=["p1"],
        provenance="Based on 1 Reddit posts from 1 communities over the past 90 days",
    )
    values.update(overrides)
    return NarrativeReport(**values)


class TestConsoleSink(unittest.TestCase):

    def test_renders_bullets_sources_and_provenance(self):
        stream = io.StringIO()

        ConsoleSink(stream).emit(sample_report())

        output = stream.getvalue()
        self.assertTrue(output.startswith("Reddit narrative for TSLA\n"))
        self.assertIn("• 100% bullish\n    TSLA undervalued <p1>", output)
        self.assertIn("• No substantive bearish case raised in TSLA discussion", output)
        self.assertIn("Sources:\n  1. p1", output)
        self.assertTrue(output.rstrip().endswith("over the past 90 days"))
        self.assertNotIn("Divergence", output)

    def test_renders_financials_and_divergence(self):
        stream = io.StringIO()
        report = sample_report(
            financial=FinancialReality(company="TSLA", fundamentals=["Revenue $25B"], risks=["Margins"],
                                       trends=["Storage"], source="10-Q", date="2025-04-22"),
            divergence=DivergenceReport(score=40, level="medium", summary="Some notable differences",
                                        key_points=["a", "b"]),
        )

        ConsoleSink(stream).emit(report)

        output = stream.getvalue()
        self.assertIn("Financial reality (10-Q, 2025-04-22):", output)
        self.assertIn("  Risks:\n    - Margins", output)
        self.assertIn("Divergence: 40/100 (medium)", output)


class TestJsonSink(unittest.TestCase):

    def test_writes_one_document(self):
        stream = io.StringIO()

        JsonSink(stream).emit(sample_report())

        data = json.loads(stream.getvalue())
        self.assertEqual(data["company"], "TSLA")
        self.assertEqual(data["bullets"][0], {"text": "100% bullish",
                                              "source": {"title": "TSLA undervalued", "url": "p1"}})
        self.assertIsNone(data["bullets"][1]["source"])
        self.assertEqual(data["key_themes"], ["Valuation Views"])
        self.assertEqual(data["summary_tier"], "local")
        self.assertIsNone(data["financial"])


if __name__ == "__main__":
    unittest.main()
