"""Tests for the Prometheus exporter."""

import unittest
from unittest.mock import patch

from prometheus_client import REGISTRY

from narrative_check.monitoring.metrics import PrometheusExporter


def sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestPrometheusExporter(unittest.TestCase):

    def setUp(self):
        self.exporter = PrometheusExporter(port=9999)

    @patch("narrative_check.monitoring.metrics.start_http_server")
    def test_start_server_once(self, mock_start):
        self.exporter.start_server()
        self.exporter.start_server()

        mock_start.assert_called_once_with(9999)
        self.assertTrue(self.exporter.server_started)

    @patch("narrative_check.monitoring.metrics.start_http_server", side_effect=OSError("in use"))
    def test_start_server_failure_is_logged(self, mock_start):
        self.exporter.start_server()

        self.assertFalse(self.exporter.server_started)

    def test_counters(self):
        errors = sample("narrative_check_api_errors_total", {"error_type": "401"})
        candidates = sample("narrative_check_candidates_collected_total", {"subreddit": "metrics_test"})
        outcomes = sample("narrative_check_summarizer_outcomes_total", {"tier": "rich", "outcome": "error"})
        refreshes = sample("narrative_check_token_refreshes_total")

        self.exporter.record_api_error("401")
        self.exporter.record_candidates("metrics_test", 7)
        self.exporter.record_candidates("metrics_test", 0)
        self.exporter.record_summarizer_outcome("rich", "error")
        self.exporter.record_token_refresh()

        self.assertEqual(sample("narrative_check_api_errors_total", {"error_type": "401"}), errors + 1)
        self.assertEqual(
            sample("narrative_check_candidates_collected_total", {"subreddit": "metrics_test"}), candidates + 7)
        self.assertEqual(
            sample("narrative_check_summarizer_outcomes_total", {"tier": "rich", "outcome": "error"}), outcomes + 1)
        self.assertEqual(sample("narrative_check_token_refreshes_total"), refreshes + 1)

    def test_request_timer(self):
        before = sample("narrative_check_request_duration_seconds_count")

        with self.exporter.time_request():
            pass

        self.assertEqual(sample("narrative_check_request_duration_seconds_count"), before + 1)


if __name__ == "__main__":
    unittest.main()
