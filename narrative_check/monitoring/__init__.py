"""Prometheus monitoring for the gathering pipeline."""

from narrative_check.monitoring.metrics import PrometheusExporter

__all__ = ["PrometheusExporter"]
