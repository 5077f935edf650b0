"""Output sinks for narrative reports."""

from narrative_check.sinks.console_sink import ConsoleSink
from narrative_check.sinks.data_sink import NarrativeSink
from narrative_check.sinks.json_sink import JsonSink

__all__ = ["ConsoleSink", "JsonSink", "NarrativeSink"]
