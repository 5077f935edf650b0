"""JSON output for narrative reports."""

import json
import logging
import sys
from typing import Optional, TextIO

from narrative_check.models.report import NarrativeReport
from narrative_check.sinks.data_sink import NarrativeSink

logger = logging.getLogger(__name__)


class JsonSink(NarrativeSink):
    """Writes each report as one JSON document to a text stream."""

    def __init__(self, stream: Optional[TextIO] = None, indent: Optional[int] = 2):
        self.stream = stream or sys.stdout
        self.indent = indent

    def emit(self, report: NarrativeReport) -> None:
        json.dump(report.to_dict(), self.stream, indent=self.indent, ensure_ascii=False)
        self.stream.write("\n")
        logger.debug(f"Wrote JSON report for {report.company}")
