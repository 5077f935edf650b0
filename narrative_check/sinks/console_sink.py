"""Plain-text output for narrative reports."""

import sys
from typing import Optional, TextIO

from narrative_check.models.report import NarrativeReport
from narrative_check.sinks.data_sink import NarrativeSink


class ConsoleSink(NarrativeSink):
    """Human-readable rendering of bullets, citations and provenance."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def emit(self, report: NarrativeReport) -> None:
        lines = [f"Reddit narrative for {report.company}", ""]
        for bullet in report.bullets:
            lines.append(bullet.render())
            if bullet.source:
                lines.append(f"    {bullet.source.title} <{bullet.source.url}>")

        if report.citations:
            lines.extend(["", "Sources:"])
            lines.extend(f"  {index}. {url}" for index, url in enumerate(report.citations, start=1))

        if report.financial:
            lines.extend(["", f"Financial reality ({report.financial.source}, {report.financial.date}):"])
            for heading, items in (
                ("Fundamentals", report.financial.fundamentals),
                ("Risks", report.financial.risks),
                ("Trends", report.financial.trends),
            ):
                lines.append(f"  {heading}:")
                lines.extend(f"    - {item}" for item in items)

        if report.divergence:
            lines.extend([
                "",
                f"Divergence: {report.divergence.score}/100 ({report.divergence.level})",
                f"  {report.divergence.summary}",
            ])
            lines.extend(f"  - {point}" for point in report.divergence.key_points)

        lines.extend(["", report.provenance])
        self.stream.write("\n".join(lines) + "\n")
