"""Defines the NarrativeSink protocol for report consumers."""

from typing import Protocol

from narrative_check.models.report import NarrativeReport


class NarrativeSink(Protocol):
    """
    A protocol for anything that receives a finished narrative report.

    Sinks receive the ordered bullets together with their citations and the
    provenance note, so any presentation layer can be swapped in.
    """

    def emit(self, report: NarrativeReport) -> None:
        """
        Deliver one report.

        Args:
            report: The report produced by a gathering session.
        """
        ...
