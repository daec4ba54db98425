"""Analyzer protocol and the overview reduction shared by every adapter."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from plato_runner.analysis.models import AnalysisReport, FileRecord, Summary
from plato_runner.pipeline.models import AnalysisJob


@runtime_checkable
class Analyzer(Protocol):
    """Performs static analysis for one job and reduces records into a summary.

    ``inspect`` runs inside pool workers and must be safe to call
    concurrently for different jobs.
    """

    def inspect(self, job: AnalysisJob) -> AnalysisReport: ...

    def overview(self, records: Sequence[FileRecord]) -> Summary: ...


def summarize(records: Sequence[FileRecord]) -> Summary:
    """Reduce file records into totals and per-file averages.

    Mirrors plato's overview report: SLOC average is rounded to an integer,
    maintainability and lint averages to two decimals.
    """
    file_count = len(records)
    if not file_count:
        return Summary()

    total_sloc = sum(record.sloc for record in records)
    total_maintainability = sum(record.maintainability for record in records)
    total_lint = sum(record.lint_errors for record in records)

    return Summary(
        file_count=file_count,
        total_sloc=total_sloc,
        average_sloc=round(total_sloc / file_count),
        total_maintainability=round(total_maintainability, 2),
        average_maintainability=round(total_maintainability / file_count, 2),
        total_lint_errors=total_lint,
        average_lint_errors=round(total_lint / file_count, 2),
    )
