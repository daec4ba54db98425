"""
Analyzer data models.

Per-file records returned by an analyzer and the roll-up summary computed
over any collection of them.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class FileRecord:
    """Analysis result for a single source file.

    Attributes:
        path: File path as reported by the analyzer
        sloc: Physical source lines of code
        maintainability: Maintainability index (0-171 scale used by plato)
        cyclomatic: Aggregate cyclomatic complexity
        lint_errors: Number of lint messages reported for the file
    """

    path: str
    sloc: int = 0
    maintainability: float = 0.0
    cyclomatic: float = 0.0
    lint_errors: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Summary:
    """Roll-up over a set of file records.

    Derived data only: a summary can always be recomputed from the records
    it was built from.
    """

    file_count: int = 0
    total_sloc: int = 0
    average_sloc: int = 0
    total_maintainability: float = 0.0
    average_maintainability: float = 0.0
    total_lint_errors: int = 0
    average_lint_errors: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# One record per analyzed file; reports for several jobs concatenate into a larger report
AnalysisReport = list[FileRecord]
