"""
Adapter for the es6-plato command line analyzer.

Each job runs ``plato`` as a child process, so the pool workers only wait on
I/O. The per-file records are read back from the ``report.json`` overview
plato writes into the job's output directory.
"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from plato_runner.analysis.analyzer import summarize
from plato_runner.analysis.models import AnalysisReport, FileRecord, Summary
from plato_runner.core.constants import REPORT_FILENAME
from plato_runner.core.exceptions import AnalysisError
from plato_runner.pipeline.models import AnalysisJob

logger = logging.getLogger(__name__)


def _dig(data: Any, *keys: str, default: Any = None) -> Any:
    current = data
    for key in keys:
        if not isinstance(current, dict):
            return default
        current = current.get(key)
    return default if current is None else current


def _lint_count(report: dict[str, Any]) -> int:
    """Lint messages appear as a count (overview) or a list (full file report)."""
    for tool in ("eslint", "jshint"):
        messages = _dig(report, tool, "messages")
        if isinstance(messages, list):
            return len(messages)
        if isinstance(messages, (int, float)):
            return int(messages)
    return 0


def parse_plato_report(data: Any) -> AnalysisReport:
    """Convert a plato overview (``{"reports": [...]}`` or a bare list) into file records.

    Entries without a file path are skipped.
    """
    reports = data.get("reports", []) if isinstance(data, dict) else data
    if not isinstance(reports, list):
        raise ValueError(f"Unexpected plato report shape: {type(reports).__name__}")

    records = []
    for report in reports:
        path = _dig(report, "info", "file")
        if not path:
            continue
        sloc = _dig(report, "complexity", "aggregate", "sloc", "physical", default=0)
        cyclomatic = _dig(report, "complexity", "aggregate", "cyclomatic")
        if cyclomatic is None:
            cyclomatic = _dig(report, "complexity", "methodAggregate", "cyclomatic", default=0)
        records.append(
            FileRecord(
                path=str(path),
                sloc=int(sloc),
                maintainability=float(_dig(report, "complexity", "maintainability", default=0.0)),
                cyclomatic=float(cyclomatic),
                lint_errors=_lint_count(report),
            )
        )
    return records


class PlatoAnalyzer:
    """Run es6-plato over one directory per job.

    Args:
        plato_bin: Executable name or path (default: "plato")
        extra_args: Additional arguments appended to every invocation
    """

    def __init__(self, plato_bin: str = "plato", extra_args: Sequence[str] = ()):
        self.plato_bin = plato_bin
        self.extra_args = list(extra_args)

    def build_command(self, job: AnalysisJob) -> list[str]:
        command = [self.plato_bin, "-r", "-n", "-t", job.title, "-x", job.exclusion_pattern]
        if job.eslintrc:
            command.extend(["-e", job.eslintrc])
        command.extend(["-d", job.output_directory, *self.extra_args, job.source_directory])
        return command

    def inspect(self, job: AnalysisJob) -> AnalysisReport:
        """Analyze ``job.source_directory`` and return one record per file.

        Raises:
            AnalysisError: If plato cannot be launched, exits non-zero, or
                leaves no readable report behind
        """
        Path(job.output_directory).mkdir(parents=True, exist_ok=True)
        command = self.build_command(job)
        logger.debug(f"Running plato inspect for {job.source_directory}: {' '.join(command)}")

        try:
            result = subprocess.run(command, capture_output=True, text=True)
        except OSError as e:
            raise AnalysisError("Failed to launch plato", job_title=job.title, details=str(e)) from e

        if result.returncode != 0:
            raise AnalysisError(
                "plato exited with an error",
                job_title=job.title,
                returncode=result.returncode,
                details=(result.stderr or result.stdout).strip()[:500] or None,
            )

        report_file = Path(job.output_directory) / REPORT_FILENAME
        try:
            with open(report_file, encoding="utf-8") as f:
                return parse_plato_report(json.load(f))
        except (OSError, ValueError) as e:
            raise AnalysisError(
                f"Unreadable plato report at {report_file}", job_title=job.title, details=str(e)
            ) from e

    def overview(self, records: Sequence[FileRecord]) -> Summary:
        return summarize(records)

    def assets_dir(self) -> Path | None:
        """Locate the static asset bundle shipped with the plato installation."""
        executable = shutil.which(self.plato_bin)
        if executable is None:
            return None
        # node_modules/.bin/plato -> node_modules/es6-plato/bin/plato
        candidate = Path(executable).resolve().parent.parent / "lib" / "assets"
        return candidate if candidate.is_dir() else None
