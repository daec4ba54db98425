"""
Pipeline data models.

Modules discovered in the codebase, the analysis jobs they expand into,
and the results collected by the scheduler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ModuleCategory(str, Enum):
    """Aggregation bucket for a job's results."""

    ADDON = "addon"
    ENGINE = "engine"
    TESTS = "tests"


@dataclass(frozen=True)
class Module:
    """One analyzable unit: a directory holding an addon manifest.

    Attributes:
        manifest_path: Path to the module's package.json (unique key)
        directory: Directory containing the manifest
        display_name: Manifest name, or a sanitized directory name
        category: ADDON or ENGINE, from the manifest keywords
        has_tests: Whether a tests/ subdirectory exists
    """

    manifest_path: str
    directory: str
    display_name: str
    category: ModuleCategory
    has_tests: bool = False


@dataclass(frozen=True)
class AnalysisJob:
    """One analyzer invocation over one directory with one exclusion rule.

    Attributes:
        source_directory: Directory to analyze
        output_directory: Where the analyzer writes its per-file pages
        title: Report title (module name, suffixed for tests)
        exclusion_pattern: Regex of paths the analyzer must skip
        owner: Owner label the results are filed under
        category: Aggregation category for the results
        module_key: Module directory, the leaf key in the aggregation tree
        eslintrc: Lint configuration forwarded to the analyzer
    """

    source_directory: str
    output_directory: str
    title: str
    exclusion_pattern: str
    owner: str
    category: ModuleCategory
    module_key: str
    eslintrc: str = ""

    @property
    def is_tests(self) -> bool:
        return self.category is ModuleCategory.TESTS


@dataclass
class JobResult:
    """Result of running a single analysis job"""

    job: AnalysisJob
    success: bool
    duration: float
    record_count: int = 0
    error_message: str = ""


@dataclass
class RunResult:
    """Outcome of a complete batch run.

    Attributes:
        run_id: Short correlation ID used in log lines
        processed_modules: Modules that passed the addon filter
        addons: Modules categorized as addons
        engines: Modules categorized as engines
        tests_jobs: Jobs scheduled for tests directories
        job_results: Every terminal job result
        emission_errors: Report artifacts that failed to write
        duration: Wall-clock duration in seconds
    """

    run_id: str
    processed_modules: int = 0
    addons: int = 0
    engines: int = 0
    tests_jobs: int = 0
    job_results: list[JobResult] = field(default_factory=list)
    emission_errors: int = 0
    duration: float = 0.0

    @property
    def failed_jobs(self) -> list[JobResult]:
        return [result for result in self.job_results if not result.success]

    @property
    def failed_modules(self) -> int:
        """Distinct modules with at least one failed job."""
        return len({result.job.module_key for result in self.failed_jobs})

    @property
    def success(self) -> bool:
        return not self.failed_jobs
