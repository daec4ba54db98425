"""
Job scheduler.

Expands modules into analysis jobs and runs them on a bounded thread pool.
Every job merges its own outcome into the aggregation tree before its future
completes, which makes ``await_all`` the join barrier for the summary pass.
"""

from __future__ import annotations

import logging
import os
import re
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING

from tqdm import tqdm

from plato_runner.core.constants import (
    BODY_EXCLUDE_PATTERN,
    MAX_WORKERS,
    TESTS_EXCLUDE_PATTERN,
    TESTS_TITLE_SUFFIX,
    TQDM_BAR_FORMAT,
    auto_detect_workers,
)
from plato_runner.core.exceptions import ConfigurationError, SchedulerClosedError
from plato_runner.pipeline.models import AnalysisJob, JobResult, Module, ModuleCategory
from plato_runner.pipeline.workers import run_analysis_job

if TYPE_CHECKING:
    from plato_runner.aggregation.tree import AggregationTree
    from plato_runner.analysis.analyzer import Analyzer


_UNSAFE_TITLE_CHARS_RE = re.compile(r"[^a-zA-Z0-9]")


def _job_output_dir(output_dir: str, owner: str, category: ModuleCategory, title: str) -> str:
    return os.path.join(output_dir, owner, category.value, title)


def build_jobs(
    module: Module, owner: str, output_dir: str, eslintrc: str = "", taken: set[str] | None = None
) -> list[AnalysisJob]:
    """Expand a module into its body job and, when it has tests, a tests job.

    Args:
        module: Discovered module
        owner: Owner label for the module
        output_dir: Root output directory
        eslintrc: Lint configuration forwarded to the analyzer
        taken: Output directories already claimed by earlier modules in the
            run; updated in place. A module whose title collides gets the
            sanitized module directory appended to its title.

    Returns:
        One or two jobs
    """
    tests_category = ModuleCategory.TESTS

    def _dirs(base_title: str) -> list[str]:
        dirs = [_job_output_dir(output_dir, owner, module.category, base_title)]
        if module.has_tests:
            dirs.append(_job_output_dir(output_dir, owner, tests_category, f"{base_title}{TESTS_TITLE_SUFFIX}"))
        return dirs

    title = module.display_name
    if taken is not None:
        if any(d in taken for d in _dirs(title)):
            title = f"{title}-{_UNSAFE_TITLE_CHARS_RE.sub('_', module.directory)}"
        taken.update(_dirs(title))

    body = AnalysisJob(
        source_directory=module.directory,
        output_directory=_job_output_dir(output_dir, owner, module.category, title),
        title=title,
        exclusion_pattern=BODY_EXCLUDE_PATTERN,
        owner=owner,
        category=module.category,
        module_key=module.directory,
        eslintrc=eslintrc,
    )
    jobs = [body]

    if module.has_tests:
        tests_title = f"{title}{TESTS_TITLE_SUFFIX}"
        jobs.append(
            AnalysisJob(
                source_directory=module.directory,
                output_directory=_job_output_dir(output_dir, owner, tests_category, tests_title),
                title=tests_title,
                exclusion_pattern=TESTS_EXCLUDE_PATTERN,
                owner=owner,
                category=tests_category,
                module_key=module.directory,
                eslintrc=eslintrc,
            )
        )
    return jobs


def resolve_worker_count(workers: int | None) -> int:
    """Validate an explicit worker count, or auto-detect when None/0."""
    if not workers:
        return auto_detect_workers()
    if workers < 1:
        raise ConfigurationError("--workers must be at least 1", field="workers")
    if workers > MAX_WORKERS:
        raise ConfigurationError(f"--workers cannot exceed {MAX_WORKERS}", field="workers")
    return workers


class JobScheduler:
    """
    Dispatch analysis jobs onto a bounded worker pool.

    At most ``workers`` jobs run at once; further submissions queue without
    blocking. Completion order is arbitrary.

    Args:
        analyzer: Analyzer invoked by each job
        tree: Aggregation tree receiving each job's leaf
        workers: Pool size (None or 0 = 75% of CPUs)
        logger: Logger instance
        quiet: Disable the progress bar
        run_id: Correlation ID prefixed to log lines
    """

    def __init__(
        self,
        analyzer: Analyzer,
        tree: AggregationTree,
        workers: int | None = None,
        logger: logging.Logger | None = None,
        quiet: bool = False,
        run_id: str = "-",
    ):
        self.analyzer = analyzer
        self.tree = tree
        self.workers = resolve_worker_count(workers)
        self.logger = logger or logging.getLogger(__name__)
        self.quiet = quiet
        self.run_id = run_id
        self._executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="plato-job")
        self._futures: dict[Future[JobResult], AnalysisJob] = {}
        self._output_dirs: set[str] = set()
        self._accepting = True
        self._lock = threading.Lock()

    def __enter__(self) -> JobScheduler:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(cancel_pending=exc_type is not None and issubclass(exc_type, KeyboardInterrupt))

    @property
    def submitted(self) -> int:
        with self._lock:
            return len(self._futures)

    @property
    def accepting(self) -> bool:
        with self._lock:
            return self._accepting

    def submit(self, job: AnalysisJob) -> Future[JobResult]:
        """Queue a job on the pool.

        Raises:
            SchedulerClosedError: If the scheduler stopped accepting work
        """
        with self._lock:
            if not self._accepting:
                raise SchedulerClosedError("Scheduler is no longer accepting jobs", details=job.title)
            future = self._executor.submit(run_analysis_job, job, self.analyzer, self.tree, self.logger)
            self._futures[future] = job
        self.logger.debug(f"[{self.run_id}] Queued {job.title} ({job.category.value})")
        return future

    def schedule_module(self, module: Module, owner: str, output_dir: str, eslintrc: str = "") -> list[Future[JobResult]]:
        """Create the owner's subtree if needed, then submit the module's jobs."""
        self.tree.ensure_owner(owner)
        jobs = build_jobs(module, owner, output_dir, eslintrc, taken=self._output_dirs)
        return [self.submit(job) for job in jobs]

    def stop_submitting(self) -> None:
        """Reject new jobs; already queued jobs still run."""
        with self._lock:
            self._accepting = False

    def abort(self) -> list[JobResult]:
        """Stop accepting work, cancel queued jobs and wait only for running ones.

        Cancelled jobs are recorded as failed leaves.

        Returns:
            One JobResult per submitted job
        """
        self.stop_submitting()
        with self._lock:
            futures = list(self._futures)
        cancelled = sum(1 for future in futures if future.cancel())
        self.logger.warning(f"[{self.run_id}] Aborting: cancelled {cancelled} queued job(s), waiting for in-flight jobs")
        return self.await_all()

    def await_all(self) -> list[JobResult]:
        """Block until every submitted job has succeeded or failed.

        Returns:
            One JobResult per submitted job, in completion order
        """
        with self._lock:
            futures = dict(self._futures)

        results: list[JobResult] = []
        with tqdm(
            total=len(futures),
            desc="Analyzing modules",
            unit="job",
            bar_format=TQDM_BAR_FORMAT,
            disable=self.quiet,
        ) as pbar:
            try:
                for future in as_completed(futures):
                    job = futures[future]
                    result = self._collect(future, job)
                    results.append(result)
                    pbar.set_postfix_str(f"{'✓' if result.success else '✗'} {job.title[:20]}", refresh=False)
                    pbar.update(1)
            except KeyboardInterrupt:
                self.logger.warning(f"[{self.run_id}] Interrupted - cancelling remaining jobs...")
                for future in futures:
                    future.cancel()
                raise
        return results

    def _collect(self, future: Future[JobResult], job: AnalysisJob) -> JobResult:
        if future.cancelled():
            self.tree.record_failure(job.owner, job.category, job.module_key, "cancelled", title=job.title)
            return JobResult(job=job, success=False, duration=0, error_message="cancelled")

        error = future.exception()
        if error is not None:
            # run_analysis_job recovers analyzer errors; this only happens if the merge itself failed
            self.logger.error(f"[{self.run_id}] ✗ {job.title}: EXCEPTION - {error!s}")
            return JobResult(job=job, success=False, duration=0, error_message=str(error))
        return future.result()

    def shutdown(self, cancel_pending: bool = False) -> None:
        """Stop accepting work and wait for the pool to drain."""
        self.stop_submitting()
        self._executor.shutdown(wait=True, cancel_futures=cancel_pending)
