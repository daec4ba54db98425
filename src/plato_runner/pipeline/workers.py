"""Worker function executed on the analysis pool."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from plato_runner.core.logging import with_log_context
from plato_runner.pipeline.models import AnalysisJob, JobResult

if TYPE_CHECKING:
    from plato_runner.aggregation.tree import AggregationTree
    from plato_runner.analysis.analyzer import Analyzer


def run_analysis_job(
    job: AnalysisJob, analyzer: Analyzer, tree: AggregationTree, logger: logging.Logger | None = None
) -> JobResult:
    """Run one analyzer invocation and merge its outcome into the tree.

    The merge happens before this function returns, so a finished future
    always has its leaf written. Analyzer failures become failed leaves and
    never propagate to sibling jobs.

    Args:
        job: The job to run
        analyzer: Analyzer used for the inspection
        tree: Aggregation tree receiving the leaf
        logger: Logger for progress output

    Returns:
        JobResult describing the outcome
    """
    log = with_log_context(logger or logging.getLogger(__name__), owner=job.owner, module=job.module_key)
    start_time = time.time()
    log.info(f"Inspecting {job.title} ({job.category.value}) in {job.source_directory}")

    try:
        records = analyzer.inspect(job)
    except Exception as e:
        error_msg = str(e) or type(e).__name__
        tree.record_failure(job.owner, job.category, job.module_key, error_msg, title=job.title)
        log.error(f"✗ {job.title}: FAILED - {error_msg}")
        return JobResult(job=job, success=False, duration=time.time() - start_time, error_message=error_msg)

    tree.record_leaf(job.owner, job.category, job.module_key, records, title=job.title)
    duration = time.time() - start_time
    log.info(f"✓ {job.title}: {len(records)} files ({duration:.1f}s)")
    return JobResult(job=job, success=True, duration=duration, record_count=len(records))
