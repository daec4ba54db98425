"""
Batch run orchestration.

Discover modules -> classify owners (sequentially) -> schedule jobs ->
join barrier -> summary pass -> report emission.
"""

from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path

from plato_runner.aggregation.tree import AggregationTree
from plato_runner.analysis.analyzer import Analyzer
from plato_runner.analysis.plato import PlatoAnalyzer
from plato_runner.core.colors import ConsoleColors
from plato_runner.core.config import RunConfig
from plato_runner.core.constants import BANNER_WIDTH
from plato_runner.core.exceptions import ConfigurationError, OutputError, OwnerClassificationError
from plato_runner.discovery.modules import discover_modules
from plato_runner.discovery.owners import OwnerClassifier, build_classifier
from plato_runner.output.emitter import FileReportEmitter, ReportEmitter, copy_assets, emit_reports
from plato_runner.pipeline.models import ModuleCategory, RunResult
from plato_runner.pipeline.scheduler import JobScheduler, resolve_worker_count


def run_plato_batch(
    config: RunConfig,
    analyzer: Analyzer | None = None,
    classifier: OwnerClassifier | None = None,
    emitter: ReportEmitter | None = None,
    logger: logging.Logger | None = None,
    tree: AggregationTree | None = None,
) -> RunResult:
    """Analyze every addon module matched by ``config.globs``.

    Args:
        config: Run configuration
        analyzer: Analyzer used by each job (default: PlatoAnalyzer)
        classifier: Owner classifier (default: from config.owners_script)
        emitter: Report emitter (default: FileReportEmitter)
        logger: Logger instance
        tree: Aggregation tree to fill (default: a new one)

    Returns:
        RunResult with per-job outcomes and counters

    Raises:
        ConfigurationError: If required options are missing or the globs match nothing
        OwnerClassificationError: If ownership cannot be determined for a module
    """
    logger = logger or logging.getLogger(__name__)
    if not config.globs:
        raise ConfigurationError("At least one glob pattern is required", field="globs")
    if not config.output_dir:
        raise ConfigurationError("An output directory is required", field="output")

    workers = resolve_worker_count(config.workers.workers)

    analyzer = analyzer or PlatoAnalyzer(config.plato_bin)
    classifier = classifier or build_classifier(config.owners_script)
    emitter = emitter or FileReportEmitter(logger)
    tree = tree if tree is not None else AggregationTree()

    run_id = str(uuid.uuid4())[:8]
    result = RunResult(run_id=run_id)
    start_time = time.time()

    logger.info("=" * BANNER_WIDTH)
    logger.info(f"[{run_id}] PLATO BATCH RUN START")
    logger.info("=" * BANNER_WIDTH)
    logger.info(f"[{run_id}] Globs: {', '.join(config.globs)}")
    logger.info(f"[{run_id}] Output directory: {config.output_dir}")
    logger.info(f"[{run_id}] Owners script: {config.owners_script or '(none, using ALL)'}")

    modules = discover_modules(config.globs)
    logger.info(f"[{run_id}] Addon modules to analyze: {len(modules)}")

    output_dir = Path(config.output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputError(f"Cannot create output directory '{output_dir}'", output_path=str(output_dir), details=str(e)) from e

    assets_source = config.assets_dir
    if assets_source is None and isinstance(analyzer, PlatoAnalyzer):
        assets_source = analyzer.assets_dir()
    copy_assets(assets_source, output_dir, logger)

    with JobScheduler(
        analyzer, tree, workers=workers, logger=logger, quiet=config.quiet, run_id=run_id
    ) as scheduler:
        logger.info(f"[{run_id}] Parallel workers: {scheduler.workers}")
        try:
            for module in modules:
                # Sequential: a new owner's subtree exists before any of its jobs can complete
                owner = classifier.classify(module.manifest_path)
                jobs = scheduler.schedule_module(module, owner, config.output_dir, config.eslintrc)
                result.processed_modules += 1
                if module.category is ModuleCategory.ENGINE:
                    result.engines += 1
                else:
                    result.addons += 1
                result.tests_jobs += len(jobs) - 1
                logger.info(f"[{run_id}] Scheduled {module.display_name} for {owner} ({len(jobs)} job(s))")
        except OwnerClassificationError:
            logger.error(f"[{run_id}] Owner classification failed; aborting the run")
            scheduler.abort()
            raise

        result.job_results = scheduler.await_all()

    tree.compute_summaries(analyzer.overview)
    result.emission_errors = emit_reports(tree, emitter, output_dir, logger)
    result.duration = time.time() - start_time

    print_summary(result, logger, quiet=config.quiet)
    return result


def print_summary(result: RunResult, logger: logging.Logger, quiet: bool = False) -> None:
    """Log the run summary and print a color-coded copy to the console."""
    failed = result.failed_jobs
    lines = [
        f"Modules processed: {result.processed_modules}",
        f"Addons: {result.addons}",
        f"Engines: {result.engines}",
        f"Tests jobs: {result.tests_jobs}",
        f"Jobs: {len(result.job_results)}",
        f"Failed modules: {result.failed_modules}",
        f"Emission errors: {result.emission_errors}",
        f"Total duration: {result.duration:.1f}s",
    ]

    logger.info("")
    logger.info("=" * BANNER_WIDTH)
    logger.info(f"[{result.run_id}] PLATO BATCH RUN SUMMARY")
    logger.info("=" * BANNER_WIDTH)
    for line in lines:
        logger.info(f"[{result.run_id}] {line}")
    for job_result in failed:
        logger.info(f"  ✗ {job_result.job.title:30s}  {job_result.error_message}")
    logger.info("=" * BANNER_WIDTH)

    if quiet:
        return

    print()
    print("=" * BANNER_WIDTH)
    print(ConsoleColors.bold("PLATO BATCH RUN SUMMARY"))
    print("=" * BANNER_WIDTH)
    for line in lines:
        print(line)
    if result.emission_errors:
        print(ConsoleColors.warning(f"{result.emission_errors} report artifact(s) could not be written; see the log"))
    if failed:
        print()
        print(ConsoleColors.error("Failed Jobs:"))
        for job_result in failed:
            print(ConsoleColors.error("  ✗") + f" {job_result.job.title:30s}  {job_result.error_message}")
    print()
    print(ConsoleColors.status(result.success, "SUCCESS" if result.success else f"FAILED ({result.failed_modules} module(s))"))
    print("=" * BANNER_WIDTH)
