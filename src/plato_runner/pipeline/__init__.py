"""Pipeline module - job construction, scheduling and worker orchestration."""

from plato_runner.pipeline.models import AnalysisJob, JobResult, Module, ModuleCategory, RunResult
from plato_runner.pipeline.scheduler import JobScheduler, build_jobs, resolve_worker_count
from plato_runner.pipeline.workers import run_analysis_job

__all__ = [
    "AnalysisJob",
    "JobResult",
    "JobScheduler",
    "Module",
    "ModuleCategory",
    "RunResult",
    "build_jobs",
    "resolve_worker_count",
    "run_analysis_job",
]
