"""Tests for job expansion and the JobScheduler"""

import os
from unittest.mock import patch

import pytest
from conftest import FakeAnalyzer

from plato_runner.aggregation.tree import AggregationTree
from plato_runner.core.constants import BODY_EXCLUDE_PATTERN, MAX_WORKERS, TESTS_EXCLUDE_PATTERN
from plato_runner.core.exceptions import ConfigurationError, SchedulerClosedError
from plato_runner.pipeline.models import AnalysisJob, Module, ModuleCategory
from plato_runner.pipeline.scheduler import JobScheduler, build_jobs, resolve_worker_count
from plato_runner.pipeline.workers import run_analysis_job


def _module(name, category=ModuleCategory.ADDON, has_tests=False):
    return Module(
        manifest_path=f"lib/{name}/package.json",
        directory=f"lib/{name}",
        display_name=name,
        category=category,
        has_tests=has_tests,
    )


def _job(title, owner="Team1", category=ModuleCategory.ADDON):
    return AnalysisJob(
        source_directory=f"lib/{title}",
        output_directory=f"out/{title}",
        title=title,
        exclusion_pattern=BODY_EXCLUDE_PATTERN,
        owner=owner,
        category=category,
        module_key=f"lib/{title}",
    )


class TestBuildJobs:
    """Tests for expanding a module into jobs"""

    def test_module_without_tests_has_one_job(self):
        jobs = build_jobs(_module("a"), "Team1", "out", eslintrc=".eslintrc.js")

        assert len(jobs) == 1
        body = jobs[0]
        assert body.category is ModuleCategory.ADDON
        assert body.title == "a"
        assert body.exclusion_pattern == BODY_EXCLUDE_PATTERN
        assert body.output_directory == os.path.join("out", "Team1", "addon", "a")
        assert body.eslintrc == ".eslintrc.js"
        assert not body.is_tests

    def test_module_with_tests_has_tests_job(self):
        jobs = build_jobs(_module("a", has_tests=True), "Team1", "out")

        assert len(jobs) == 2
        tests = jobs[1]
        assert tests.is_tests
        assert tests.title == "a-tests"
        assert tests.exclusion_pattern == TESTS_EXCLUDE_PATTERN
        assert tests.output_directory == os.path.join("out", "Team1", "tests", "a-tests")
        assert tests.module_key == jobs[0].module_key == "lib/a"

    def test_engine_body_job_uses_engine_category(self):
        jobs = build_jobs(_module("b", category=ModuleCategory.ENGINE), "Team1", "out")

        assert jobs[0].category is ModuleCategory.ENGINE
        assert jobs[0].output_directory == os.path.join("out", "Team1", "engine", "b")

    def test_repeated_title_gets_directory_suffix(self):
        taken = set()
        first = build_jobs(_module("dup", has_tests=True), "Team1", "out", taken=taken)
        other = Module(
            manifest_path="engines/dup/package.json",
            directory="engines/dup",
            display_name="dup",
            category=ModuleCategory.ADDON,
            has_tests=True,
        )
        second = build_jobs(other, "Team1", "out", taken=taken)

        assert [job.title for job in first] == ["dup", "dup-tests"]
        assert [job.title for job in second] == ["dup-engines_dup", "dup-engines_dup-tests"]
        output_dirs = [job.output_directory for job in first + second]
        assert len(set(output_dirs)) == 4
        assert taken == set(output_dirs)

    def test_same_title_for_other_owner_is_not_renamed(self):
        taken = set()
        build_jobs(_module("dup"), "Team1", "out", taken=taken)
        jobs = build_jobs(_module("dup"), "Team2", "out", taken=taken)

        assert jobs[0].title == "dup"

    def test_exclusion_patterns(self):
        assert "tests" in BODY_EXCLUDE_PATTERN.split("|")
        assert {"addon", "index.js"} <= set(TESTS_EXCLUDE_PATTERN.split("|"))


class TestResolveWorkerCount:
    """Tests for worker count validation"""

    @pytest.mark.parametrize("cpus,expected", [(1, 1), (4, 3), (8, 6), (10, 8)])
    def test_auto_detect_uses_three_quarters_of_cpus(self, cpus, expected):
        with patch("plato_runner.core.constants.os.cpu_count", return_value=cpus):
            assert resolve_worker_count(None) == expected
            assert resolve_worker_count(0) == expected

    def test_explicit_value(self):
        assert resolve_worker_count(5) == 5

    def test_negative_rejected(self):
        with pytest.raises(ConfigurationError):
            resolve_worker_count(-1)

    def test_above_max_rejected(self):
        with pytest.raises(ConfigurationError, match=str(MAX_WORKERS)):
            resolve_worker_count(MAX_WORKERS + 1)


class TestRunAnalysisJob:
    """Tests for the pool worker function"""

    def test_success_writes_leaf(self):
        tree = AggregationTree()
        result = run_analysis_job(_job("a"), FakeAnalyzer(), tree)

        assert result.success
        assert result.record_count == 1
        leaf = tree.get_leaf("Team1", ModuleCategory.ADDON, "lib/a")
        assert leaf is not None and not leaf.failed

    def test_failure_writes_failed_leaf(self):
        tree = AggregationTree()
        result = run_analysis_job(_job("a"), FakeAnalyzer(failures={"a"}), tree)

        assert not result.success
        assert "exit code 2" in result.error_message
        assert tree.get_leaf("Team1", ModuleCategory.ADDON, "lib/a").failed

    def test_unexpected_exception_is_recovered(self):
        class Broken(FakeAnalyzer):
            def inspect(self, job):
                raise KeyError("report")

        tree = AggregationTree()
        result = run_analysis_job(_job("a"), Broken(), tree)

        assert not result.success
        assert tree.failed_leaves()


class TestJobScheduler:
    """Tests for JobScheduler dispatch and the join barrier"""

    def test_await_all_collects_out_of_order_completions(self):
        delays = {"slow": 0.2, "medium": 0.1, "fast": 0.0}
        analyzer = FakeAnalyzer(delays=delays)
        tree = AggregationTree()

        with JobScheduler(analyzer, tree, workers=3, quiet=True) as scheduler:
            for title in delays:
                scheduler.submit(_job(title))
            results = scheduler.await_all()

        assert sorted(r.job.title for r in results) == ["fast", "medium", "slow"]
        assert all(r.success for r in results)
        # Every leaf is present as soon as await_all returns
        assert len(list(tree.iter_leaves())) == 3

    def test_pool_bounds_concurrency(self):
        analyzer = FakeAnalyzer(delays={f"m{i}": 0.05 for i in range(8)})

        with JobScheduler(analyzer, AggregationTree(), workers=2, quiet=True) as scheduler:
            for i in range(8):
                scheduler.submit(_job(f"m{i}"))
            scheduler.await_all()

        assert analyzer.max_active <= 2
        assert len(analyzer.calls) == 8

    def test_failure_does_not_affect_siblings(self):
        analyzer = FakeAnalyzer(failures={"bad"})
        tree = AggregationTree()

        with JobScheduler(analyzer, tree, workers=2, quiet=True) as scheduler:
            for title in ("good1", "bad", "good2"):
                scheduler.submit(_job(title))
            results = scheduler.await_all()

        failed = [r for r in results if not r.success]
        assert [r.job.title for r in failed] == ["bad"]
        assert len(tree.failed_leaves()) == 1
        assert len(tree.records()) == 2

    def test_schedule_module_creates_owner_and_jobs(self):
        tree = AggregationTree()

        with JobScheduler(FakeAnalyzer(), tree, workers=1, quiet=True) as scheduler:
            futures = scheduler.schedule_module(_module("a", has_tests=True), "Team1", "out")
            assert "Team1" in tree.owners
            scheduler.await_all()

        assert len(futures) == 2
        assert scheduler.submitted == 2
        assert tree.get_leaf("Team1", ModuleCategory.TESTS, "lib/a") is not None

    def test_submit_after_stop_raises(self):
        with JobScheduler(FakeAnalyzer(), AggregationTree(), workers=1, quiet=True) as scheduler:
            scheduler.stop_submitting()
            assert not scheduler.accepting
            with pytest.raises(SchedulerClosedError):
                scheduler.submit(_job("a"))

    def test_stop_submitting_still_drains_queued_jobs(self):
        analyzer = FakeAnalyzer(delays={"a": 0.05, "b": 0.05})

        with JobScheduler(analyzer, AggregationTree(), workers=1, quiet=True) as scheduler:
            scheduler.submit(_job("a"))
            scheduler.submit(_job("b"))
            scheduler.stop_submitting()
            results = scheduler.await_all()

        assert len(results) == 2
        assert all(r.success for r in results)

    def test_await_all_with_no_jobs(self):
        with JobScheduler(FakeAnalyzer(), AggregationTree(), workers=1, quiet=True) as scheduler:
            assert scheduler.await_all() == []

    def test_cancelled_job_becomes_failed_leaf(self):
        tree = AggregationTree()
        scheduler = JobScheduler(FakeAnalyzer(delays={"a": 0.1}), tree, workers=1, quiet=True)
        scheduler.submit(_job("a"))
        queued = scheduler.submit(_job("b"))
        assert queued.cancel()

        results = {r.job.title: r for r in scheduler.await_all()}
        scheduler.shutdown()

        assert results["a"].success
        assert results["b"].error_message == "cancelled"
        assert tree.get_leaf("Team1", ModuleCategory.ADDON, "lib/b").failed

    def test_schedule_module_separates_duplicate_titles(self):
        tree = AggregationTree()
        one = Module("lib/one/package.json", "lib/one", "dup", ModuleCategory.ADDON)
        two = Module("lib/two/package.json", "lib/two", "dup", ModuleCategory.ADDON)

        with JobScheduler(FakeAnalyzer(), tree, workers=2, quiet=True) as scheduler:
            scheduler.schedule_module(one, "Team1", "out")
            scheduler.schedule_module(two, "Team1", "out")
            results = scheduler.await_all()

        assert len({r.job.output_directory for r in results}) == 2

    def test_abort_cancels_queued_jobs_only(self):
        analyzer = FakeAnalyzer(delays={"a": 0.2, "b": 0.2, "c": 0.2})
        tree = AggregationTree()

        with JobScheduler(analyzer, tree, workers=1, quiet=True) as scheduler:
            for title in ("a", "b", "c"):
                scheduler.submit(_job(title))
            assert analyzer.started.wait(5)
            results = {r.job.title: r for r in scheduler.abort()}

        assert [job.title for job in analyzer.calls] == ["a"]
        assert results["a"].success
        assert results["b"].error_message == results["c"].error_message == "cancelled"
        assert not scheduler.accepting
        assert tree.get_leaf("Team1", ModuleCategory.ADDON, "lib/c").failed
