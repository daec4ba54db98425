"""Pytest configuration and fixtures for Plato Runner tests"""
import json
import logging
import threading
import time
from pathlib import Path
from unittest.mock import Mock

import pytest

from plato_runner.analysis.analyzer import summarize
from plato_runner.analysis.models import FileRecord
from plato_runner.core.colors import ConsoleColors
from plato_runner.core.exceptions import AnalysisError


class FakeAnalyzer:
    """In-memory analyzer keyed by job title.

    ``records`` maps a job title to the records returned for it, ``delays``
    to a sleep before returning, and ``failures`` holds titles that raise.
    """

    def __init__(self, records=None, delays=None, failures=()):
        self.records = records or {}
        self.delays = delays or {}
        self.failures = set(failures)
        self.calls = []
        self.active = 0
        self.max_active = 0
        self.started = threading.Event()
        self._lock = threading.Lock()

    def inspect(self, job):
        with self._lock:
            self.calls.append(job)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.started.set()
        try:
            time.sleep(self.delays.get(job.title, 0))
            if job.title in self.failures:
                raise AnalysisError("plato exited with an error", job_title=job.title, returncode=2)
            return list(self.records.get(job.title, [FileRecord(path=f"{job.title}/index.js", sloc=10)]))
        finally:
            with self._lock:
                self.active -= 1

    def overview(self, records):
        return summarize(records)


class FakeClassifier:
    """Owner lookup by manifest directory name; ``fail_on`` raises for that name."""

    def __init__(self, owners=None, default="ALL", fail_on=None):
        self.owners = owners or {}
        self.default = default
        self.fail_on = fail_on
        self.calls = []

    def classify(self, module_path):
        from plato_runner.core.exceptions import OwnerClassificationError

        name = Path(module_path).parent.name
        self.calls.append(name)
        if name == self.fail_on:
            raise OwnerClassificationError(module_path, output="Error: no owner found")
        return self.owners.get(name, self.default)


@pytest.fixture(autouse=True)
def no_console_colors(monkeypatch):
    """Keep console output free of ANSI codes"""
    monkeypatch.setattr(ConsoleColors, "_enabled", False)


@pytest.fixture
def mock_logger():
    """Create a mock logger"""
    return Mock(spec=logging.Logger)


@pytest.fixture
def make_module(tmp_path):
    """Factory creating a module directory with a package.json manifest"""

    def _make(relative_dir, name=None, keywords=("ember-addon",), tests=False, manifest=None):
        module_dir = tmp_path / relative_dir
        module_dir.mkdir(parents=True, exist_ok=True)
        data = manifest if manifest is not None else {"keywords": list(keywords)}
        if name is not None:
            data["name"] = name
        (module_dir / "package.json").write_text(json.dumps(data))
        (module_dir / "index.js").write_text("module.exports = {};\n")
        if tests:
            (module_dir / "tests").mkdir()
            (module_dir / "tests" / "test-helper.js").write_text("// helper\n")
        return module_dir

    return _make


@pytest.fixture
def fake_analyzer():
    return FakeAnalyzer()


@pytest.fixture
def sample_records():
    """Records for a small three-file module"""
    return [
        FileRecord(path="addon/a.js", sloc=10, maintainability=70.0, cyclomatic=2, lint_errors=1),
        FileRecord(path="addon/b.js", sloc=20, maintainability=80.0, cyclomatic=4, lint_errors=0),
        FileRecord(path="addon/c.js", sloc=31, maintainability=65.5, cyclomatic=1, lint_errors=2),
    ]
