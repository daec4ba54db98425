"""Tests for command-line parsing and the main entry point"""

import logging
from unittest.mock import patch

import pytest

from plato_runner.cli.main import _parse_workers, main
from plato_runner.cli.parser import parse_arguments
from plato_runner.core.exceptions import ConfigurationError, OwnerClassificationError, PlatoRunnerError
from plato_runner.pipeline.models import AnalysisJob, JobResult, ModuleCategory, RunResult

REQUIRED = ["--globs", "lib/**,engines/**", "--output", "reports", "--eslintrc", ".eslintrc.js"]


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("PLATO_BIN", raising=False)


@pytest.fixture
def quiet_logging():
    with patch("plato_runner.cli.main.setup_logging", return_value=logging.getLogger("plato_runner.test")) as mock:
        yield mock


class TestParseArguments:
    """Tests for parse_arguments"""

    def test_required_arguments(self):
        args = parse_arguments(REQUIRED)

        assert args.globs == "lib/**,engines/**"
        assert args.output == "reports"
        assert args.eslintrc == ".eslintrc.js"
        assert args.owners is None
        assert args.workers == "auto"
        assert args.log_format == "text"
        assert not args.quiet

    @pytest.mark.parametrize("missing", ["--globs", "--output", "--eslintrc"])
    def test_missing_required_exits(self, missing):
        argv = list(REQUIRED)
        index = argv.index(missing)
        del argv[index : index + 2]

        with pytest.raises(SystemExit) as exc_info:
            parse_arguments(argv)
        assert exc_info.value.code == 2

    def test_optional_arguments(self):
        args = parse_arguments(
            [*REQUIRED, "--owners", "./owners", "--workers", "4", "--log-level", "debug", "--log-format", "json", "-q"]
        )

        assert args.owners == "./owners"
        assert args.workers == "4"
        assert args.log_level == "DEBUG"
        assert args.log_format == "json"
        assert args.quiet


class TestParseWorkers:
    """Tests for --workers conversion"""

    def test_auto(self):
        assert _parse_workers("auto") == 0
        assert _parse_workers("AUTO") == 0

    def test_integer(self):
        assert _parse_workers("6") == 6

    @pytest.mark.parametrize("value", ["zero", "0", "-2", "1.5"])
    def test_invalid(self, value):
        with pytest.raises(PlatoRunnerError):
            _parse_workers(value)


class TestMain:
    """Tests for main() exit codes"""

    def test_success_returns_zero(self, quiet_logging):
        with patch("plato_runner.cli.main.run_plato_batch", return_value=RunResult(run_id="abc")) as mock_run:
            assert main(REQUIRED) == 0

        config = mock_run.call_args[0][0]
        assert config.globs == ["lib/**", "engines/**"]
        assert config.output_dir == "reports"
        assert config.workers.workers == 0

    def test_failed_modules_return_one(self, quiet_logging):
        job = AnalysisJob("lib/a", "out/ALL/addon/a", "a", "tests", "ALL", ModuleCategory.ADDON, "lib/a")
        result = RunResult(run_id="abc", job_results=[JobResult(job=job, success=False, duration=0.1)])
        with patch("plato_runner.cli.main.run_plato_batch", return_value=result):
            assert main(REQUIRED) == 1

    def test_configuration_error_returns_one(self, quiet_logging, capsys):
        error = ConfigurationError("No files found for globs", field="globs", details="lib/**")
        with patch("plato_runner.cli.main.run_plato_batch", side_effect=error):
            assert main(REQUIRED) == 1

        assert "ERROR: No files found for globs" in capsys.readouterr().err

    def test_classifier_error_returns_one(self, quiet_logging):
        error = OwnerClassificationError("lib/a/package.json", output="Error: unknown")
        with patch("plato_runner.cli.main.run_plato_batch", side_effect=error):
            assert main(REQUIRED) == 1

    def test_keyboard_interrupt_returns_130(self, quiet_logging):
        with patch("plato_runner.cli.main.run_plato_batch", side_effect=KeyboardInterrupt):
            assert main(REQUIRED) == 130

    def test_invalid_workers_returns_one(self, quiet_logging, capsys):
        with patch("plato_runner.cli.main.run_plato_batch") as mock_run:
            assert main([*REQUIRED, "--workers", "many"]) == 1

        mock_run.assert_not_called()
        assert "--workers" in capsys.readouterr().err

    def test_env_provides_plato_bin(self, quiet_logging, monkeypatch):
        monkeypatch.setenv("PLATO_BIN", "/opt/plato/bin/plato")
        with patch("plato_runner.cli.main.run_plato_batch", return_value=RunResult(run_id="abc")) as mock_run:
            main(REQUIRED)

        assert mock_run.call_args[0][0].plato_bin == "/opt/plato/bin/plato"

    def test_log_options_forwarded(self, quiet_logging):
        with patch("plato_runner.cli.main.run_plato_batch", return_value=RunResult(run_id="abc")):
            main([*REQUIRED, "--log-level", "WARNING", "--log-format", "json"])

        quiet_logging.assert_called_once_with(log_level="WARNING", log_format="json")
