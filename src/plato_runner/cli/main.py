"""CLI entrypoint."""

from __future__ import annotations

import sys

from dotenv import find_dotenv, load_dotenv

from plato_runner.cli.parser import parse_arguments
from plato_runner.core.colors import ConsoleColors
from plato_runner.core.config import RunConfig
from plato_runner.core.constants import AUTO_WORKERS_SENTINEL, EXIT_FAILURE, EXIT_INTERRUPTED, EXIT_SUCCESS
from plato_runner.core.exceptions import PlatoRunnerError
from plato_runner.core.logging import flush_logging_handlers, setup_logging
from plato_runner.runner import run_plato_batch


def _print_error(msg: str) -> None:
    print(ConsoleColors.error(f"ERROR: {msg}"), file=sys.stderr)


def _parse_workers(value: str) -> int:
    if value.lower() == "auto":
        return AUTO_WORKERS_SENTINEL
    try:
        workers = int(value)
    except ValueError:
        raise PlatoRunnerError(f"--workers must be 'auto' or an integer, got '{value}'") from None
    if workers < 1:
        raise PlatoRunnerError("--workers must be at least 1")
    return workers


def main(argv: list[str] | None = None) -> int:
    """Main entry point; returns the process exit code."""
    # .env may set LOG_LEVEL and PLATO_BIN
    dotenv_loaded = load_dotenv(find_dotenv(usecwd=True))

    args = parse_arguments(argv)
    ConsoleColors.configure(no_color=args.no_color)

    try:
        args.workers = _parse_workers(args.workers)
    except PlatoRunnerError as e:
        _print_error(str(e))
        return EXIT_FAILURE

    config = RunConfig.from_args(args)
    logger = setup_logging(log_level=config.log.level, log_format=config.log.format)
    logger.debug(".env file loaded" if dotenv_loaded else ".env file not found")

    try:
        result = run_plato_batch(config, logger=logger)
    except KeyboardInterrupt:
        logger.warning("Run interrupted by user")
        return EXIT_INTERRUPTED
    except PlatoRunnerError as e:
        logger.error(str(e))
        _print_error(str(e))
        return EXIT_FAILURE
    finally:
        flush_logging_handlers(logger)

    if not result.success:
        logger.error(f"{result.failed_modules} module(s) failed analysis")
        return EXIT_FAILURE
    return EXIT_SUCCESS


def main_entry() -> None:
    """Console-script wrapper around main()."""
    sys.exit(main())
