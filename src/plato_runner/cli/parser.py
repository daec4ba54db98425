"""Command-line argument parsing."""

from __future__ import annotations

import argparse

from plato_runner.core.version import __version__


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        prog="plato-runner",
        description="Plato Runner - Batch plato maintainability reports across every addon in a codebase",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyze every addon under lib/ and engines/
  plato-runner --globs "lib/**,engines/**" --output ./reports --eslintrc ./.eslintrc.js

  # Attribute modules to teams with an external script
  plato-runner --globs "lib/**" --output ./reports --eslintrc ./.eslintrc.js --owners ./bin/owner-of

  # Fixed worker count and JSON structured logging
  plato-runner --globs "lib/**" --output ./reports --eslintrc ./.eslintrc.js --workers 4 --log-format json

Exit codes:
  0  every module analyzed successfully
  1  empty glob expansion, owner classification error, or failed module analysis
  2  invalid command-line usage
""",
    )

    parser.add_argument(
        "--globs",
        required=True,
        help="Comma separated list of globs selecting the directories to scan",
    )
    parser.add_argument(
        "--output",
        required=True,
        help="Directory that receives all generated reports",
    )
    parser.add_argument(
        "--eslintrc",
        required=True,
        help="Path to the eslintrc file, forwarded to plato",
    )
    parser.add_argument(
        "--owners",
        default=None,
        help="Path to an executable that prints the owner of the module path it is given",
    )
    parser.add_argument(
        "--workers",
        default="auto",
        help="Number of parallel analysis jobs: 'auto' (75%% of CPUs) or an integer (default: auto)",
    )
    parser.add_argument(
        "--plato-bin",
        default=None,
        help="plato executable (default: $PLATO_BIN or 'plato' on PATH)",
    )
    parser.add_argument(
        "--assets",
        default=None,
        help="Static asset bundle copied to <output>/assets (default: the plato installation's assets)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        default=None,
        help="Logging level (default: $LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help="Log output format (default: text)",
    )
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress progress bars and the console summary")
    parser.add_argument("--no-color", action="store_true", help="Disable colored console output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser.parse_args(argv)
