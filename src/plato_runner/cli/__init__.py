"""Command-line interface."""

from plato_runner.cli.main import main
from plato_runner.cli.parser import parse_arguments

__all__ = ["main", "parse_arguments"]
