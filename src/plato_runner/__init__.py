"""
Plato Runner - batch plato maintainability analysis for multi-module codebases

Discovers every addon module, attributes it to an owning team, analyzes the
modules in parallel, and rolls the results up per module type, per owner,
and globally.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from plato_runner.core.version import __version__

__all__ = ["__version__", "main", "run_plato_batch"]

if TYPE_CHECKING:
    from plato_runner.cli.main import main
    from plato_runner.runner import run_plato_batch


def __getattr__(name: str) -> Any:
    if name == "main":
        from plato_runner.cli.main import main

        return main
    if name == "run_plato_batch":
        from plato_runner.runner import run_plato_batch

        return run_plato_batch
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
