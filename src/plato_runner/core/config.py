"""Configuration dataclasses for Plato Runner.

These dataclasses centralize all configuration options for type safety
and easy testing. They can be created from command-line arguments or
used directly in code.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, field


@dataclass
class LogConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level string (default: "INFO")
        format: Log output format, "text" or "json" (default: "text")
    """

    level: str = "INFO"
    format: str = "text"


@dataclass
class WorkerConfig:
    """Configuration for the analysis worker pool.

    Attributes:
        workers: Pool size; 0 means auto-detect (75% of CPUs)
    """

    workers: int = 0


@dataclass
class RunConfig:
    """Master configuration for a batch analysis run.

    Attributes:
        globs: Glob patterns selecting the source directories to scan
        output_dir: Root directory for every rendered report
        eslintrc: Lint configuration forwarded unmodified to the analyzer
        owners_script: Optional executable that maps a module path to an owner
        plato_bin: Analyzer executable
        assets_dir: Optional static asset bundle copied to <output>/assets
        log: Logging configuration
        workers: Worker configuration
        quiet: Suppress progress bars and non-error console output
    """

    globs: list[str] = field(default_factory=list)
    output_dir: str = "."
    eslintrc: str = ""
    owners_script: str | None = None
    plato_bin: str = "plato"
    assets_dir: str | None = None
    log: LogConfig = field(default_factory=LogConfig)
    workers: WorkerConfig = field(default_factory=WorkerConfig)
    quiet: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> RunConfig:
        """Create configuration from parsed command-line arguments."""
        return cls(
            globs=split_globs(getattr(args, "globs", "")),
            output_dir=getattr(args, "output", "."),
            eslintrc=getattr(args, "eslintrc", ""),
            owners_script=getattr(args, "owners", None) or None,
            plato_bin=getattr(args, "plato_bin", None) or os.environ.get("PLATO_BIN", "plato"),
            assets_dir=getattr(args, "assets", None),
            log=LogConfig(
                level=getattr(args, "log_level", None) or os.environ.get("LOG_LEVEL", "INFO"),
                format=getattr(args, "log_format", "text"),
            ),
            workers=WorkerConfig(workers=getattr(args, "workers", 0)),
            quiet=getattr(args, "quiet", False),
        )


def split_globs(value: str | None) -> list[str]:
    """Split a comma separated glob list, dropping blanks."""
    if not value:
        return []
    return [glob.strip() for glob in value.split(",") if glob.strip()]
