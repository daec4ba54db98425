"""Constants and default values for Plato Runner.

This module centralizes all magic numbers and default configurations
used throughout the application.
"""

import math
import os

# ==================== DISPLAY CONSTANTS ====================

# Width of banner separator lines (used across CLI output)
BANNER_WIDTH: int = 60

TQDM_BAR_FORMAT: str = "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]"

# ==================== DISCOVERY ====================

MANIFEST_FILENAME: str = "package.json"
TESTS_DIRNAME: str = "tests"

# Dependency/vendor/build directories never scanned for manifests
EXCLUDED_DIRS: frozenset[str] = frozenset({"bower_components", "build", "dist", "node_modules"})

# Manifest keywords that mark a module as analyzable and classify its category
ADDON_KEYWORD: str = "ember-addon"
ENGINE_KEYWORD: str = "ember-engine"

# ==================== OWNERSHIP ====================

DEFAULT_OWNER: str = "ALL"  # Used when no owner classifier is configured
UNKNOWN_OWNER: str = "UNKNOWN"  # Used when the classifier prints nothing
OWNER_ERROR_MARKER: str = "Error"  # Classifier output containing this aborts the run

# ==================== ANALYSIS EXCLUSIONS ====================

# Always excluded from analysis (app re-exports, styles, build output, sass cache)
BASE_EXCLUDE_PATTERN: str = r"app|styles|build|.eyeglass_cache"
BODY_EXCLUDE_PATTERN: str = rf"{BASE_EXCLUDE_PATTERN}|tests"
TESTS_EXCLUDE_PATTERN: str = rf"{BASE_EXCLUDE_PATTERN}|addon|index.js"
TESTS_TITLE_SUFFIX: str = "-tests"

# ==================== OUTPUT LAYOUT ====================

ASSETS_DIRNAME: str = "assets"
REPORT_DIRNAME: str = "report"
REPORT_FILENAME: str = "report.json"
MODULE_OVERVIEW_FILENAME: str = "overview.json"
OVERVIEW_CSV_FILENAME: str = "overview.csv"
INDEX_FILENAME: str = "index.html"

# ==================== WORKER LIMITS ====================

WORKER_CPU_FRACTION: float = 0.75  # Leave headroom for the coordinator and the filesystem
MAX_WORKERS: int = 256
AUTO_WORKERS_SENTINEL: int = 0  # Sentinel value to trigger auto-detection

# ==================== LOGGING DEFAULTS ====================

LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024  # 10MB max per log file
LOG_FILE_BACKUP_COUNT: int = 5  # Number of backup log files to keep

# ==================== EXIT CODES ====================

EXIT_SUCCESS: int = 0
EXIT_FAILURE: int = 1
EXIT_INTERRUPTED: int = 130


def auto_detect_workers(cpu_fraction: float = WORKER_CPU_FRACTION) -> int:
    """
    Size the analysis pool to a fraction of the available CPUs.

    Args:
        cpu_fraction: Share of CPU cores to occupy with analyzer jobs

    Returns:
        Recommended number of workers (1 to MAX_WORKERS)
    """
    # Get CPU count, default to 4 if detection fails
    try:
        cpu_count = os.cpu_count() or 4
    except Exception:
        cpu_count = 4

    workers = math.ceil(cpu_count * cpu_fraction)
    return max(1, min(workers, MAX_WORKERS))
