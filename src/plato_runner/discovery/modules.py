"""
Module discovery.

Expands user globs into a file list, reduces it to addon manifests, and
turns each manifest into an immutable ``Module``.
"""

from __future__ import annotations

import glob
import json
import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from plato_runner.core.constants import (
    ADDON_KEYWORD,
    ENGINE_KEYWORD,
    EXCLUDED_DIRS,
    MANIFEST_FILENAME,
    TESTS_DIRNAME,
)
from plato_runner.core.exceptions import ConfigurationError
from plato_runner.pipeline.models import Module, ModuleCategory

logger = logging.getLogger(__name__)

_UNSAFE_TITLE_CHARS_RE = re.compile(r"[^a-zA-Z0-9]")


def _is_excluded(path: str) -> bool:
    return any(part in EXCLUDED_DIRS for part in Path(path).parts)


def expand_globs(patterns: Iterable[str], root: str | Path | None = None) -> list[str]:
    """Expand glob patterns into a sorted, deduplicated list of files.

    Args:
        patterns: Glob patterns; ``**`` matches any number of directories
        root: Directory relative patterns are resolved against (default: cwd)

    Returns:
        File paths, excluding anything under vendor/build/dependency directories
    """
    files: set[str] = set()
    for pattern in patterns:
        for match in glob.glob(pattern, root_dir=root, recursive=True):
            full_path = str(Path(root) / match) if root is not None else match
            if _is_excluded(match) or not Path(full_path).is_file():
                continue
            files.add(full_path)
    return sorted(files)


def filter_manifests(paths: Iterable[str]) -> list[str]:
    """Keep only paths whose basename is the manifest filename."""
    return [path for path in paths if Path(path).name == MANIFEST_FILENAME]


def get_module_category(manifest: dict[str, Any]) -> ModuleCategory:
    """Engines are marked by keyword; everything else is an addon."""
    keywords = manifest.get("keywords") or []
    return ModuleCategory.ENGINE if ENGINE_KEYWORD in keywords else ModuleCategory.ADDON


def load_module(manifest_path: str) -> Module | None:
    """Build a Module from a manifest, or None when it is not an addon.

    Unreadable or malformed manifests are logged and skipped rather than
    treated as errors.
    """
    try:
        with open(manifest_path, encoding="utf-8") as f:
            manifest = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Skipping unreadable manifest {manifest_path}: {e}")
        return None

    if not isinstance(manifest, dict) or ADDON_KEYWORD not in (manifest.get("keywords") or []):
        logger.info(f"Skipping {manifest_path}: not an addon")
        return None

    directory = str(Path(manifest_path).parent)
    name = manifest.get("name")
    display_name = name if isinstance(name, str) and name else _UNSAFE_TITLE_CHARS_RE.sub("_", directory)

    return Module(
        manifest_path=manifest_path,
        directory=directory,
        display_name=display_name,
        category=get_module_category(manifest),
        has_tests=(Path(directory) / TESTS_DIRNAME).is_dir(),
    )


def discover_modules(patterns: Iterable[str], root: str | Path | None = None) -> list[Module]:
    """Discover every addon module matched by the glob patterns.

    Raises:
        ConfigurationError: If the patterns match no files at all
    """
    patterns = list(patterns)
    files = expand_globs(patterns, root=root)
    logger.info(f"Found a total of {len(files)} files from globs...")
    if not files:
        raise ConfigurationError(
            "No files found for globs", field="globs", details=", ".join(patterns) or "<empty>"
        )

    manifests = filter_manifests(files)
    logger.info(f"Inspecting a total of {len(manifests)} manifests...")

    modules = []
    for manifest_path in manifests:
        module = load_module(manifest_path)
        if module is not None:
            modules.append(module)
    return modules
