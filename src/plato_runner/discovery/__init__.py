"""Module discovery and owner classification."""

from plato_runner.discovery.modules import (
    discover_modules,
    expand_globs,
    filter_manifests,
    get_module_category,
    load_module,
)
from plato_runner.discovery.owners import (
    OwnerClassifier,
    ScriptOwnerClassifier,
    StaticOwnerClassifier,
    build_classifier,
)

__all__ = [
    "OwnerClassifier",
    "ScriptOwnerClassifier",
    "StaticOwnerClassifier",
    "build_classifier",
    "discover_modules",
    "expand_globs",
    "filter_manifests",
    "get_module_category",
    "load_module",
]
