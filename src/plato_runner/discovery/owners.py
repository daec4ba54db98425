"""
Owner classification.

Maps a module path to the label of the team that owns it. The classifier is
injected into the runner so the engine does not care how ownership is
decided.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Protocol, runtime_checkable

from plato_runner.core.constants import DEFAULT_OWNER, OWNER_ERROR_MARKER, UNKNOWN_OWNER
from plato_runner.core.exceptions import OwnerClassificationError

logger = logging.getLogger(__name__)


@runtime_checkable
class OwnerClassifier(Protocol):
    """Return the owner label for a module, or raise OwnerClassificationError."""

    def classify(self, module_path: str) -> str: ...


class StaticOwnerClassifier:
    """Attribute every module to the same owner."""

    def __init__(self, label: str = DEFAULT_OWNER):
        self.label = label

    def classify(self, module_path: str) -> str:
        return self.label


class ScriptOwnerClassifier:
    """Ask an external executable for the owner: ``<script> <module-path>``.

    The trimmed stdout (stderr when stdout is empty) is the owner label.
    Output containing the error marker aborts the run.

    Args:
        script: Path to the classifier executable
        timeout: Optional timeout in seconds for each invocation
    """

    def __init__(self, script: str, timeout: float | None = None):
        self.script = script
        self.timeout = timeout

    def classify(self, module_path: str) -> str:
        try:
            result = subprocess.run(
                [self.script, module_path], capture_output=True, text=True, timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            raise OwnerClassificationError(module_path, details=f"timed out after {self.timeout}s") from e
        except OSError as e:
            raise OwnerClassificationError(module_path, details=f"cannot run {self.script}: {e}") from e

        if result.returncode != 0:
            logger.warning(f"Owner script exited with code {result.returncode} for {module_path}")

        output = (result.stdout or result.stderr or "").strip()
        logger.debug(f"{self.script} {module_path}: {output}")

        if OWNER_ERROR_MARKER in output:
            raise OwnerClassificationError(module_path, output=output)

        if not output:
            logger.warning(f"Owner script returned nothing for {module_path}; using {UNKNOWN_OWNER}")
            return UNKNOWN_OWNER
        return output


def build_classifier(owners_script: str | None) -> OwnerClassifier:
    """Script classifier when a script is configured, otherwise everything is owned by ALL."""
    if owners_script:
        return ScriptOwnerClassifier(owners_script)
    return StaticOwnerClassifier()
