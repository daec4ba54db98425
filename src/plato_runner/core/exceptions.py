"""Custom exceptions for Plato Runner.

All exception classes are designed to provide clear, actionable error messages
with context about what went wrong and how to fix it.
"""


class PlatoRunnerError(Exception):
    """Base exception for all Plato Runner errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(PlatoRunnerError):
    """Exception raised for configuration-related errors.

    Examples:
        - Glob patterns that expand to no files
        - Missing required options
        - Invalid worker count
    """

    def __init__(self, message: str, field: str | None = None, details: str | None = None):
        self.field = field
        super().__init__(message, details)


class OwnerClassificationError(PlatoRunnerError):
    """Exception raised when the owner classifier signals a failure.

    Ownership attribution is all-or-nothing: once a module cannot be
    attributed, no partial report is trustworthy and the run is aborted.

    Attributes:
        module_path: Manifest path that failed to classify
        output: Raw classifier output (if any)
    """

    def __init__(self, module_path: str, output: str | None = None, details: str | None = None):
        self.module_path = module_path
        self.output = output
        super().__init__(f"Owner classification failed for '{module_path}'", details or output)


class AnalysisError(PlatoRunnerError):
    """Exception raised when a single analyzer invocation fails.

    Recovered per job by the scheduler; never aborts sibling jobs.
    """

    def __init__(
        self,
        message: str,
        job_title: str | None = None,
        returncode: int | None = None,
        details: str | None = None,
    ):
        self.job_title = job_title
        self.returncode = returncode
        super().__init__(message, details)

    def __str__(self) -> str:
        parts = [self.message]
        if self.job_title:
            parts.append(f"job '{self.job_title}'")
        if self.returncode is not None:
            parts.append(f"exit code {self.returncode}")
        if self.details:
            parts.append(self.details)
        return " - ".join(parts)


class AggregationError(PlatoRunnerError):
    """Exception raised when the aggregation tree is used out of order.

    Examples:
        - Emitting reports from a tree whose summaries are stale
    """


class SchedulerClosedError(PlatoRunnerError):
    """Exception raised when a job is submitted after the scheduler stopped accepting work."""


class OutputError(PlatoRunnerError):
    """Exception raised for report writing failures.

    Examples:
        - Permission denied
        - Disk full
        - Invalid path
    """

    def __init__(
        self,
        message: str,
        output_path: str | None = None,
        details: str | None = None,
        original_error: Exception | None = None,
    ):
        self.output_path = output_path
        self.original_error = original_error
        super().__init__(message, details)
