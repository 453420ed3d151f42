"""Core exception hierarchy for pdfwatch.

All pdfwatch exceptions inherit from PdfWatchError. Errors raised while talking
to the remote processing service inherit from ApiError so a pipeline run can
catch one family and mark its job failed.
"""

from __future__ import annotations

# ============================================================================
# Base Exception
# ============================================================================


class PdfWatchError(Exception):
    """Base exception for all pdfwatch errors."""

    pass


# ============================================================================
# Configuration & Validation Errors
# ============================================================================


class ConfigurationError(PdfWatchError):
    """Raised when configuration is invalid or missing.

    Examples
    --------
    Example usage::

        raise ConfigurationError("api", "base_url must not be empty")
    """

    def __init__(self, component: str, reason: str) -> None:
        super().__init__(f"Configuration error in '{component}': {reason}")
        self.component = component
        self.reason = reason


class ValidationError(PdfWatchError):
    """Raised when data validation fails.

    Examples
    --------
    Example usage::

        raise ValidationError("progress", "must be between 0 and 100", value=120)
    """

    def __init__(self, field: str, constraint: str, value: object = None) -> None:
        if value is not None:
            msg = f"Validation failed for '{field}': {constraint} (got {value!r})"
        else:
            msg = f"Validation failed for '{field}': {constraint}"
        super().__init__(msg)
        self.field = field
        self.constraint = constraint
        self.value = value


class InvalidTransitionError(PdfWatchError):
    """Raised when a job state transition violates the lifecycle."""


# ============================================================================
# Watcher Errors
# ============================================================================


class WatcherError(PdfWatchError):
    """Raised when the folder watcher cannot register or unregister a folder."""


# ============================================================================
# Remote API Errors
# ============================================================================


class ApiError(PdfWatchError):
    """Base class for failures talking to the remote processing service."""


class NetworkError(ApiError):
    """Raised when the HTTP transport fails (DNS, connect, read timeout...)."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Network error: {reason}")
        self.reason = reason


class UnauthorizedError(ApiError):
    """Raised when credentials are missing or expired."""

    def __init__(self) -> None:
        super().__init__("Unauthorized - please login again")


class JobLimitExceededError(ApiError):
    """Raised when the account has used up its monthly job quota (HTTP 429)."""

    def __init__(self) -> None:
        super().__init__("Monthly job limit exceeded")


class FileTooLargeError(ApiError):
    """Raised when the uploaded file exceeds the plan's size limit (HTTP 413)."""

    def __init__(self, max_mb: int = 100) -> None:
        super().__init__(f"File too large for your plan (max {max_mb} MB)")
        self.max_mb = max_mb


class ServerError(ApiError):
    """Raised on any malformed or unsuccessful server response."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Server error: {message}")
        self.message = message


class JobFailedError(ApiError):
    """Raised when the server reports that processing of a job failed."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Job failed: {message}")
        self.message = message


class JobTimeoutError(ApiError):
    """Raised when a job does not finish within the poll attempt ceiling."""

    def __init__(self, attempts: int | None = None) -> None:
        super().__init__("Job timeout")
        self.attempts = attempts


# ============================================================================
# Local I/O Errors
# ============================================================================


class LocalIOError(PdfWatchError):
    """Raised when reading, writing or moving a local file fails."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"IO error for '{path}': {reason}")
        self.path = path
        self.reason = reason


# ============================================================================
# Pipeline Errors
# ============================================================================


class PipelineError(PdfWatchError):
    """Raised when a pipeline run hits an error outside the families above.

    The original exception is kept as ``cause`` and chained as ``__cause__``.
    """

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"Unexpected error: {type(cause).__name__}: {cause}")
        self.cause = cause


__all__ = [
    # Base
    "PdfWatchError",
    # Configuration & Validation
    "ConfigurationError",
    "ValidationError",
    "InvalidTransitionError",
    # Watcher
    "WatcherError",
    # Remote API
    "ApiError",
    "NetworkError",
    "UnauthorizedError",
    "JobLimitExceededError",
    "FileTooLargeError",
    "ServerError",
    "JobFailedError",
    "JobTimeoutError",
    # Local I/O
    "LocalIOError",
    # Pipeline
    "PipelineError",
]
