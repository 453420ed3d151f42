"""pdfwatch kernel: domain models, events, ports, configuration and logging.

Nothing in the kernel touches the network or the OS watch backend; those live
in :mod:`pdfwatch.drivers` and :mod:`pdfwatch.watcher`.
"""

from pdfwatch.kernel.exceptions import (
    ApiError,
    ConfigurationError,
    FileTooLargeError,
    InvalidTransitionError,
    JobFailedError,
    JobLimitExceededError,
    JobTimeoutError,
    LocalIOError,
    NetworkError,
    PdfWatchError,
    ServerError,
    UnauthorizedError,
    ValidationError,
    WatcherError,
)
from pdfwatch.kernel.logging import configure_logging, get_logger

__all__ = [
    "ApiError",
    "ConfigurationError",
    "FileTooLargeError",
    "InvalidTransitionError",
    "JobFailedError",
    "JobLimitExceededError",
    "JobTimeoutError",
    "LocalIOError",
    "NetworkError",
    "PdfWatchError",
    "ServerError",
    "UnauthorizedError",
    "ValidationError",
    "WatcherError",
    "configure_logging",
    "get_logger",
]
