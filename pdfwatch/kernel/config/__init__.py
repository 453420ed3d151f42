"""Configuration models and loader."""

from pdfwatch.kernel.config.loader import ConfigLoader, load_config
from pdfwatch.kernel.config.models import (
    DEFAULT_API_BASE_URL,
    ApiConfig,
    LoggingConfig,
    PdfWatchConfig,
    WatcherConfig,
)

__all__ = [
    "ConfigLoader",
    "load_config",
    "DEFAULT_API_BASE_URL",
    "ApiConfig",
    "LoggingConfig",
    "PdfWatchConfig",
    "WatcherConfig",
]
