"""Configuration data models for pdfwatch."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from pdfwatch.kernel.domain.folders import ToolConfig
from pdfwatch.kernel.exceptions import ValidationError

DEFAULT_API_BASE_URL = "https://pdf.dk/api"


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Logging configuration.

    Attributes
    ----------
    level : str, default="INFO"
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    format : str, default="structured"
        Output format (console, json, structured, rich)
    output_file : str | None, default=None
        Optional file path to write JSON logs to

    Examples
    --------
    TOML configuration:

    ```toml
    [logging]
    level = "DEBUG"
    format = "rich"
    ```

    Environment variable overrides:

    ```bash
    export PDFWATCH_LOG_LEVEL=DEBUG
    export PDFWATCH_LOG_FORMAT=json
    export PDFWATCH_LOG_FILE=/var/log/pdfwatch.log
    ```
    """

    level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "structured", "rich"] = "structured"
    output_file: str | None = None
    use_color: bool = True
    include_timestamp: bool = True


@dataclass(frozen=True, slots=True)
class ApiConfig:
    """Remote processing service settings.

    Attributes
    ----------
    base_url : str
        Root of the API; tool endpoints are ``<base_url>/<tool>``
    request_timeout : float
        Per-request timeout in seconds (uploads of large PDFs are slow)
    poll_interval : float
        Seconds between job status polls
    max_poll_attempts : int
        Poll ceiling; 300 attempts at 2 s is a 10 minute limit
    """

    base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = 300.0
    poll_interval: float = 2.0
    max_poll_attempts: int = 300

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValidationError("base_url", "cannot be empty")
        if self.request_timeout <= 0:
            raise ValidationError("request_timeout", "must be positive", self.request_timeout)
        if self.poll_interval < 0:
            raise ValidationError("poll_interval", "cannot be negative", self.poll_interval)
        if self.max_poll_attempts < 1:
            raise ValidationError("max_poll_attempts", "must be at least 1", self.max_poll_attempts)


@dataclass(frozen=True, slots=True)
class WatcherConfig:
    """Debounce and channel sizing for the folder watcher."""

    debounce_seconds: float = 2.0
    scan_interval: float = 0.5
    queue_size: int = 100
    broadcast_capacity: int = 100

    def __post_init__(self) -> None:
        if self.debounce_seconds < 0:
            raise ValidationError("debounce_seconds", "cannot be negative", self.debounce_seconds)
        if self.scan_interval <= 0:
            raise ValidationError("scan_interval", "must be positive", self.scan_interval)
        if self.queue_size < 1:
            raise ValidationError("queue_size", "must be at least 1", self.queue_size)
        if self.broadcast_capacity < 1:
            raise ValidationError(
                "broadcast_capacity", "must be at least 1", self.broadcast_capacity
            )


@dataclass(slots=True)
class PdfWatchConfig:
    """Complete application configuration."""

    api: ApiConfig = field(default_factory=ApiConfig)
    watcher: WatcherConfig = field(default_factory=WatcherConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    tools: list[ToolConfig] = field(default_factory=list)
    auth_token: str | None = None

    def enabled_tools(self) -> list[ToolConfig]:
        """Tools that are enabled and have a folder to watch."""
        return [t for t in self.tools if t.enabled and t.folder_path]
