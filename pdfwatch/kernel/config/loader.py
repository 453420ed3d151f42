"""Configuration loader for pdfwatch.

Reads a TOML or YAML file into :class:`PdfWatchConfig`. ``${VAR}`` references
in string values are replaced from the environment, then ``PDFWATCH_*``
variables override individual settings.

Discovery order:

1. Explicit path argument
2. ``PDFWATCH_CONFIG_PATH`` env var
3. ``pdfwatch.toml`` in the current directory
4. Built-in defaults (no tools configured)

Example file::

    auth_token = "${PDFWATCH_TOKEN}"

    [api]
    base_url = "https://pdf.dk/api"
    poll_interval = 2.0

    [watcher]
    debounce_seconds = 2.0

    [[tools]]
    id = "compress"
    folderPath = "/home/me/PDF/Compress"
    outputMode = "subfolder"
    options = { quality = "medium" }
"""

from __future__ import annotations

import os
import re
import tomllib
from pathlib import Path
from typing import Any

import pydantic
import yaml

from pdfwatch.kernel.config.models import ApiConfig, LoggingConfig, PdfWatchConfig, WatcherConfig
from pdfwatch.kernel.domain.folders import ToolConfig
from pdfwatch.kernel.exceptions import ConfigurationError, ValidationError
from pdfwatch.kernel.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_FILENAME = "pdfwatch.toml"

_TRUTHY_VALUES = frozenset({"true", "1", "yes", "on", "enabled"})
_FALSY_VALUES = frozenset({"false", "0", "no", "off", "disabled"})


def _parse_bool_env(value: str) -> bool:
    """Parse boolean from environment variable value.

    Raises
    ------
    ValueError
        If value is not a recognized boolean string
    """
    normalized = value.lower().strip()
    if normalized in _TRUTHY_VALUES:
        return True
    if normalized in _FALSY_VALUES:
        return False
    expected = _TRUTHY_VALUES | _FALSY_VALUES
    raise ValueError(f"Invalid boolean value: {value!r}. Expected one of: {expected}")


class ConfigLoader:
    """Loads and processes pdfwatch configuration files."""

    ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

    def load(self, path: str | Path | None = None) -> PdfWatchConfig:
        """Load configuration, falling back to defaults when no file is found.

        Raises
        ------
        ConfigurationError
            If an explicit path does not exist or the file content is invalid
        """
        config_path = self._find_config_file(path)
        if config_path is None:
            logger.debug("No configuration file found, using defaults")
            return self._parse_config({})

        logger.info("Loading configuration from {}", config_path)
        data = self._read_file(config_path)
        return self._parse_config(self._substitute_env_vars(data))

    def _find_config_file(self, path: str | Path | None) -> Path | None:
        if path:
            config_path = Path(path)
            if not config_path.exists():
                raise ConfigurationError("config", f"file not found: {config_path}")
            return config_path

        if env_path := os.getenv("PDFWATCH_CONFIG_PATH"):
            config_path = Path(env_path)
            if config_path.exists():
                logger.debug("Using config from PDFWATCH_CONFIG_PATH: {}", config_path)
                return config_path
            logger.warning("PDFWATCH_CONFIG_PATH set but file not found: {}", config_path)

        if Path(DEFAULT_CONFIG_FILENAME).exists():
            return Path(DEFAULT_CONFIG_FILENAME)

        return None

    def _read_file(self, config_path: Path) -> dict[str, Any]:
        try:
            if config_path.suffix in (".yaml", ".yml"):
                with config_path.open("r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
            else:
                with config_path.open("rb") as f:
                    data = tomllib.load(f)
        except (tomllib.TOMLDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError("config", f"cannot parse {config_path.name}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                "config", f"expected a mapping, got {type(data).__name__} in {config_path.name}"
            )
        return data

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively replace ``${VAR}`` with environment values.

        Unknown variables keep their placeholder.
        """
        if isinstance(data, str):

            def replacer(match: re.Match[str]) -> str:
                value = os.environ.get(match.group(1))
                if value is None:
                    logger.debug("Environment variable {} not found, keeping placeholder", match.group(0))
                    return match.group(0)
                return value

            return self.ENV_VAR_PATTERN.sub(replacer, data)

        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}

        if isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]

        return data

    def _parse_config(self, data: dict[str, Any]) -> PdfWatchConfig:
        try:
            api = self._parse_api_config(data.get("api", {}))
            watcher = WatcherConfig(**data.get("watcher", {}))
            logging_config = self._parse_logging_config(data.get("logging", {}))
        except (TypeError, ValidationError) as e:
            raise ConfigurationError("config", str(e)) from e

        tools: list[ToolConfig] = []
        for index, raw_tool in enumerate(data.get("tools", [])):
            try:
                tools.append(ToolConfig.model_validate(raw_tool))
            except pydantic.ValidationError as e:
                raise ConfigurationError(f"tools[{index}]", str(e)) from e

        auth_token = data.get("auth_token") or None
        if env_token := os.getenv("PDFWATCH_TOKEN"):
            auth_token = env_token
        if auth_token and self.ENV_VAR_PATTERN.fullmatch(auth_token):
            # Unresolved placeholder means "no token"
            auth_token = None

        return PdfWatchConfig(
            api=api,
            watcher=watcher,
            logging=logging_config,
            tools=tools,
            auth_token=auth_token,
        )

    def _parse_api_config(self, api_data: dict[str, Any]) -> ApiConfig:
        api_data = dict(api_data)
        if env_url := os.getenv("PDFWATCH_API_URL"):
            api_data["base_url"] = env_url
            logger.debug("Overriding API base URL from env: {}", env_url)
        return ApiConfig(**api_data)

    def _parse_logging_config(self, logging_data: dict[str, Any]) -> LoggingConfig:
        """Parse logging configuration with environment variable overrides.

        Environment variables take precedence over config file values:
        - PDFWATCH_LOG_LEVEL: Log level
        - PDFWATCH_LOG_FORMAT: Output format (console, json, structured, rich)
        - PDFWATCH_LOG_FILE: Optional file path for log output
        - PDFWATCH_LOG_COLOR: Use color output (true/false)
        """
        level = logging_data.get("level", "INFO")
        format_type = logging_data.get("format", "structured")
        output_file = logging_data.get("output_file")
        use_color = logging_data.get("use_color", True)
        include_timestamp = logging_data.get("include_timestamp", True)

        if env_level := os.getenv("PDFWATCH_LOG_LEVEL"):
            level = env_level.upper()
        if env_format := os.getenv("PDFWATCH_LOG_FORMAT"):
            format_type = env_format.lower()
        if env_file := os.getenv("PDFWATCH_LOG_FILE"):
            output_file = env_file
        if env_color := os.getenv("PDFWATCH_LOG_COLOR"):
            try:
                use_color = _parse_bool_env(env_color)
            except ValueError as e:
                logger.warning("Invalid PDFWATCH_LOG_COLOR value: {}", e)

        if level not in ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValidationError("logging.level", "unknown log level", level)
        if format_type not in ("console", "json", "structured", "rich"):
            raise ValidationError("logging.format", "unknown log format", format_type)

        return LoggingConfig(
            level=level,
            format=format_type,
            output_file=output_file,
            use_color=use_color,
            include_timestamp=include_timestamp,
        )


def load_config(path: str | Path | None = None) -> PdfWatchConfig:
    """Load configuration using :class:`ConfigLoader`."""
    return ConfigLoader().load(path)
