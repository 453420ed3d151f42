"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from pdfwatch.kernel.config import ApiConfig, WatcherConfig, load_config
from pdfwatch.kernel.config.loader import ConfigLoader, _parse_bool_env
from pdfwatch.kernel.domain.folders import OutputMode
from pdfwatch.kernel.exceptions import ConfigurationError, ValidationError

TOML_CONFIG = """
auth_token = "${TEST_PDFWATCH_TOKEN}"

[api]
poll_interval = 1.5

[watcher]
debounce_seconds = 3.0

[logging]
level = "DEBUG"

[[tools]]
id = "compress"
folderPath = "/data/Compress"
options = { quality = "low" }

[[tools]]
id = "pdf-to-word"
folderPath = "/data/Word"
outputMode = { custom = "/data/out" }

[[tools]]
id = "ocr"
enabled = false
folderPath = "/data/Ocr"
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for var in (
        "PDFWATCH_CONFIG_PATH",
        "PDFWATCH_TOKEN",
        "PDFWATCH_API_URL",
        "PDFWATCH_LOG_LEVEL",
        "PDFWATCH_LOG_FORMAT",
        "PDFWATCH_LOG_FILE",
        "PDFWATCH_LOG_COLOR",
        "TEST_PDFWATCH_TOKEN",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


class TestDefaults:
    """Without any file the built-in defaults apply."""

    def test_defaults(self) -> None:
        config = load_config()
        assert config.api == ApiConfig()
        assert config.api.base_url == "https://pdf.dk/api"
        assert config.api.poll_interval == 2.0
        assert config.api.max_poll_attempts == 300
        assert config.watcher == WatcherConfig()
        assert config.watcher.debounce_seconds == 2.0
        assert config.watcher.scan_interval == 0.5
        assert config.tools == []
        assert config.auth_token is None


class TestTomlFile:
    """Tests for loading a TOML file."""

    def test_load(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TEST_PDFWATCH_TOKEN", "secret")
        path = tmp_path / "pdfwatch.toml"
        path.write_text(TOML_CONFIG)

        config = load_config(path)

        assert config.auth_token == "secret"
        assert config.api.poll_interval == 1.5
        assert config.watcher.debounce_seconds == 3.0
        assert config.logging.level == "DEBUG"
        assert [t.id for t in config.tools] == ["compress", "pdf-to-word", "ocr"]
        assert config.tools[0].options == {"quality": "low"}
        assert config.tools[1].output_mode == OutputMode.custom("/data/out")
        assert [t.id for t in config.enabled_tools()] == ["compress", "pdf-to-word"]

    def test_unresolved_token_placeholder_means_no_token(self, tmp_path: Path) -> None:
        path = tmp_path / "pdfwatch.toml"
        path.write_text(TOML_CONFIG)
        assert load_config(path).auth_token is None

    def test_discovered_in_current_directory(self, tmp_path: Path) -> None:
        (tmp_path / "pdfwatch.toml").write_text('[api]\nbase_url = "http://localhost:9000"\n')
        assert load_config().api.base_url == "http://localhost:9000"

    def test_config_path_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        other = tmp_path / "elsewhere.toml"
        other.write_text("[watcher]\nqueue_size = 5\n")
        monkeypatch.setenv("PDFWATCH_CONFIG_PATH", str(other))
        assert load_config().watcher.queue_size == 5


class TestYamlFile:
    def test_load_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "pdfwatch.yaml"
        path.write_text(
            "api:\n  base_url: http://localhost:8080\n"
            "tools:\n  - id: rotate\n    folderPath: /data/Rotate\n    outputMode: same-folder\n"
        )
        config = load_config(path)
        assert config.api.base_url == "http://localhost:8080"
        assert config.tools[0].output_mode.kind == "same-folder"


class TestEnvironmentOverrides:
    def test_env_wins_over_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "pdfwatch.toml"
        path.write_text(TOML_CONFIG)
        monkeypatch.setenv("PDFWATCH_TOKEN", "from-env")
        monkeypatch.setenv("PDFWATCH_API_URL", "http://staging/api")
        monkeypatch.setenv("PDFWATCH_LOG_LEVEL", "warning")
        monkeypatch.setenv("PDFWATCH_LOG_FORMAT", "JSON")

        config = load_config(path)

        assert config.auth_token == "from-env"
        assert config.api.base_url == "http://staging/api"
        assert config.logging.level == "WARNING"
        assert config.logging.format == "json"

    def test_invalid_color_is_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PDFWATCH_LOG_COLOR", "maybe")
        assert load_config().logging.use_color is True


class TestErrors:
    """Invalid input raises ConfigurationError."""

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="file not found"):
            load_config(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("[api\nbase_url = ")
        with pytest.raises(ConfigurationError, match="cannot parse"):
            load_config(path)

    def test_negative_poll_interval(self, tmp_path: Path) -> None:
        path = tmp_path / "pdfwatch.toml"
        path.write_text("[api]\npoll_interval = -1\n")
        with pytest.raises(ConfigurationError, match="poll_interval"):
            load_config(path)

    def test_unknown_section_key(self, tmp_path: Path) -> None:
        path = tmp_path / "pdfwatch.toml"
        path.write_text("[watcher]\nbogus = 1\n")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_invalid_tool(self, tmp_path: Path) -> None:
        path = tmp_path / "pdfwatch.toml"
        path.write_text('[[tools]]\nid = "compress"\noutputMode = "nowhere"\n')
        with pytest.raises(ConfigurationError, match=r"tools\[0\]"):
            load_config(path)

    def test_unknown_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PDFWATCH_LOG_LEVEL", "LOUD")
        with pytest.raises(ConfigurationError):
            load_config()


class TestParseBoolEnv:
    @pytest.mark.parametrize("value", ["true", "1", "YES", " on "])
    def test_truthy(self, value: str) -> None:
        assert _parse_bool_env(value) is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "off"])
    def test_falsy(self, value: str) -> None:
        assert _parse_bool_env(value) is False

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            _parse_bool_env("perhaps")


def test_substitute_keeps_unknown_placeholders(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KNOWN_DIR", "/srv")
    data = {"a": "${KNOWN_DIR}/x", "b": ["${UNKNOWN_PDFWATCH_VAR}"], "c": 3}
    assert ConfigLoader()._substitute_env_vars(data) == {
        "a": "/srv/x",
        "b": ["${UNKNOWN_PDFWATCH_VAR}"],
        "c": 3,
    }


def test_validation_error_wrapped() -> None:
    with pytest.raises(ValidationError):
        ApiConfig(base_url="")
