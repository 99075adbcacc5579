"""Tests for settings loading (YAML file and environment overrides)."""

from pathlib import Path

import pytest

from otlpcheck.config import (
    DEFAULT_CLOCK_SKEW_GRACE_SECONDS,
    ConfigError,
    ValidatorSettings,
    get_config_path,
    load_settings,
    load_yaml,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run each test in an empty directory without OTLPCHECK_* variables."""
    for name in ("OTLPCHECK_CONFIG", "OTLPCHECK_CLOCK_SKEW_GRACE_SECONDS", "OTLPCHECK_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults_without_config() -> None:
    """No file and no env gives the built-in defaults."""
    assert get_config_path() is None
    settings = load_settings()
    assert settings == ValidatorSettings()
    assert settings.clock_skew_grace_seconds == DEFAULT_CLOCK_SKEW_GRACE_SECONDS
    assert settings.clock_skew_grace_ns == 60_000_000_000
    assert settings.log_level == "WARNING"


def test_config_in_working_directory(tmp_path: Path) -> None:
    """otlpcheck.yaml in the working directory is picked up."""
    (tmp_path / "otlpcheck.yaml").write_text(
        "clock_skew_grace_seconds: 5\nlog_level: debug\n", encoding="utf-8"
    )
    config_path = get_config_path()
    assert config_path is not None
    assert config_path.resolve() == (tmp_path / "otlpcheck.yaml").resolve()
    settings = load_settings()
    assert settings.clock_skew_grace_seconds == 5
    assert settings.log_level == "DEBUG"


def test_config_from_env_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """OTLPCHECK_CONFIG names the file to read."""
    config = tmp_path / "custom.yaml"
    config.write_text("clock_skew_grace_seconds: 300\n", encoding="utf-8")
    monkeypatch.setenv("OTLPCHECK_CONFIG", str(config))
    assert load_settings().clock_skew_grace_seconds == 300


def test_env_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = tmp_path / "otlpcheck.yaml"
    config.write_text("clock_skew_grace_seconds: 5\nlog_level: INFO\n", encoding="utf-8")
    monkeypatch.setenv("OTLPCHECK_CLOCK_SKEW_GRACE_SECONDS", "0")
    monkeypatch.setenv("OTLPCHECK_LOG_LEVEL", "error")
    settings = load_settings(config)
    assert settings.clock_skew_grace_seconds == 0
    assert settings.log_level == "ERROR"


def test_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Config file not found"):
        load_settings(tmp_path / "absent.yaml")


@pytest.mark.parametrize("value", ["-1", "soon", "1.5"])
def test_invalid_grace_from_env(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("OTLPCHECK_CLOCK_SKEW_GRACE_SECONDS", value)
    with pytest.raises(ConfigError):
        load_settings()


def test_invalid_values_in_file(tmp_path: Path) -> None:
    config = tmp_path / "otlpcheck.yaml"
    config.write_text("clock_skew_grace_seconds: true\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="must be an integer"):
        load_settings(config)

    config.write_text("log_level: LOUD\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="unknown log_level"):
        load_settings(config)


def test_load_yaml_missing_or_empty_gives_default(tmp_path: Path) -> None:
    """A missing file or an empty document yields the default."""
    assert load_yaml(tmp_path / "missing.yaml") == {}
    empty = tmp_path / "empty.yaml"
    empty.write_text("# nothing configured\n", encoding="utf-8")
    assert load_yaml(empty, default={"x": 1}) == {"x": 1}


def test_load_yaml_rejects_malformed_files(tmp_path: Path) -> None:
    """Unparsable and non-mapping documents are configuration errors."""
    broken = tmp_path / "broken.yaml"
    broken.write_text("key: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid YAML"):
        load_yaml(broken)
    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="must contain a mapping"):
        load_yaml(listing)


@pytest.mark.parametrize("content", ["key: [unclosed\n", "- clock_skew_grace_seconds\n", "42\n"])
def test_malformed_file_is_a_config_error(tmp_path: Path, content: str) -> None:
    """A file that is not a YAML mapping stops settings loading."""
    config = tmp_path / "otlpcheck.yaml"
    config.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(config)


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    config = tmp_path / "otlpcheck.yaml"
    config.write_text("", encoding="utf-8")
    assert load_settings(config) == ValidatorSettings()
