"""
Configuration for the OTLP payload validator.

Settings are read from an optional YAML file and from environment variables.
The YAML file is named by OTLPCHECK_CONFIG; when unset, otlpcheck.yaml in the
current working directory is used if it exists. Individual environment
variables override values from the file:

  OTLPCHECK_CLOCK_SKEW_GRACE_SECONDS - future-timestamp tolerance for spans (default 60)
  OTLPCHECK_LOG_LEVEL                - logging level name for the CLI (default WARNING)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_FILENAME = "otlpcheck.yaml"
DEFAULT_CLOCK_SKEW_GRACE_SECONDS = 60
DEFAULT_LOG_LEVEL = "WARNING"

_ENV_CONFIG = "OTLPCHECK_CONFIG"
_ENV_CLOCK_SKEW = "OTLPCHECK_CLOCK_SKEW_GRACE_SECONDS"
_ENV_LOG_LEVEL = "OTLPCHECK_LOG_LEVEL"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class ConfigError(ValueError):
    """Raised when a configuration value is missing or invalid."""


@dataclass(frozen=True)
class ValidatorSettings:
    """Resolved validator settings."""

    clock_skew_grace_seconds: int = DEFAULT_CLOCK_SKEW_GRACE_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def clock_skew_grace_ns(self) -> int:
        return self.clock_skew_grace_seconds * 1_000_000_000


def load_yaml(path: Path, default: Any = None) -> Any:
    """Load a YAML mapping; return default on a missing file or an empty document.

    :raises ConfigError: When the file cannot be read, does not parse, or holds
        something other than a mapping.
    """
    if default is None:
        default = {}
    if not path.exists():
        return default
    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"{path}: cannot read config file: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML: {e}") from e
    if data is None:
        return default
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: config file must contain a mapping")
    return data


def get_config_path() -> Path | None:
    """Return the YAML config path to use, or None when there is none.

    Resolution order:
    1. OTLPCHECK_CONFIG env var
    2. otlpcheck.yaml in the current working directory
    """
    env_path = os.environ.get(_ENV_CONFIG, "").strip()
    if env_path:
        return Path(env_path).expanduser()
    candidate = Path.cwd() / DEFAULT_CONFIG_FILENAME
    if candidate.is_file():
        return candidate
    return None


def _parse_grace(raw: Any, source: str) -> int:
    if isinstance(raw, bool):
        raise ConfigError(f"{source}: clock_skew_grace_seconds must be an integer")
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise ConfigError(f"{source}: clock_skew_grace_seconds must be an integer") from None
    if value < 0:
        raise ConfigError(f"{source}: clock_skew_grace_seconds must be >= 0")
    return value


def _parse_log_level(raw: Any, source: str) -> str:
    level = str(raw).strip().upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(f"{source}: unknown log_level '{raw}'")
    return level


def load_settings(path: Path | None = None) -> ValidatorSettings:
    """
    Build settings from YAML (if any) and environment overrides.

    :param path: Explicit YAML path; defaults to get_config_path().
    :return: Resolved ValidatorSettings.
    :raises ConfigError: When the named file is missing or malformed, or a value is invalid.
    """
    config_path = path or get_config_path()
    if config_path is not None and not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")
    data: dict[str, Any] = load_yaml(config_path) if config_path else {}
    source = str(config_path) if config_path else "defaults"

    grace = DEFAULT_CLOCK_SKEW_GRACE_SECONDS
    if data.get("clock_skew_grace_seconds") is not None:
        grace = _parse_grace(data["clock_skew_grace_seconds"], source)
    env_grace = os.environ.get(_ENV_CLOCK_SKEW, "").strip()
    if env_grace:
        grace = _parse_grace(env_grace, _ENV_CLOCK_SKEW)

    log_level = DEFAULT_LOG_LEVEL
    if data.get("log_level") is not None:
        log_level = _parse_log_level(data["log_level"], source)
    env_level = os.environ.get(_ENV_LOG_LEVEL, "").strip()
    if env_level:
        log_level = _parse_log_level(env_level, _ENV_LOG_LEVEL)

    return ValidatorSettings(clock_skew_grace_seconds=grace, log_level=log_level)
