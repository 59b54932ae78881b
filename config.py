"""
Host Monitor Configuration.

Centralized configuration with environment variable overrides and
optional JSON/YAML config files.
"""

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from utils import parse_duration, validate_host_url

DEFAULT_MAX_STATS = 128
DEFAULT_PING_TIMEOUT = 1.5
DEFAULT_POLL_INTERVAL = 2.0

EXTENSION_JSON = ".json"
EXTENSION_YAML = (".yml", ".yaml")

# Config file keys (JSON and YAML spellings) -> MonitorConfig fields
FILE_KEYS = {
    "hosts": "hosts",
    "interval": "poll_interval",
    "pollInterval": "poll_interval",
    "poll_interval": "poll_interval",
    "ping_timeout": "ping_timeout",
    "pingTimeout": "ping_timeout",
    "max_stats": "max_stats",
    "maxStats": "max_stats",
    "verbose": "verbose",
    "skip_verify": "skip_verify",
    "skipVerify": "skip_verify",
    "show_notification": "show_notifications",
    "show_notifications": "show_notifications",
    "showNotifications": "show_notifications",
}

DURATION_FIELDS = ("poll_interval", "ping_timeout")


class ConfigError(ValueError):
    """Raised when the monitor configuration is unusable."""


TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off", "")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in TRUE_VALUES


def _env_duration(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return parse_duration(raw.strip())
    except ValueError as e:
        raise ConfigError(f"Invalid value for {name}: {e}") from e


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_VALUES:
            return True
        if text in FALSE_VALUES:
            return False
    raise ValueError(f"expected a boolean, got {value!r}")


def _env_hosts() -> List[str]:
    raw = os.getenv("MONITOR_HOSTS", "")
    return [h.strip() for h in raw.split(",") if h.strip()]


@dataclass
class MonitorConfig:
    """Configuration for the host monitor."""

    # Targets
    hosts: List[str] = field(default_factory=_env_hosts)

    # Probe Settings
    poll_interval: float = _env_duration("POLL_INTERVAL", DEFAULT_POLL_INTERVAL)
    ping_timeout: float = _env_duration("PING_TIMEOUT", DEFAULT_PING_TIMEOUT)
    max_stats: int = int(os.getenv("MAX_STATS", str(DEFAULT_MAX_STATS)))
    skip_verify: bool = _env_bool("SKIP_VERIFY")

    # Display
    show_notifications: bool = _env_bool("SHOW_NOTIFICATIONS")
    color: bool = _env_bool("MONITOR_COLOR", "true")
    verbose: bool = False

    # Status API Settings
    api_enabled: bool = _env_bool("API_ENABLED")
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "8080"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "WARNING")
    log_file: str = os.getenv("LOG_FILE", "")

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.verbose else self.log_level

    @property
    def host_width(self) -> int:
        """Length of the longest host name."""
        return max((len(h) for h in self.hosts), default=0)

    def validate(self) -> "MonitorConfig":
        """
        Check the configuration before the monitor starts.

        Raises:
            ConfigError: On missing hosts, malformed URLs, or
                non-positive interval, timeout or window size.
        """
        if not self.hosts:
            raise ConfigError("At least one host is required")
        for host in self.hosts:
            if not validate_host_url(host):
                raise ConfigError(f"Invalid host URL: {host}")
        if isinstance(self.max_stats, bool) or not isinstance(self.max_stats, int) or self.max_stats < 1:
            raise ConfigError(f"max_stats must be an integer >= 1, got {self.max_stats!r}")
        if self.poll_interval <= 0:
            raise ConfigError(f"Poll interval must be positive, got {self.poll_interval}")
        if self.ping_timeout <= 0:
            raise ConfigError(f"Ping timeout must be positive, got {self.ping_timeout}")
        return self


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    """Map file keys onto config fields and normalize their types."""
    result: Dict[str, Any] = {}
    for key, value in values.items():
        name = FILE_KEYS.get(key)
        if name is None:
            continue
        try:
            if name in DURATION_FIELDS:
                value = parse_duration(value)
            elif name == "max_stats":
                value = int(value)
            elif name == "hosts":
                if isinstance(value, str) or not isinstance(value, list):
                    raise ValueError("hosts must be a list")
                value = [str(h) for h in value]
            else:
                value = _parse_bool(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value for '{key}': {e}") from e
        result[name] = value
    return result


def load_config_file(path: str, base: Optional[MonitorConfig] = None) -> MonitorConfig:
    """
    Load a JSON or YAML config file on top of a base configuration.

    Args:
        path: Path to a .json, .yml or .yaml file.
        base: Configuration to override (defaults to the environment one).

    Returns:
        A new MonitorConfig.

    Raises:
        ConfigError: If the file is missing, has an unsupported
            extension, or cannot be parsed.
    """
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix != EXTENSION_JSON and suffix not in EXTENSION_YAML:
        raise ConfigError(f"Unsupported config file type: {path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            if suffix == EXTENSION_JSON:
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Error parsing config file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    return replace(base or MonitorConfig(), **_coerce(data))


config = MonitorConfig()
