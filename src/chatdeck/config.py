import os
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from chatdeck.conversation import FALLBACK_TEXT, WELCOME_TEXT

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    pass


def get_optional_env(name: str, default: str) -> str:
    return os.environ.get(name, default)


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if not value:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Types accepted for each key in a YAML config file.
_FILE_TYPES = {
    "base_url": (str,),
    "state_dir": (str,),
    "request_timeout_s": (int, float),
    "offline": (bool,),
    "welcome_text": (str,),
    "fallback_text": (str,),
}


@dataclass
class ClientConfig:
    base_url: str = field(
        default_factory=lambda: get_optional_env("CHATDECK_BASE_URL", "http://localhost:3000")
    )
    state_dir: str = field(
        default_factory=lambda: get_optional_env("CHATDECK_STATE_DIR", ".chatdeck")
    )
    request_timeout_s: float = field(
        default_factory=lambda: _env_float("CHATDECK_TIMEOUT", 60.0)
    )
    offline: bool = field(default_factory=lambda: _env_bool("CHATDECK_OFFLINE", False))
    welcome_text: str = WELCOME_TEXT
    fallback_text: str = FALLBACK_TEXT

    @classmethod
    def from_env(cls) -> "ClientConfig":
        return cls()

    @classmethod
    def from_file(cls, path: str | Path) -> "ClientConfig":
        """Load settings from a YAML mapping; environment variables win."""
        path_obj = Path(path)
        try:
            with path_obj.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        except FileNotFoundError as e:
            raise ConfigError(f"Config file not found: {path_obj}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file {path_obj}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Invalid config format in {path_obj}, expected a mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys in {path_obj}: {', '.join(unknown)}")

        config = cls()
        env_names = {
            "base_url": "CHATDECK_BASE_URL",
            "state_dir": "CHATDECK_STATE_DIR",
            "request_timeout_s": "CHATDECK_TIMEOUT",
            "offline": "CHATDECK_OFFLINE",
        }
        for key, value in data.items():
            env_name = env_names.get(key)
            if env_name and env_name in os.environ:
                continue
            expected = _FILE_TYPES[key]
            # bool is an int subclass, so only accept it where it is declared.
            wrong_bool = isinstance(value, bool) and bool not in expected
            if wrong_bool or not isinstance(value, expected):
                names = " or ".join(t.__name__ for t in expected)
                raise ConfigError(f"{key} in {path_obj} must be {names}, got {value!r}")
            setattr(config, key, value)
        logger.debug(f"Loaded config from {path_obj}")
        return config

    def validate(self) -> None:
        if not self.offline and not self.base_url.startswith(("http://", "https://")):
            raise ConfigError("base_url must start with http:// or https://")
        if not self.state_dir:
            raise ConfigError("state_dir must not be empty")
        try:
            self.request_timeout_s = float(self.request_timeout_s)
        except (TypeError, ValueError) as e:
            raise ConfigError("request_timeout_s must be a number") from e
        if self.request_timeout_s <= 0:
            raise ConfigError("request_timeout_s must be > 0")
        if not self.welcome_text.strip():
            raise ConfigError("welcome_text must not be empty")
        if not self.fallback_text.strip():
            raise ConfigError("fallback_text must not be empty")
        logger.debug("Configuration validated successfully")
