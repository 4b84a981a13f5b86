from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Any, cast
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from .env_auth import EnvAuthConfig, create_env_auth_manager
from .pylon_rest import DEFAULT_API_URL, DEFAULT_TIMEOUT

DEFAULT_CONFIG_FILE = "rooster.config.yaml"


class ConfigError(RuntimeError):
    pass


@dataclass
class RoosterConfig:
    source_file: Path | None = None
    # Pylon connection
    api_base_url: str = DEFAULT_API_URL
    api_token: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    fail_on_pagination: bool = True
    # Window defaults
    default_days: int = 1
    timezone: str | None = None
    # Logging configuration
    logging_json_enabled: bool = False
    logging_level: str = "INFO"
    # Environment authentication configuration
    env_auth_load_dotenv: bool = True
    env_auth_dotenv_path: str | None = None

    @classmethod
    def defaults(cls) -> RoosterConfig:
        return cls()

    def zone(self) -> tzinfo | None:
        return _load_zone(self.timezone) if self.timezone else None

    def env_auth_config(self) -> EnvAuthConfig:
        return EnvAuthConfig(
            load_dotenv=self.env_auth_load_dotenv,
            dotenv_path=self.env_auth_dotenv_path,
        )

    def resolve_token(self) -> str:
        """Return the configured token, falling back to the environment."""
        if self.api_token:
            return self.api_token
        token = create_env_auth_manager(self.env_auth_config()).get_api_token()
        if not token:
            raise ConfigError(
                "Pylon API token not configured; set PYLON_API_TOKEN or pylon.api_token"
            )
        return token


def _resolve_env_var(value: Any) -> Any:
    """Resolve ``$NAME`` values from the environment; unset resolves to None."""
    if isinstance(value, str) and value.startswith("$"):
        return os.getenv(value[1:]) or None
    return value


def _load_zone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(f"Unknown timezone: {name!r}") from exc


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section {key!r} must be a mapping")
    return cast(dict[str, Any], value)


def load_config(path: str | Path) -> RoosterConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Configuration file not found: {p}")
    try:
        raw = yaml.safe_load(p.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {p}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration root must be a mapping: {p}")
    pylon = _section(raw, "pylon")
    window = _section(raw, "window")
    logging_config = _section(raw, "logging")
    env_auth = _section(raw, "environment")

    try:
        timeout = float(pylon.get("timeout", DEFAULT_TIMEOUT))
        default_days = int(window.get("default_days", 1))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid numeric setting in {p}: {exc}") from exc
    if timeout <= 0:
        raise ConfigError(f"pylon.timeout must be positive, got {timeout}")
    if default_days < 1:
        raise ConfigError(f"window.default_days must be >= 1, got {default_days}")

    tz_name = window.get("timezone")
    if tz_name:
        _load_zone(str(tz_name))

    return RoosterConfig(
        source_file=p,
        api_base_url=str(pylon.get("base_url") or DEFAULT_API_URL),
        api_token=_resolve_env_var(pylon.get("api_token")),
        timeout=timeout,
        fail_on_pagination=bool(pylon.get("fail_on_pagination", True)),
        default_days=default_days,
        timezone=str(tz_name) if tz_name else None,
        logging_json_enabled=bool(logging_config.get("json_enabled", False)),
        logging_level=str(logging_config.get("level", "INFO")),
        env_auth_load_dotenv=bool(env_auth.get("load_dotenv", True)),
        env_auth_dotenv_path=env_auth.get("dotenv_path"),
    )


__all__ = ["ConfigError", "RoosterConfig", "load_config", "DEFAULT_CONFIG_FILE"]
