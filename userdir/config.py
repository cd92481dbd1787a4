"""Configuration management for the user directory tools."""
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .auth import DEFAULT_SALT, DEFAULT_SESSION_TTL_MS
from .errors import ConfigurationError

DEFAULT_RANDOM_USER_URL = "https://randomuser.me/api/"
DEFAULT_PROFILE_API_URL = "https://jsonplaceholder.typicode.com"

_ENV_OVERRIDES = {
    "password_salt": "USERDIR_PASSWORD_SALT",
    "session_ttl_ms": "USERDIR_SESSION_TTL_MS",
    "random_user_url": "USERDIR_RANDOM_USER_URL",
    "profile_api_url": "USERDIR_PROFILE_API_URL",
    "http_timeout": "USERDIR_HTTP_TIMEOUT",
}


@dataclass(frozen=True)
class Settings:
    """Tunables shared by the CLI and the remote user client."""

    password_salt: str = DEFAULT_SALT
    session_ttl_ms: int = DEFAULT_SESSION_TTL_MS
    random_user_url: str = DEFAULT_RANDOM_USER_URL
    profile_api_url: str = DEFAULT_PROFILE_API_URL
    http_timeout: float = 10.0

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "Settings":
        """Create :class:`Settings` from raw dictionary data."""

        known = {item.name for item in fields(Settings)}
        unknown = set(data.keys()) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        defaults = Settings()
        try:
            session_ttl_ms = int(data.get("session_ttl_ms", defaults.session_ttl_ms))  # type: ignore[arg-type]
            http_timeout = float(data.get("http_timeout", defaults.http_timeout))  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid numeric configuration value: {exc}") from exc
        if session_ttl_ms <= 0:
            raise ConfigurationError("session_ttl_ms must be positive")
        if http_timeout <= 0:
            raise ConfigurationError("http_timeout must be positive")

        password_salt = str(data.get("password_salt", defaults.password_salt))
        if not password_salt:
            raise ConfigurationError("password_salt must not be empty")

        return Settings(
            password_salt=password_salt,
            session_ttl_ms=session_ttl_ms,
            random_user_url=str(data.get("random_user_url", defaults.random_user_url)).strip(),
            profile_api_url=str(data.get("profile_api_url", defaults.profile_api_url)).strip().rstrip("/"),
            http_timeout=http_timeout,
        )


def _env_overrides() -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    for key, env_name in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value is not None and value.strip() != "":
            overrides[key] = value.strip()
    return overrides


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings from a YAML file, then apply ``USERDIR_*`` environment overrides."""

    raw: Dict[str, object] = {}
    if config_path is not None and config_path.is_file():
        with config_path.open("r", encoding="utf-8") as handle:
            try:
                loaded = yaml.safe_load(handle) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Failed to parse {config_path}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigurationError("Configuration file must contain a mapping")
        raw.update(loaded)

    raw.update(_env_overrides())
    return Settings.from_dict(raw)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "userdir.yaml").resolve(strict=False)
    return candidate


__all__ = ["Settings", "load_settings", "resolve_config_path"]
