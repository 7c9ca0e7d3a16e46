"""
Configuration management
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

VALID_SCHEDULE_UNITS = ["seconds", "minutes", "hours", "days", "weeks"]

ENV_OVERRIDES = {
    "SONARR_URL": "sonarr_url",
    "SONARR_API_KEY": "sonarr_api_key",
    "SABNZBD_URL": "sabnzbd_url",
    "SABNZBD_API_KEY": "sabnzbd_api_key",
    "SABNZBD_USERNAME": "sabnzbd_username",
    "SABNZBD_PASSWORD": "sabnzbd_password",
    "SABNZBD_CATEGORY": "sabnzbd_category",
    "FEEDARR_HISTORY_FILE": "history_file",
    "FEEDARR_LOG_LEVEL": "log_level",
}


@dataclass
class Config:
    """Application configuration"""

    sonarr_url: str
    sonarr_api_key: str
    sabnzbd_url: str | None = None
    sabnzbd_api_key: str | None = None
    sabnzbd_username: str | None = None
    sabnzbd_password: str | None = None
    sabnzbd_category: str = "tv"
    sabnzbd_priority: int = 0
    indexers: list = field(default_factory=list)
    history_file: str | None = "feedarr_history.json"
    max_workers: int = 4
    request_timeout: float = 30.0
    log_level: str = "INFO"
    # Schedules
    rss_interval: int = 15
    rss_unit: str = "minutes"
    backlog_interval: int = 1
    backlog_unit: str = "days"

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if not self.sonarr_url or not self.sonarr_api_key:
            raise ConfigError("Sonarr URL and API Key are required")
        for unit in (self.rss_unit, self.backlog_unit):
            if unit not in VALID_SCHEDULE_UNITS:
                raise ConfigError(
                    f"Invalid schedule unit '{unit}', valid units: {', '.join(VALID_SCHEDULE_UNITS)}"
                )
        if self.max_workers < 1:
            raise ConfigError("max_workers must be at least 1")
        if not isinstance(self.indexers, list):
            raise ConfigError("indexers must be a list")

    @property
    def sabnzbd_configured(self) -> bool:
        return bool(self.sabnzbd_url and self.sabnzbd_api_key)

    @classmethod
    def _build(cls, data: dict[str, Any]) -> "Config":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigError(str(e)) from e

    @classmethod
    def from_file(cls, config_path: Path) -> "Config":
        """Load configuration from a YAML file"""
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return cls._build(data)

    @classmethod
    def from_env_and_file(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file and/or environment variables"""
        config_data: dict[str, Any] = {}

        # Load from file if specified
        if config_path and config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}

        # Environment variables take priority
        for env_name, key in ENV_OVERRIDES.items():
            if os.getenv(env_name):
                config_data[key] = os.getenv(env_name)

        max_workers_env = os.getenv("FEEDARR_MAX_WORKERS")
        if max_workers_env:
            try:
                config_data["max_workers"] = int(max_workers_env)
            except ValueError as e:
                raise ConfigError(f"Invalid FEEDARR_MAX_WORKERS: {max_workers_env}") from e

        if "sonarr_url" not in config_data or "sonarr_api_key" not in config_data:
            raise ConfigError(
                "Incomplete configuration. Sonarr URL and API Key are required. "
                "Use a config file or environment variables."
            )

        return cls._build(config_data)

    def to_file(self, config_path: Path):
        """Save configuration to a YAML file"""
        data = {f.name: getattr(self, f.name) for f in fields(self)}

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, allow_unicode=True)
