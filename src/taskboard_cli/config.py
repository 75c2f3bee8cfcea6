"""Configuration management for Taskboard CLI."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, field_validator

ENV_API_URL = "TASKBOARD_API_URL"
ENV_API_TOKEN = "TASKBOARD_API_TOKEN"


class APIConfig(BaseModel):
    """API configuration."""

    endpoint: str = Field(default="http://localhost:8080/api")
    timeout: int = Field(default=30)
    retry: int = Field(default=3, ge=0)
    token: str | None = Field(default=None)


class SyncConfig(BaseModel):
    """Task collection sync configuration."""

    page_size: int = Field(default=20, ge=1)


class UIConfig(BaseModel):
    """UI configuration."""

    calendar: Literal["jalali", "gregorian"] = Field(default="jalali")
    timezone: str | None = Field(default=None)  # None: system zone

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown time zone '{v}'") from e
        return v


class OutputConfig(BaseModel):
    """Output configuration."""

    format: str = Field(default="table")


class Config(BaseModel):
    """Main configuration."""

    api: APIConfig = Field(default_factory=APIConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


class ConfigManager:
    """Manages Taskboard CLI configuration profiles."""

    def __init__(self, profile: str = "default", config_dir: Path | None = None):
        self.profile = profile
        self.config_dir = Path(config_dir or user_config_dir("taskboard-cli"))
        self.config_file = self.config_dir / f"{profile}.json"

        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config: Config | None = None

    @property
    def config(self) -> Config:
        """Get the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> Config:
        """Load configuration from file."""
        if self.config_file.exists():
            try:
                with open(self.config_file, encoding="utf-8") as f:
                    data = json.load(f)
                return Config(**data)
            except Exception:
                # If config is corrupted, return default
                return Config()
        return Config()

    def save_config(self, config: Config | None = None) -> None:
        """Save configuration to file."""
        if config is None:
            config = self.config

        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(config.model_dump(), f, indent=2)

    @property
    def api_endpoint(self) -> str:
        """API endpoint with the environment override applied."""
        env_url = os.getenv(ENV_API_URL)
        if env_url:
            return env_url.rstrip("/")
        return self.config.api.endpoint.rstrip("/")

    @property
    def api_token(self) -> str | None:
        """Bearer token with the environment override applied."""
        return os.getenv(ENV_API_TOKEN) or self.config.api.token

    def get(self, key: str) -> Any:
        """Get a configuration value by dot-separated key."""
        return self.get_from_config(self.config, key)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-separated key."""
        keys = key.split(".")
        config_dict = self.config.model_dump()

        current = config_dict
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                raise KeyError(f"Unknown configuration key '{key}'")
            current = current[k]
        if keys[-1] not in current:
            raise KeyError(f"Unknown configuration key '{key}'")

        current[keys[-1]] = value

        # Validate before persisting
        self._config = Config(**config_dict)
        self.save_config()

    def reset(self, key: str | None = None) -> None:
        """Reset configuration (or a single key) to defaults."""
        if key is None:
            self._config = Config()
        else:
            self.set(key, self.get_from_config(Config(), key))
        self.save_config()

    @staticmethod
    def get_from_config(config: Config, key: str) -> Any:
        """Get value from a config object using dot notation."""
        value: Any = config
        for k in key.split("."):
            if isinstance(value, BaseModel):
                value = getattr(value, k, None)
            else:
                return None
        return value

    def list_profiles(self) -> list[str]:
        """List all available profiles."""
        return sorted(
            config_file.stem
            for config_file in self.config_dir.glob("*.json")
            if not config_file.name.startswith(".")
        )


# Global config manager instance
_config_manager: ConfigManager | None = None


def get_config_manager(profile: str = "default") -> ConfigManager:
    """Get or create the global config manager."""
    global _config_manager
    if _config_manager is None or _config_manager.profile != profile:
        _config_manager = ConfigManager(profile)
    return _config_manager
