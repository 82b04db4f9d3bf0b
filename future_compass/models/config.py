"""
Configuration Models

Pydantic models for application settings validation.
"""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Environment variables that override values from the settings file
ENV_OVERRIDES = {
    "FUTURE_COMPASS_BASE_URL": ("provider", "base_url"),
    "FUTURE_COMPASS_MODEL": ("provider", "model"),
    "FUTURE_COMPASS_LOG_LEVEL": (None, "log_level"),
}


class ProviderConfig(BaseModel):
    """Chat-completions endpoint the browser-side clients talk to."""

    base_url: str = Field(default="http://localhost:8787/api/openai")
    model: str = Field(default="gpt-5-nano")
    api_key: Optional[str] = Field(
        default=None,
        description="Only set when calling the provider directly instead of the proxy",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL so path joining stays predictable."""
        if not v.strip():
            raise ValueError("base_url must not be empty")
        return v.rstrip("/")


class ProxyConfig(BaseModel):
    """Credential proxy settings."""

    upstream_base_url: str = Field(default="https://api.openai.com/v1")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8787, gt=0, lt=65536)
    api_key_env: str = Field(default="OPENAI_API_KEY")

    @field_validator("upstream_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class Timeouts(BaseModel):
    """Timeout configuration in seconds."""

    provider: float = Field(default=60.0, gt=0)
    proxy_upstream: float = Field(default=120.0, gt=0)


class StorageConfig(BaseModel):
    """Where interview transcripts are kept."""

    interview_dir: str = Field(default="data/interviews")


class AppSettings(BaseModel):
    """Application settings model."""

    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    timeouts: Timeouts = Field(default_factory=Timeouts)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    log_level: str = Field(default="INFO")
    log_file: str = Field(default="logs/future-compass.log")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @classmethod
    def load(cls, config_path: Path | str | None = None) -> "AppSettings":
        """Load settings from a JSON file, then apply environment overrides.

        Args:
            config_path: Path to settings.json (defaults to config/settings.json).
                A missing default file means built-in defaults are used.

        Returns:
            AppSettings: Validated configuration

        Raises:
            FileNotFoundError: If an explicitly given config file doesn't exist
            ValueError: If config validation fails
        """
        explicit = config_path is not None
        config_path = Path(config_path) if explicit else Path("config/settings.json")

        config_data: dict = {}
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = json.load(f)
        elif explicit:
            raise FileNotFoundError(
                f"Config file not found: {config_path}. "
                f"Copy {config_path.stem}.example.json to {config_path.name}"
            )

        for env_name, (section, key) in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if not value:
                continue
            if section is None:
                config_data[key] = value
            else:
                config_data.setdefault(section, {})[key] = value

        return cls(**config_data)
