"""Configuration management for errguard using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)


class RetrySettings(BaseModel):
    """Default retry-with-backoff parameters."""

    model_config = ConfigDict(extra="ignore")

    max_retries: int = 3
    initial_delay_ms: float = 1000
    max_delay_ms: float = 10000
    backoff_factor: float = 2


class HistorySettings(BaseModel):
    """Global error register configuration."""

    model_config = ConfigDict(extra="ignore")

    capacity: int = 10


class UISettings(BaseModel):
    """Toast and error display configuration."""

    model_config = ConfigDict(extra="ignore")

    # Visible duration per severity, in seconds
    toast_durations: dict[str, float] = Field(
        default_factory=lambda: {"critical": 8.0, "high": 5.0, "medium": 4.0, "low": 3.0}
    )
    show_retry_action: bool = True


class Settings(BaseSettings):
    """Main errguard configuration.

    Configuration is loaded from, highest priority first:
    1. Keyword arguments
    2. Environment variables (ERRGUARD_* prefix)
    3. Config file (~/.errguard/config.yml)
    4. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="ERRGUARD_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: str = Field(
        default="development", description="Either 'development' or 'production'"
    )
    log_level: str = "WARNING"

    # Feature flag overrides, keyed by flag name
    features: dict[str, bool] = Field(default_factory=dict)

    retry: RetrySettings = Field(default_factory=RetrySettings)
    history: HistorySettings = Field(default_factory=HistorySettings)
    ui: UISettings = Field(default_factory=UISettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # The YAML file sits below the environment so ERRGUARD_* always wins
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=get_config_path()),
            file_secret_settings,
        )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


def get_config_path() -> Path:
    """Get the config file path."""
    return Path.home() / ".errguard" / "config.yml"


def load_config_file() -> dict:
    """Load configuration from YAML file if it exists."""
    config_path = get_config_path()
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


def save_config_file(config: dict) -> None:
    """Save configuration to YAML file."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        yaml.safe_dump(config, f, default_flow_style=False)


def create_default_config() -> None:
    """Create a default config file if it doesn't exist."""
    config_path = get_config_path()
    if not config_path.exists():
        default_config = {
            "environment": "development",
            "log_level": "WARNING",
            "features": {},
            "retry": {
                "max_retries": 3,
                "initial_delay_ms": 1000,
                "max_delay_ms": 10000,
                "backoff_factor": 2,
            },
            "history": {
                "capacity": 10,
            },
            "ui": {
                "toast_durations": {"critical": 8.0, "high": 5.0, "medium": 4.0, "low": 3.0},
                "show_retry_action": True,
            },
        }
        save_config_file(default_config)


@lru_cache
def get_settings() -> Settings:
    """Get the application settings (cached).

    Loads from environment variables and config file.
    """
    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to reload configuration."""
    get_settings.cache_clear()
