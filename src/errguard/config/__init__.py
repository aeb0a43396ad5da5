"""Configuration for errguard."""

from errguard.config.settings import (
    Settings,
    create_default_config,
    get_settings,
    reset_settings_cache,
)

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings_cache",
    "create_default_config",
]
