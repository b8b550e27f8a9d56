"""Core module - configuration and logging."""

from taskplan.core.config import Settings, clear_settings_cache, get_settings
from taskplan.core.logging import configure_logging

__all__ = [
    "Settings",
    "clear_settings_cache",
    "configure_logging",
    "get_settings",
]
