"""Configuration module."""

from src.config.logging import aggregate_context, configure_logging, get_logger
from src.config.settings import (
    CostingSettings,
    Settings,
    StorageSettings,
    get_settings,
    reset_settings,
)

__all__ = [
    "Settings",
    "CostingSettings",
    "StorageSettings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "aggregate_context",
    "get_logger",
]
