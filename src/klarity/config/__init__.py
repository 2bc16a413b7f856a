"""Configuration module for Klarity."""

from klarity.config.loader import ConfigLoader, load_config
from klarity.config.models import (
    AssistantConfig,
    BookingConfig,
    GraphConfig,
    LoggingConfig,
    MemoryConfig,
)

__all__ = [
    "AssistantConfig",
    "BookingConfig",
    "ConfigLoader",
    "GraphConfig",
    "LoggingConfig",
    "MemoryConfig",
    "load_config",
]
