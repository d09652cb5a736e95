"""Configuration management for slmio.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- ReaderConfig: Parsing and lazy-loading settings
- WriterConfig: Layer ordering and output staging settings
- LoggingConfig: Logging settings
- SlmioSettings: Main application settings
"""

from slmio.config.settings import (
    LoggingConfig,
    ReaderConfig,
    SlmioSettings,
    WriterConfig,
    get_default_settings,
)

__all__ = [
    "LoggingConfig",
    "ReaderConfig",
    "SlmioSettings",
    "WriterConfig",
    "get_default_settings",
]
