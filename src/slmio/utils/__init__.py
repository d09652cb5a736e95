"""Utility functions for slmio.

This module provides utility functions including:

- Logging setup and configuration
- Transfer statistics collection
"""

from slmio.utils.logging import (
    DocumentLogger,
    TransferStats,
    configure_logging,
)

__all__ = [
    "DocumentLogger",
    "TransferStats",
    "configure_logging",
]
