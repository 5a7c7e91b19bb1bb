"""
Merkle Tree Utilities Package.

Configuration and logging shared across the library.
Requires Python 3.11+.
"""

from utils.config import LoggingSettings, MerkleSettings, Settings, get_settings
from utils.logger import configure_logging, get_logger, logger, LoggerMixin

__all__ = [
    "Settings",
    "MerkleSettings",
    "LoggingSettings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "logger",
    "LoggerMixin",
]
