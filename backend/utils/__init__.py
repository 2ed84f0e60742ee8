"""
Cargomon Utilities Package.

Configuration, logging and errors shared across all modules.
Requires Python 3.11+.
"""

from utils.config import Settings, WatchConfig, get_settings
from utils.errors import CargomonError
from utils.logger import configure_logging, get_logger, LoggerMixin

__all__ = [
    "Settings",
    "WatchConfig",
    "get_settings",
    "CargomonError",
    "configure_logging",
    "get_logger",
    "LoggerMixin",
]
