# This file makes browser_driver_manager.utils a Python package and exposes key utilities.

from .logger import setup_logger
from .progress import DownloadProgress, format_progress

__all__ = [
    "DownloadProgress",
    "format_progress",
    "setup_logger",
]
