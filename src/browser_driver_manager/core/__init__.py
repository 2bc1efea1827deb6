# This file makes browser_driver_manager.core a Python package and exposes key classes.

from .config_loader import ConfigLoader
from .env_store import EnvStore

__all__ = [
    "ConfigLoader",
    "EnvStore",
]
