"""Read-only views over the environment file."""
import sys
from typing import Optional, TextIO

from ..core.env_store import EnvStore


def version(store: Optional[EnvStore] = None, out: Optional[TextIO] = None) -> str:
    """Print and return the installed build id."""
    store = store or EnvStore()
    installed_version = store.read().version
    print(installed_version, file=out or sys.stdout)
    return installed_version


def which(store: Optional[EnvStore] = None, out: Optional[TextIO] = None) -> str:
    """Print and return the environment file exactly as stored."""
    store = store or EnvStore()
    store.read()
    contents = store.read_raw()
    print(contents, file=out or sys.stdout)
    return contents
