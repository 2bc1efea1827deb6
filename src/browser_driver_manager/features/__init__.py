"""
Features package.

Public API:
- BrowserDriverInstaller / install: install a browser and its paired driver.
- version / which: read-only views over the environment file.
"""

from .installer import BrowserDriverInstaller, InstallState, install
from .queries import version, which
from .resolver import VersionResolver

__all__ = ["BrowserDriverInstaller", "InstallState", "VersionResolver", "install", "version", "which"]
