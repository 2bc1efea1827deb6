"""browser-driver-manager: keep Chrome for Testing and chromedriver in sync.

Installs a browser and its matching driver at one build id and records their
locations in ``~/.browser-driver-manager/.env`` for test tooling to read.
"""
from .core.errors import BrowserDriverManagerError, ErrorKind  # noqa: F401
from .features import BrowserDriverInstaller, install, version, which  # noqa: F401

__version__ = "1.0.0"
