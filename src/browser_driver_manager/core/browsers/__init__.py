"""
Browser installer package.

Public API:
- BrowserInstaller: protocol the install orchestration depends on.
- ChromeForTestingInstaller: implementation backed by Chrome for Testing downloads.
- detect_browser_platform: host OS/arch to Chrome for Testing platform tag.
"""

from .platform import detect_browser_platform
from .service import BrowserInstaller, ChromeForTestingInstaller, install_directory, installed_build_id

__all__ = [
    "BrowserInstaller",
    "ChromeForTestingInstaller",
    "detect_browser_platform",
    "install_directory",
    "installed_build_id",
]
