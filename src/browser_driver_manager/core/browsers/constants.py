from typing import Dict

from ...data_models import Browser

# Chrome for Testing endpoints
DEFAULT_DOWNLOAD_BASE_URL = "https://storage.googleapis.com/chrome-for-testing-public"
DEFAULT_RELEASE_BASE_URL = "https://googlechromelabs.github.io/chrome-for-testing"

DEFAULT_TIMEOUT_SECONDS = 60
DEFAULT_CHUNK_SIZE = 1024 * 128

# Symbolic version specs and the release channel they map to
CHANNEL_TAGS: Dict[str, str] = {
    "latest": "STABLE",
    "stable": "STABLE",
    "beta": "BETA",
    "dev": "DEV",
    "canary": "CANARY",
}

LINUX64 = "linux64"
MAC_X64 = "mac-x64"
MAC_ARM64 = "mac-arm64"
WIN32 = "win32"
WIN64 = "win64"

MAC_APP_BINARY = "Google Chrome for Testing.app/Contents/MacOS/Google Chrome for Testing"


def archive_name(browser: Browser, platform: str) -> str:
    return f"{browser.value}-{platform}.zip"


def relative_executable_path(browser: Browser, platform: str) -> str:
    """Executable location inside the extracted archive, '/'-separated."""
    folder = f"{browser.value}-{platform}"
    if browser is Browser.CHROME:
        if platform in (MAC_X64, MAC_ARM64):
            return f"{folder}/{MAC_APP_BINARY}"
        if platform in (WIN32, WIN64):
            return f"{folder}/chrome.exe"
        return f"{folder}/chrome"
    if platform in (WIN32, WIN64):
        return f"{folder}/chromedriver.exe"
    return f"{folder}/chromedriver"
