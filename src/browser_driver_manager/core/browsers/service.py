import logging
import shutil
import tempfile
from pathlib import Path, PurePath
from typing import Optional, Protocol

from ...data_models import Browser, InstalledBrowser
from ..config_loader import ConfigLoader
from . import fetcher
from .constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DOWNLOAD_BASE_URL,
    DEFAULT_RELEASE_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    archive_name,
    relative_executable_path,
)
from .platform import detect_browser_platform

logger = logging.getLogger(__name__)

ProgressCallback = fetcher.ProgressCallback


def install_directory(cache_dir: Path, browser: Browser, build_id: str, platform: str) -> Path:
    return Path(cache_dir) / browser.value / f"{platform}-{build_id}"


def installed_build_id(executable_path: str, browser: Browser) -> Optional[str]:
    """Build id from an executable path laid out by install_directory, or None.

    Looks for the last `<browser>/<platform>-<build_id>` pair of segments.
    """
    parts = PurePath(executable_path).parts
    for i in range(len(parts) - 2, -1, -1):
        if parts[i] != browser.value:
            continue
        platform, _, build_id = parts[i + 1].rpartition("-")
        if platform and fetcher.FULL_VERSION_RE.match(build_id):
            return build_id
    return None


class BrowserInstaller(Protocol):
    """Platform detection, build resolution, download and removal of browser builds."""

    def detect_browser_platform(self) -> Optional[str]: ...

    def resolve_build_id(self, platform: str, browser: Browser, version_spec: str) -> str: ...

    def install(self, cache_dir: Path, browser: Browser, build_id: str, platform: str,
                progress_callback: Optional[ProgressCallback] = None) -> InstalledBrowser: ...

    def uninstall(self, cache_dir: Path, browser: Browser, build_id: str, platform: str) -> None: ...


class ChromeForTestingInstaller:
    """BrowserInstaller backed by the Chrome for Testing download buckets."""

    def __init__(self, config_loader: Optional[ConfigLoader] = None):
        self.config_loader = config_loader if config_loader else ConfigLoader()
        self.timeout = int(self.config_loader.get_download_setting('timeout_seconds', DEFAULT_TIMEOUT_SECONDS))
        self.chunk_size = int(self.config_loader.get_download_setting('chunk_size', DEFAULT_CHUNK_SIZE))
        self.download_base_url = self.config_loader.get_download_setting('download_base_url', DEFAULT_DOWNLOAD_BASE_URL)
        self.release_base_url = self.config_loader.get_download_setting('release_base_url', DEFAULT_RELEASE_BASE_URL)

    def detect_browser_platform(self) -> Optional[str]:
        return detect_browser_platform()

    def resolve_build_id(self, platform: str, browser: Browser, version_spec: str) -> str:
        # Chrome and chromedriver share build ids, so platform does not change the answer.
        return fetcher.resolve_build_id(
            browser, version_spec, release_base_url=self.release_base_url, timeout=self.timeout
        )

    def install(self, cache_dir: Path, browser: Browser, build_id: str, platform: str,
                progress_callback: Optional[ProgressCallback] = None) -> InstalledBrowser:
        install_dir = install_directory(cache_dir, browser, build_id, platform)
        executable_path = install_dir / relative_executable_path(browser, platform)
        if executable_path.is_file():
            logger.info(f"{browser.value} {build_id} already present at {install_dir}")
        else:
            url = fetcher.download_url(browser, build_id, platform, self.download_base_url)
            install_dir.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.TemporaryDirectory(dir=install_dir.parent) as download_dir:
                archive_path = Path(download_dir) / archive_name(browser, platform)
                fetcher.download_archive(
                    url, archive_path, browser, build_id, platform, progress_callback,
                    timeout=self.timeout, chunk_size=self.chunk_size,
                )
                fetcher.install_archive(archive_path, install_dir)
            logger.info(f"{browser.value} {build_id} installed at {install_dir}")

        return InstalledBrowser(
            browser=browser,
            build_id=build_id,
            platform=platform,
            executable_path=str(executable_path.resolve()),
        )

    def uninstall(self, cache_dir: Path, browser: Browser, build_id: str, platform: str) -> None:
        install_dir = install_directory(cache_dir, browser, build_id, platform)
        if not install_dir.exists():
            logger.debug(f"Nothing to remove at {install_dir}")
            return
        shutil.rmtree(install_dir)
        logger.info(f"Removed {browser.value} {build_id} from {install_dir}")
