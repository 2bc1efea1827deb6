import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, TextIO, Tuple

from ..core.browsers import BrowserInstaller, ChromeForTestingInstaller, installed_build_id
from ..core.config_loader import ConfigLoader
from ..core.env_store import CHROMEDRIVER_PATH_KEY, VERSION_KEY, EnvStore
from ..core.errors import (
    BrowserDriverManagerError,
    DownloadFailed,
    MalformedEnvironmentFile,
    MissingVersion,
    NoEnvironmentFile,
    StaleArtifactRemovalFailed,
    UnsupportedBrowser,
)
from ..data_models import (
    SUPPORTED_BROWSERS,
    Browser,
    InstalledBrowser,
    InstalledState,
    InstallRequest,
    ResolvedBuild,
)
from ..utils.progress import DownloadProgress
from .resolver import VersionResolver

logger = logging.getLogger(__name__)


class InstallState(Enum):
    NO_PRIOR_INSTALL = "no_prior_install"
    SAME_VERSION_INSTALLED = "same_version_installed"
    DIFFERENT_VERSION_INSTALLED = "different_version_installed"


class BrowserDriverInstaller:
    """Keeps a browser and its paired driver installed at one shared build.

    Resolves both builds first, compares them with the environment file, then
    downloads (and removes superseded builds) only when the recorded version
    differs. The environment file is written once, after both artifacts are in
    place.
    """

    def __init__(
        self,
        installer: Optional[BrowserInstaller] = None,
        store: Optional[EnvStore] = None,
        config_loader: Optional[ConfigLoader] = None,
        progress_sink: Optional[TextIO] = None,
    ):
        self.config_loader = config_loader if config_loader else ConfigLoader()
        self.installer = installer if installer is not None else ChromeForTestingInstaller(self.config_loader)
        self.store = store if store is not None else EnvStore()
        self.resolver = VersionResolver(self.installer)
        self.progress_sink = progress_sink

    @staticmethod
    def supported_browser(browser_name: str) -> Browser:
        for browser in SUPPORTED_BROWSERS:
            if browser.value == browser_name:
                return browser
        raise UnsupportedBrowser(browser_name, [b.value for b in SUPPORTED_BROWSERS])

    def install(self, browser_spec: str, *, verbose: bool = False,
                driver_version: Optional[str] = None) -> InstalledState:
        """Install ``browser[@version]`` and its driver, then record them.

        Returns the recorded state. Raises a BrowserDriverManagerError subclass
        on any failure; nothing is recorded unless both artifacts installed.
        """
        request = InstallRequest.parse(browser_spec, verbose=verbose is True, driver_version_spec=driver_version)
        browser = self.supported_browser(request.browser_name)
        driver = SUPPORTED_BROWSERS[browser]

        # Both resolutions happen before anything is downloaded or removed.
        browser_build = self.resolver.resolve(browser, request.version_spec)
        driver_build = self.resolver.resolve(driver, request.driver_version_spec or browser_build.build_id)

        builds = (browser_build, driver_build)
        state, prior, prior_builds = self._current_state(builds)
        prior_version = prior_builds.get(browser)

        if state is InstallState.SAME_VERSION_INSTALLED:
            logger.info(f"{browser.value} {prior_version} already installed")
            return prior
        if state is InstallState.DIFFERENT_VERSION_INSTALLED:
            changed = browser_build if prior_version != browser_build.build_id else driver_build
            logger.info(
                f"{changed.browser.value} {prior_builds.get(changed.browser)} already installed, "
                f"overwriting with {changed.build_id}"
            )

        cache_dir = self.store.cache_directory()
        # both stale builds go before either download
        removal_failures: List[Tuple[Browser, str]] = []
        for build in builds:
            stale_build_id = prior_builds.get(build.browser)
            if stale_build_id and stale_build_id != build.build_id:
                if not self._remove_stale(cache_dir, build, stale_build_id):
                    removal_failures.append((build.browser, stale_build_id))

        installed: Dict[Browser, InstalledBrowser] = {}
        for build in builds:
            installed[build.browser] = self._install_build(cache_dir, build, request.verbose)

        new_state = InstalledState(
            chrome_executable_path=installed[browser].executable_path,
            chromedriver_executable_path=installed[driver].executable_path,
            version=browser_build.build_id,
        )
        logger.info("Setting env CHROME/CHROMEDRIVER_TEST_PATH/VERSION")
        self.store.write(new_state)

        if removal_failures:
            failed_browser, failed_build_id = removal_failures[0]
            raise StaleArtifactRemovalFailed(failed_browser.value, failed_build_id)
        return new_state

    def _current_state(self, builds: Tuple[ResolvedBuild, ResolvedBuild]
                       ) -> Tuple[InstallState, Optional[InstalledState], Dict[Browser, str]]:
        """Classify the recorded install against the resolved builds.

        The browser's prior build is the recorded VERSION. The driver's prior
        build is read from its recorded path, since a separately requested
        driver build can differ from VERSION.
        """
        browser_build, driver_build = builds
        try:
            prior = self.store.read()
        except NoEnvironmentFile:
            return InstallState.NO_PRIOR_INSTALL, None, {}
        except MissingVersion:
            logger.warning(f"{self.store.env_path} has no version; treating as a fresh install.")
            return InstallState.NO_PRIOR_INSTALL, None, {}
        except MalformedEnvironmentFile as e:
            # version is known but a path is missing: reinstall over it
            logger.warning(f"{self.store.env_path} is incomplete ({e}); reinstalling.")
            entries = self.store.read_entries()
            prior_version = entries[VERSION_KEY]
            driver_path = entries.get(CHROMEDRIVER_PATH_KEY)
            prior_builds = {
                browser_build.browser: prior_version,
                driver_build.browser: (
                    installed_build_id(driver_path, driver_build.browser) if driver_path else None
                ) or prior_version,
            }
            return InstallState.DIFFERENT_VERSION_INSTALLED, None, prior_builds

        prior_builds = {
            browser_build.browser: prior.version,
            driver_build.browser: installed_build_id(
                prior.chromedriver_executable_path, driver_build.browser
            ) or prior.version,
        }
        if all(prior_builds[build.browser] == build.build_id for build in builds):
            return InstallState.SAME_VERSION_INSTALLED, prior, prior_builds
        return InstallState.DIFFERENT_VERSION_INSTALLED, prior, prior_builds

    def _remove_stale(self, cache_dir: Path, build: ResolvedBuild, stale_build_id: str) -> bool:
        try:
            self.installer.uninstall(cache_dir, build.browser, stale_build_id, build.platform)
        except Exception as e:
            logger.error(f"Unable to remove {build.browser.value} {stale_build_id}: {e}")
            return False
        return True

    def _install_build(self, cache_dir: Path, build: ResolvedBuild, verbose: bool) -> InstalledBrowser:
        progress = DownloadProgress(build.browser, sink=self.progress_sink, verbose=verbose)
        try:
            return self.installer.install(cache_dir, build.browser, build.build_id, build.platform, progress)
        except BrowserDriverManagerError:
            raise
        except Exception as e:
            raise DownloadFailed(str(e)) from e


def install(browser_spec: str, verbose: bool = False, driver_version: Optional[str] = None) -> InstalledState:
    """Install with the default Chrome for Testing installer and home-directory store."""
    return BrowserDriverInstaller().install(browser_spec, verbose=verbose, driver_version=driver_version)
