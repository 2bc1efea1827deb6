import logging

from ..core.browsers import BrowserInstaller
from ..core.errors import BrowserDriverManagerError, PlatformUndetected, VersionResolutionFailed
from ..data_models import Browser, ResolvedBuild

logger = logging.getLogger(__name__)


class VersionResolver:
    """Turns a browser plus version spec into a concrete platform and build id."""

    def __init__(self, installer: BrowserInstaller):
        self.installer = installer

    def resolve(self, browser: Browser, version_spec: str) -> ResolvedBuild:
        platform = self.installer.detect_browser_platform()
        if not platform:
            raise PlatformUndetected(browser.value)

        try:
            build_id = self.installer.resolve_build_id(platform, browser, version_spec)
        except BrowserDriverManagerError:
            raise
        except Exception as e:
            # keep the upstream wording, callers match on it
            raise VersionResolutionFailed(str(e)) from e

        logger.debug(f"Resolved {browser.value}@{version_spec} to {build_id} on {platform}")
        return ResolvedBuild(platform=platform, browser=browser, build_id=build_id)
