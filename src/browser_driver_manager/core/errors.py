"""Error taxonomy surfaced by install, version and which.

Every failure the CLI reports derives from BrowserDriverManagerError and
carries an ErrorKind so callers can branch on the kind instead of the text.
"""
from enum import Enum
from typing import Iterable


class ErrorKind(Enum):
    GENERIC = "generic"
    NO_ENVIRONMENT_FILE = "no_environment_file"
    MISSING_VERSION = "missing_version"
    MALFORMED_ENVIRONMENT_FILE = "malformed_environment_file"
    UNSUPPORTED_BROWSER = "unsupported_browser"
    PLATFORM_UNDETECTED = "platform_undetected"
    VERSION_RESOLUTION_FAILED = "version_resolution_failed"
    DOWNLOAD_FAILED = "download_failed"
    BUILD_NOT_PUBLISHED = "build_not_published"
    ENV_PERSIST_FAILED = "env_persist_failed"
    STALE_ARTIFACT_REMOVAL_FAILED = "stale_artifact_removal_failed"


class BrowserDriverManagerError(Exception):
    """Base exception carrying a normalized ErrorKind."""

    kind: ErrorKind = ErrorKind.GENERIC

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind.value)


class NoEnvironmentFile(BrowserDriverManagerError):
    kind = ErrorKind.NO_ENVIRONMENT_FILE

    def __init__(self):
        super().__init__("No environment file exists. Please install first")


class MalformedEnvironmentFile(BrowserDriverManagerError):
    kind = ErrorKind.MALFORMED_ENVIRONMENT_FILE

    def __init__(self, missing_key: str):
        self.missing_key = missing_key
        super().__init__(f"The environment file is missing {missing_key}.")


class MissingVersion(MalformedEnvironmentFile):
    kind = ErrorKind.MISSING_VERSION

    def __init__(self):
        self.missing_key = "VERSION"
        BrowserDriverManagerError.__init__(self, "No version found in the environment file.")


class UnsupportedBrowser(BrowserDriverManagerError):
    kind = ErrorKind.UNSUPPORTED_BROWSER

    def __init__(self, browser_name: str, supported: Iterable[str]):
        self.browser_name = browser_name
        self.supported = list(supported)
        names = ", ".join(f'"{name}"' for name in self.supported)
        verb = "is" if len(self.supported) == 1 else "are"
        super().__init__(
            f"The selected browser, {browser_name}, could not be installed. "
            f"Currently, only {names} {verb} supported."
        )


class PlatformUndetected(BrowserDriverManagerError):
    kind = ErrorKind.PLATFORM_UNDETECTED

    def __init__(self, browser_name: str):
        self.browser_name = browser_name
        super().__init__(f"Unable to detect browser platform for {browser_name}")


class VersionResolutionFailed(BrowserDriverManagerError):
    """Raised with the resolver's own message, unchanged."""

    kind = ErrorKind.VERSION_RESOLUTION_FAILED


class DownloadFailed(BrowserDriverManagerError):
    """Generic download/extract failure; the message is passed through verbatim."""

    kind = ErrorKind.DOWNLOAD_FAILED


class BuildNotPublished(DownloadFailed):
    kind = ErrorKind.BUILD_NOT_PUBLISHED

    def __init__(self, display_name: str, build_id: str, platform: str):
        self.build_id = build_id
        self.platform = platform
        super().__init__(f"{display_name} {build_id} is not available for {platform}")


class EnvPersistFailed(BrowserDriverManagerError):
    kind = ErrorKind.ENV_PERSIST_FAILED

    def __init__(self):
        super().__init__("Error setting CHROME/CHROMEDRIVER_TEST_PATH/VERSION")


class StaleArtifactRemovalFailed(BrowserDriverManagerError):
    kind = ErrorKind.STALE_ARTIFACT_REMOVAL_FAILED

    def __init__(self, browser_name: str, build_id: str):
        self.browser_name = browser_name
        self.build_id = build_id
        super().__init__(f"Unable to remove previous {browser_name} build {build_id}")
