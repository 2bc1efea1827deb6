from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field


class Browser(str, Enum):
    CHROME = "chrome"
    CHROMEDRIVER = "chromedriver"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


# Primary browser -> paired driver. The driver is installed implicitly.
SUPPORTED_BROWSERS: Dict[Browser, Browser] = {
    Browser.CHROME: Browser.CHROMEDRIVER,
}

DEFAULT_VERSION_SPEC = "latest"


class InstalledState(BaseModel):
    chrome_executable_path: str = Field(..., description="Absolute path of the installed browser binary.")
    chromedriver_executable_path: str = Field(..., description="Absolute path of the installed driver binary.")
    version: str = Field(..., description="Build identifier shared by both binaries.")


class InstallRequest(BaseModel):
    browser_name: str
    version_spec: str = Field(DEFAULT_VERSION_SPEC, description="Tag such as 'latest', a milestone, or a concrete build id.")
    driver_version_spec: Optional[str] = Field(None, description="Driver version spec; None means match the browser build.")
    verbose: bool = False

    @classmethod
    def parse(cls, browser_spec: str, *, verbose: bool = False, driver_version_spec: Optional[str] = None) -> "InstallRequest":
        """Split ``name@version`` into an InstallRequest. A bare name means latest."""
        name, _, version_spec = browser_spec.strip().partition("@")
        return cls(
            browser_name=name.strip().lower(),
            version_spec=version_spec.strip() or DEFAULT_VERSION_SPEC,
            driver_version_spec=driver_version_spec,
            verbose=verbose,
        )


class ResolvedBuild(BaseModel):
    platform: str
    browser: Browser
    build_id: str


class InstalledBrowser(BaseModel):
    browser: Browser
    build_id: str
    platform: str
    executable_path: str
