import io
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from browser_driver_manager.core.config_loader import ConfigLoader
from browser_driver_manager.core.env_store import EnvStore
from browser_driver_manager.data_models import InstalledBrowser
from browser_driver_manager.features.installer import BrowserDriverInstaller

MOCK_VERSION = "126.0.6442.0"
MOCK_PLATFORM = "linux64"


def fake_install(cache_dir, browser, build_id, platform, progress_callback=None):
    path = Path(cache_dir) / browser.value / f"{platform}-{build_id}" / browser.value
    return InstalledBrowser(browser=browser, build_id=build_id, platform=platform, executable_path=str(path))


@pytest.fixture
def home(tmp_path):
    return tmp_path / "mock-user-home-dir"


@pytest.fixture
def store(home):
    return EnvStore(home_provider=lambda: home)


@pytest.fixture
def config_loader(tmp_path):
    return ConfigLoader(settings_file=tmp_path / "no-settings.json")


@pytest.fixture
def fake_installer():
    installer = MagicMock()
    installer.detect_browser_platform.return_value = MOCK_PLATFORM
    installer.resolve_build_id.return_value = MOCK_VERSION
    installer.install.side_effect = fake_install
    return installer


@pytest.fixture
def progress_sink():
    return io.StringIO()


@pytest.fixture
def manager(fake_installer, store, config_loader, progress_sink):
    return BrowserDriverInstaller(
        installer=fake_installer,
        store=store,
        config_loader=config_loader,
        progress_sink=progress_sink,
    )
