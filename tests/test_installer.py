"""Tests for the install state machine, with the browser installer mocked out."""
import os
from unittest.mock import call, patch

import pytest

from browser_driver_manager.core.errors import (
    BuildNotPublished,
    DownloadFailed,
    EnvPersistFailed,
    PlatformUndetected,
    StaleArtifactRemovalFailed,
    UnsupportedBrowser,
    VersionResolutionFailed,
)
from browser_driver_manager.data_models import Browser
from browser_driver_manager.features.queries import version, which

from .conftest import MOCK_PLATFORM, MOCK_VERSION, fake_install

NEW_VERSION = "127.0.6533.0"


def _expected_env(store, build_id=MOCK_VERSION):
    cache = store.cache_directory()
    chrome = cache / "chrome" / f"{MOCK_PLATFORM}-{build_id}" / "chrome"
    driver = cache / "chromedriver" / f"{MOCK_PLATFORM}-{build_id}" / "chromedriver"
    return os.linesep.join([
        f'CHROME_TEST_PATH="{chrome}"',
        f'CHROMEDRIVER_TEST_PATH="{driver}"',
        f'VERSION="{build_id}"',
    ])


@pytest.mark.parametrize("name", ["firefox", "safari", "chromium", "chromedriver", ""])
def test_unsupported_browser_never_downloads(manager, fake_installer, store, name):
    with pytest.raises(UnsupportedBrowser):
        manager.install(name)
    fake_installer.install.assert_not_called()
    fake_installer.resolve_build_id.assert_not_called()
    assert not store.exists()


def test_unsupported_browser_message(manager):
    with pytest.raises(UnsupportedBrowser) as exc:
        manager.install("firefox")
    assert str(exc.value) == (
        'The selected browser, firefox, could not be installed. Currently, only "chrome" is supported.'
    )


def test_creates_cache_directory_and_env_file(manager, store):
    manager.install("chrome")
    assert store.cache_directory().is_dir()
    assert store.read_raw() == _expected_env(store)


def test_installs_browser_then_driver(manager, fake_installer, store):
    manager.install("chrome@latest")
    calls = fake_installer.install.call_args_list
    assert [c.args[1] for c in calls] == [Browser.CHROME, Browser.CHROMEDRIVER]
    assert all(c.args[0] == store.cache_directory() for c in calls)
    assert all(c.args[2] == MOCK_VERSION for c in calls)


def test_version_spec_is_passed_to_resolver(manager, fake_installer):
    manager.install("chrome@beta")
    assert fake_installer.resolve_build_id.call_args_list == [
        call(MOCK_PLATFORM, Browser.CHROME, "beta"),
        call(MOCK_PLATFORM, Browser.CHROMEDRIVER, MOCK_VERSION),
    ]


def test_driver_version_can_be_specified(manager, fake_installer):
    manager.install("chrome@126", driver_version="126.0.6442.0")
    assert fake_installer.resolve_build_id.call_args_list[1] == call(
        MOCK_PLATFORM, Browser.CHROMEDRIVER, "126.0.6442.0"
    )


def test_platform_not_detected(manager, fake_installer, store):
    fake_installer.detect_browser_platform.return_value = None
    with pytest.raises(PlatformUndetected) as exc:
        manager.install("chrome")
    assert str(exc.value) == "Unable to detect browser platform for chrome"
    fake_installer.install.assert_not_called()
    assert not store.exists()


def test_resolution_error_is_propagated_verbatim(manager, fake_installer):
    fake_installer.resolve_build_id.side_effect = ValueError("Invalid version: 99999")
    with pytest.raises(VersionResolutionFailed) as exc:
        manager.install("chrome@99999")
    assert str(exc.value) == "Invalid version: 99999"
    fake_installer.install.assert_not_called()
    fake_installer.uninstall.assert_not_called()


def test_driver_resolution_failure_prevents_browser_install(manager, fake_installer):
    fake_installer.resolve_build_id.side_effect = [MOCK_VERSION, VersionResolutionFailed("no driver build")]
    with pytest.raises(VersionResolutionFailed, match="no driver build"):
        manager.install("chrome")
    fake_installer.install.assert_not_called()


def test_same_version_is_idempotent(manager, fake_installer, store):
    manager.install("chrome")
    first = store.env_path.read_bytes()
    fake_installer.install.reset_mock()

    result = manager.install("chrome")

    fake_installer.install.assert_not_called()
    fake_installer.uninstall.assert_not_called()
    assert store.env_path.read_bytes() == first
    assert result.version == MOCK_VERSION


def test_different_version_overwrites(manager, fake_installer, store):
    manager.install("chrome")
    fake_installer.install.reset_mock()
    fake_installer.resolve_build_id.return_value = NEW_VERSION

    manager.install(f"chrome@{NEW_VERSION}")

    cache = store.cache_directory()
    assert fake_installer.uninstall.call_args_list == [
        call(cache, Browser.CHROME, MOCK_VERSION, MOCK_PLATFORM),
        call(cache, Browser.CHROMEDRIVER, MOCK_VERSION, MOCK_PLATFORM),
    ]
    assert [(c.args[1], c.args[2]) for c in fake_installer.install.call_args_list] == [
        (Browser.CHROME, NEW_VERSION),
        (Browser.CHROMEDRIVER, NEW_VERSION),
    ]
    assert version(store) == NEW_VERSION
    assert which(store) == _expected_env(store, NEW_VERSION)


def test_failed_second_resolution_keeps_previous_state(manager, fake_installer, store):
    manager.install("chrome")
    before = store.read_raw()
    fake_installer.resolve_build_id.side_effect = VersionResolutionFailed("Unable to resolve 1 for chrome")

    with pytest.raises(VersionResolutionFailed):
        manager.install("chrome@1")

    assert store.read_raw() == before
    assert store.read().version == MOCK_VERSION


def test_failed_resolutions_never_create_env_file(manager, fake_installer, store):
    fake_installer.resolve_build_id.side_effect = VersionResolutionFailed("bad version")
    for spec in ("chrome@x", "chrome@y"):
        with pytest.raises(VersionResolutionFailed):
            manager.install(spec)
        assert not store.exists()


def test_driver_download_failure_persists_nothing(manager, fake_installer, store):
    def install_side_effect(cache_dir, browser, build_id, platform, progress_callback=None):
        if browser is Browser.CHROMEDRIVER:
            raise RuntimeError("connection reset by peer")
        return fake_install(cache_dir, browser, build_id, platform)

    fake_installer.install.side_effect = install_side_effect
    with pytest.raises(DownloadFailed) as exc:
        manager.install("chrome")
    assert str(exc.value) == "connection reset by peer"
    assert not store.exists()


def test_build_not_published_is_not_rewrapped(manager, fake_installer):
    fake_installer.install.side_effect = BuildNotPublished("Chrome", MOCK_VERSION, MOCK_PLATFORM)
    with pytest.raises(BuildNotPublished) as exc:
        manager.install("chrome")
    assert str(exc.value) == f"Chrome {MOCK_VERSION} is not available for {MOCK_PLATFORM}"


def test_unable_to_write_env_file(manager, store):
    with patch("browser_driver_manager.core.env_store.os.replace", side_effect=OSError("read-only")):
        with pytest.raises(EnvPersistFailed) as exc:
            manager.install("chrome")
    assert str(exc.value) == "Error setting CHROME/CHROMEDRIVER_TEST_PATH/VERSION"
    assert not store.exists()


def test_stale_removal_failure_is_reported(manager, fake_installer, store):
    manager.install("chrome")
    fake_installer.resolve_build_id.return_value = NEW_VERSION
    fake_installer.uninstall.side_effect = PermissionError("busy")

    with pytest.raises(StaleArtifactRemovalFailed) as exc:
        manager.install("chrome")

    assert str(exc.value) == f"Unable to remove previous chrome build {MOCK_VERSION}"
    # new binaries are on disk, so the record follows them
    assert store.read().version == NEW_VERSION
    assert fake_installer.uninstall.call_count == 2


def test_env_without_version_is_a_fresh_install(manager, fake_installer, store):
    store.cache_directory().mkdir(parents=True)
    store.env_path.write_text('CHROME_TEST_PATH="/a"\nCHROMEDRIVER_TEST_PATH="/b"\n', encoding="utf-8")

    manager.install("chrome")

    fake_installer.uninstall.assert_not_called()
    assert store.read().version == MOCK_VERSION


def test_env_with_version_but_no_paths_is_reinstalled(manager, fake_installer, store):
    store.cache_directory().mkdir(parents=True)
    store.env_path.write_text(f'VERSION="{MOCK_VERSION}"\n', encoding="utf-8")

    manager.install("chrome")

    assert fake_installer.install.call_count == 2
    fake_installer.uninstall.assert_not_called()
    assert store.read_raw() == _expected_env(store)


def _calling_progress(*progress_args):
    def install_side_effect(cache_dir, browser, build_id, platform, progress_callback=None):
        progress_callback(*progress_args)
        return fake_install(cache_dir, browser, build_id, platform)
    return install_side_effect


@pytest.mark.parametrize("kwargs", [{}, {"verbose": False}])
def test_no_progress_output_unless_verbose(manager, fake_installer, progress_sink, kwargs):
    fake_installer.install.side_effect = _calling_progress(1, 100)
    manager.install("chrome", **kwargs)
    assert progress_sink.getvalue() == ""


def test_progress_callback_without_arguments_writes_nothing(manager, fake_installer, progress_sink):
    fake_installer.install.side_effect = _calling_progress()
    manager.install("chrome", verbose=True)
    assert progress_sink.getvalue() == ""


def test_verbose_writes_download_progress(manager, fake_installer, progress_sink):
    fake_installer.install.side_effect = _calling_progress(1, 100)
    manager.install("chrome", verbose=True)
    output = progress_sink.getvalue()
    assert "Downloading Chrome: 1%" in output
    assert "Downloading Chromedriver: 1%" in output


def test_verbose_writes_done(manager, fake_installer, progress_sink):
    fake_installer.install.side_effect = _calling_progress(100, 100)
    manager.install("chrome", verbose=True)
    assert "Downloading Chrome: Done!" in progress_sink.getvalue()


def _resolve_spec(platform, browser, spec):
    return MOCK_VERSION if spec in ("latest", MOCK_VERSION) else spec


def test_changed_driver_version_removes_previous_driver_build(manager, fake_installer, store):
    fake_installer.resolve_build_id.side_effect = _resolve_spec
    manager.install("chrome", driver_version="125.0.6422.0")
    fake_installer.install.reset_mock()

    manager.install("chrome", driver_version="125.0.6422.141")

    assert fake_installer.uninstall.call_args_list == [
        call(store.cache_directory(), Browser.CHROMEDRIVER, "125.0.6422.0", MOCK_PLATFORM),
    ]
    assert [(c.args[1], c.args[2]) for c in fake_installer.install.call_args_list] == [
        (Browser.CHROME, MOCK_VERSION),
        (Browser.CHROMEDRIVER, "125.0.6422.141"),
    ]
    state = store.read()
    assert state.version == MOCK_VERSION
    assert "125.0.6422.141" in state.chromedriver_executable_path


def test_unchanged_driver_version_is_idempotent(manager, fake_installer, store):
    fake_installer.resolve_build_id.side_effect = _resolve_spec
    manager.install("chrome", driver_version="125.0.6422.0")
    first = store.env_path.read_bytes()
    fake_installer.install.reset_mock()

    manager.install("chrome", driver_version="125.0.6422.0")

    fake_installer.install.assert_not_called()
    fake_installer.uninstall.assert_not_called()
    assert store.env_path.read_bytes() == first


def test_dropping_driver_override_removes_override_build(manager, fake_installer, store):
    fake_installer.resolve_build_id.side_effect = _resolve_spec
    manager.install("chrome", driver_version="125.0.6422.0")

    manager.install("chrome")

    assert fake_installer.uninstall.call_args_list == [
        call(store.cache_directory(), Browser.CHROMEDRIVER, "125.0.6422.0", MOCK_PLATFORM),
    ]
    assert store.read_raw() == _expected_env(store)


def test_stale_builds_removed_even_when_browser_download_fails(manager, fake_installer, store):
    manager.install("chrome")
    before = store.read_raw()
    fake_installer.resolve_build_id.return_value = NEW_VERSION
    fake_installer.install.side_effect = RuntimeError("connection reset by peer")

    with pytest.raises(DownloadFailed):
        manager.install("chrome")

    cache = store.cache_directory()
    assert fake_installer.uninstall.call_args_list == [
        call(cache, Browser.CHROME, MOCK_VERSION, MOCK_PLATFORM),
        call(cache, Browser.CHROMEDRIVER, MOCK_VERSION, MOCK_PLATFORM),
    ]
    assert store.read_raw() == before


def test_stale_removal_failure_names_the_driver_build(manager, fake_installer, store):
    fake_installer.resolve_build_id.side_effect = _resolve_spec
    manager.install("chrome", driver_version="125.0.6422.0")
    fake_installer.uninstall.side_effect = PermissionError("busy")

    with pytest.raises(StaleArtifactRemovalFailed) as exc:
        manager.install("chrome", driver_version="125.0.6422.141")

    assert str(exc.value) == "Unable to remove previous chromedriver build 125.0.6422.0"
