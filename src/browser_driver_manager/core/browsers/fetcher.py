import logging
import os
import re
import shutil
import stat
import tempfile
import zipfile
from pathlib import Path
from typing import Callable, Optional

import requests

from ...data_models import Browser
from ..errors import BuildNotPublished, DownloadFailed, VersionResolutionFailed
from .constants import (
    CHANNEL_TAGS,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DOWNLOAD_BASE_URL,
    DEFAULT_RELEASE_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    archive_name,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

FULL_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+\.\d+$")
PARTIAL_VERSION_RE = re.compile(r"^\d+(\.\d+\.\d+)?$")


def resolve_build_id(
    browser: Browser,
    version_spec: str,
    *,
    release_base_url: str = DEFAULT_RELEASE_BASE_URL,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
) -> str:
    """Turn a version spec into a concrete Chrome for Testing build id.

    Channel tags (latest/stable/beta/dev/canary) and partial versions
    (milestone "126" or build "126.0.6442") are looked up through the
    LATEST_RELEASE_* files; a full four-part version is returned unchanged.
    """
    spec = version_spec.strip().lower()
    if FULL_VERSION_RE.match(spec):
        return spec
    if spec in CHANNEL_TAGS:
        release_key = CHANNEL_TAGS[spec]
    elif PARTIAL_VERSION_RE.match(spec):
        release_key = spec
    else:
        raise VersionResolutionFailed(f"Invalid version: {version_spec}")

    url = f"{release_base_url.rstrip('/')}/LATEST_RELEASE_{release_key}"
    logger.debug(f"Resolving {browser.value}@{version_spec} via {url}")
    try:
        resp = requests.get(url, timeout=timeout)
    except requests.exceptions.RequestException as e:
        raise VersionResolutionFailed(f"Unable to resolve {version_spec} for {browser.value}: {e}") from e
    if resp.status_code == 404:
        raise VersionResolutionFailed(f"Unable to resolve {version_spec} for {browser.value}")
    if not resp.ok:
        raise VersionResolutionFailed(
            f"Unable to resolve {version_spec} for {browser.value}: HTTP {resp.status_code}"
        )

    build_id = resp.text.strip()
    if not FULL_VERSION_RE.match(build_id):
        raise VersionResolutionFailed(f"Unexpected build id '{build_id}' for {browser.value}@{version_spec}")
    return build_id


def download_url(browser: Browser, build_id: str, platform: str,
                 base_url: str = DEFAULT_DOWNLOAD_BASE_URL) -> str:
    return f"{base_url.rstrip('/')}/{build_id}/{platform}/{archive_name(browser, platform)}"


def download_archive(
    url: str,
    destination: Path,
    browser: Browser,
    build_id: str,
    platform: str,
    progress_callback: Optional[ProgressCallback] = None,
    *,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Path:
    """Stream url into destination, reporting (bytes_so_far, total_bytes).

    A 404 means the build is not published for this platform.
    """
    tmp_path = destination.with_name(destination.name + ".part")
    logger.info(f"Downloading {browser.value} {build_id} from: {url}")
    try:
        with requests.get(url, stream=True, timeout=timeout) as resp:
            if resp.status_code == 404:
                raise BuildNotPublished(browser.display_name, build_id, platform)
            resp.raise_for_status()

            content_length = resp.headers.get("content-length")
            total = int(content_length) if content_length and content_length.isdigit() else 0
            bytes_written = 0
            with open(tmp_path, "wb") as f:
                for chunk in resp.iter_content(chunk_size=chunk_size):
                    if not chunk:
                        continue
                    f.write(chunk)
                    bytes_written += len(chunk)
                    if progress_callback and total:
                        progress_callback(min(bytes_written, total), total)

        if total and bytes_written != total:
            raise DownloadFailed(
                f"Content length mismatch for {url}: expected {total}, got {bytes_written}"
            )
        if progress_callback and not total:
            progress_callback(bytes_written, bytes_written)
        os.replace(tmp_path, destination)
    except requests.exceptions.RequestException as e:
        raise DownloadFailed(str(e)) from e
    except OSError as e:
        raise DownloadFailed(str(e)) from e
    finally:
        if tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                logger.debug(f"Could not remove partial download {tmp_path}")
    logger.info(f"Downloaded {destination.name} ({destination.stat().st_size} bytes)")
    return destination


def _extract_symlink(zf: zipfile.ZipFile, info: zipfile.ZipInfo, target_dir: Path) -> None:
    """Recreate a symlink entry (the macOS .app frameworks rely on them)."""
    name = info.filename.rstrip("/")
    link_target = zf.read(info).decode("utf-8")
    if Path(name).is_absolute() or ".." in Path(name).parts or Path(link_target).is_absolute():
        raise DownloadFailed(f"Refusing to extract unsafe link {info.filename} -> {link_target}")
    link_path = target_dir / name
    link_path.parent.mkdir(parents=True, exist_ok=True)
    if link_path.is_symlink() or link_path.exists():
        link_path.unlink()
    os.symlink(link_target, link_path)


def extract_archive(archive_path: Path, target_dir: Path) -> None:
    """Unzip archive_path into target_dir and mark every file executable."""
    try:
        with zipfile.ZipFile(archive_path, "r") as zf:
            for info in zf.infolist():
                if stat.S_ISLNK(info.external_attr >> 16):
                    _extract_symlink(zf, info, target_dir)
                else:
                    zf.extract(info, target_dir)
    except (zipfile.BadZipFile, OSError) as e:
        raise DownloadFailed(f"Failed to extract {archive_path.name}: {e}") from e

    # zipfile drops unix permission bits
    for item in target_dir.rglob("*"):
        if item.is_file() and not item.is_symlink():
            current_permissions = item.stat().st_mode
            item.chmod(current_permissions | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def install_archive(archive_path: Path, install_dir: Path) -> None:
    """Extract into a sibling staging directory, then move it to install_dir."""
    install_dir.parent.mkdir(parents=True, exist_ok=True)
    staging_dir = Path(tempfile.mkdtemp(prefix=f".{install_dir.name}-", dir=install_dir.parent))
    try:
        extract_archive(archive_path, staging_dir)
        if install_dir.exists():
            shutil.rmtree(install_dir)
        os.replace(staging_dir, install_dir)
    except OSError as e:
        raise DownloadFailed(f"Failed to install into {install_dir}: {e}") from e
    finally:
        if staging_dir.exists():
            shutil.rmtree(staging_dir, ignore_errors=True)
