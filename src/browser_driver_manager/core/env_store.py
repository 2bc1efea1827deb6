"""Persisted environment file: the single record of what is installed.

The file lives at ``<home>/.browser-driver-manager/.env`` and holds exactly
three ``KEY="value"`` lines. Other modules go through EnvStore and never parse
the file themselves.
"""
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Dict

from dotenv import dotenv_values

from ..data_models import InstalledState
from .config_loader import CACHE_DIR_NAME
from .errors import EnvPersistFailed, MalformedEnvironmentFile, MissingVersion, NoEnvironmentFile

logger = logging.getLogger(__name__)

ENV_FILE_NAME = '.env'
CHROME_PATH_KEY = 'CHROME_TEST_PATH'
CHROMEDRIVER_PATH_KEY = 'CHROMEDRIVER_TEST_PATH'
VERSION_KEY = 'VERSION'


def _quote(value: str) -> str:
    # dotenv decodes backslash escapes inside double quotes (Windows paths)
    return '"' + value.replace('\\', '\\\\').replace('"', '\\"') + '"'


def format_env_text(state: InstalledState) -> str:
    lines = [
        f'{CHROME_PATH_KEY}={_quote(state.chrome_executable_path)}',
        f'{CHROMEDRIVER_PATH_KEY}={_quote(state.chromedriver_executable_path)}',
        f'{VERSION_KEY}={_quote(state.version)}',
    ]
    return os.linesep.join(lines)


class EnvStore:
    def __init__(self, home_provider: Callable[[], Path] = Path.home):
        self._home_provider = home_provider

    def cache_directory(self) -> Path:
        return Path(self._home_provider()) / CACHE_DIR_NAME

    @property
    def env_path(self) -> Path:
        return self.cache_directory() / ENV_FILE_NAME

    def exists(self) -> bool:
        return self.env_path.is_file()

    def read_raw(self) -> str:
        """Returns the file contents verbatim."""
        try:
            # newline='' keeps the platform line terminators as written
            with self.env_path.open('r', encoding='utf-8', newline='') as f:
                return f.read()
        except FileNotFoundError:
            raise NoEnvironmentFile() from None

    def read_entries(self) -> Dict[str, str]:
        """Key/value pairs in the file. Keys without a value are dropped."""
        if not self.exists():
            raise NoEnvironmentFile()
        values = dotenv_values(self.env_path, encoding='utf-8')
        return {key: value for key, value in values.items() if value is not None}

    def read(self) -> InstalledState:
        entries = self.read_entries()
        if not entries.get(VERSION_KEY):
            raise MissingVersion()
        for key in (CHROME_PATH_KEY, CHROMEDRIVER_PATH_KEY):
            if not entries.get(key):
                raise MalformedEnvironmentFile(key)
        return InstalledState(
            chrome_executable_path=entries[CHROME_PATH_KEY],
            chromedriver_executable_path=entries[CHROMEDRIVER_PATH_KEY],
            version=entries[VERSION_KEY],
        )

    def write(self, state: InstalledState) -> None:
        """Replace the whole file with ``state``.

        The new contents go to a temporary file in the cache directory which is
        then renamed over the old one, so a failed write leaves the previous
        file untouched.
        """
        cache_dir = self.cache_directory()
        tmp_path = None
        try:
            cache_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=ENV_FILE_NAME, suffix='.tmp', dir=cache_dir)
            with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
                f.write(format_env_text(state))
            os.replace(tmp_path, self.env_path)
            tmp_path = None
        except OSError as e:
            logger.error(f"Failed to write {self.env_path}: {e}")
            raise EnvPersistFailed() from e
        finally:
            if tmp_path is not None:
                try:
                    os.remove(tmp_path)
                except OSError:
                    logger.debug(f"Could not remove temporary file {tmp_path}")
        logger.debug(f"Wrote environment file {self.env_path}")
