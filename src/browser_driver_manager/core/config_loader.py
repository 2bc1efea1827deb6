import json
import logging
import os
from pathlib import Path
from typing import Dict, Any, Callable, Optional, Union

CACHE_DIR_NAME = '.browser-driver-manager'
SETTINGS_FILE_NAME = 'settings.json'
SETTINGS_ENV_VAR = 'BDM_SETTINGS_FILE'

logger = logging.getLogger(__name__)


def default_settings_file(home_provider: Callable[[], Path] = Path.home) -> Path:
    """Settings file path: $BDM_SETTINGS_FILE if set, else <home>/.browser-driver-manager/settings.json."""
    override = os.environ.get(SETTINGS_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path(home_provider()) / CACHE_DIR_NAME / SETTINGS_FILE_NAME


class ConfigLoader:
    def __init__(self, settings_file: Optional[Union[str, Path]] = None):
        """
        Initializes the ConfigLoader.

        Args:
            settings_file (Optional[Union[str, Path]]): Path to the settings JSON file.
                Defaults to $BDM_SETTINGS_FILE or '<home>/.browser-driver-manager/settings.json'.
                The file is optional; a missing file means built-in defaults everywhere.
        """
        self.settings_file: Path = Path(settings_file) if settings_file else default_settings_file()
        self.settings: Dict[str, Any] = self._load_json(self.settings_file, default_value={})

    def _load_json(self, file_path: Path, default_value: Dict[str, Any]) -> Dict[str, Any]:
        """
        Loads a JSON object from file_path.

        Returns:
            Dict[str, Any]: The loaded mapping, or default_value if the file is
            absent, unreadable, or does not contain a JSON object.
        """
        if not file_path.exists():
            logger.debug(f"Settings file not found: {file_path}. Using defaults.")
            return default_value
        if not file_path.is_file():
            logger.error(f"Settings path is not a file: {file_path}")
            return default_value

        try:
            with file_path.open('r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Could not decode JSON from {file_path}: {e}")
            return default_value
        except OSError as e:
            logger.error(f"Could not read settings file {file_path}: {e}")
            return default_value

        if not isinstance(data, dict):
            logger.error(f"Settings file {file_path} must contain a JSON object, found {type(data).__name__}.")
            return default_value
        logger.debug(f"Successfully loaded settings from {file_path}")
        return data

    def get_settings(self) -> Dict[str, Any]:
        """Returns all loaded settings."""
        return self.settings

    def get_setting(self, path_str: str, default: Any = None) -> Any:
        """
        Retrieves a setting value using a dot-separated path.

        Args:
            path_str (str): Dot-separated path to the setting (e.g., "logging.level").
            default (Any, optional): Default value if the setting is not found. Defaults to None.

        Returns:
            Any: The setting value or the default.
        """
        current_level: Any = self.settings
        for key in path_str.split('.'):
            if not isinstance(current_level, dict):
                logger.warning(f"Invalid path '{path_str}' at key '{key}'. Expected a dictionary, found {type(current_level).__name__}.")
                return default
            if key not in current_level:
                return default
            current_level = current_level[key]
        return current_level

    def get_logging_setting(self, setting_name: str, default: Any = None) -> Any:
        """Retrieves a specific setting from the 'logging' block."""
        return self.get_setting(f'logging.{setting_name}', default)

    def get_download_setting(self, setting_name: str, default: Any = None) -> Any:
        """Retrieves a specific setting from the 'download' block."""
        return self.get_setting(f'download.{setting_name}', default)
