# tuatara_sim/managers/settings_manager.py
import json
import logging
from typing import Any, Dict, List, Optional, Union, Callable
from dataclasses import dataclass
from enum import Enum
from PyQt6.QtCore import QObject, pyqtSignal, QSettings, QTimer

from ..utils.config import (
    APP_NAME, ORGANIZATION_NAME, DEFAULT_ALPHABET_SYMBOLS, DEFAULT_MAX_STEPS, DEFAULT_TAPE_CAPACITY,
)

logger = logging.getLogger(__name__)

MAX_RECENT_FILES = 10


class SettingCategory(Enum):
    """Enumeration of setting categories for better organization."""
    EXECUTION = "execution"
    DEFAULTS = "defaults"
    TAPE = "tape"
    BEHAVIOR = "behavior"


@dataclass
class SettingDefinition:
    """Definition of a setting with metadata."""
    key: str
    default_value: Any
    category: SettingCategory
    description: str = ""
    validator: Optional[Callable[[Any], bool]] = None
    min_value: Optional[Union[int, float]] = None
    max_value: Optional[Union[int, float]] = None
    allowed_values: Optional[List[Any]] = None

    def validate(self, value: Any) -> bool:
        """Validate a value against this setting's constraints."""
        # Custom validator takes precedence
        if self.validator:
            return self.validator(value)

        # bool is an int subclass; keep the two apart
        if isinstance(value, bool) != isinstance(self.default_value, bool):
            return False
        if not isinstance(value, type(self.default_value)):
            return False

        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if self.min_value is not None and value < self.min_value:
                return False
            if self.max_value is not None and value > self.max_value:
                return False

        if self.allowed_values and value not in self.allowed_values:
            return False

        return True


def _is_alphabet_string(value: Any) -> bool:
    return isinstance(value, str) and all(c.isascii() and c.isalnum() for c in value)


class SettingsManager(QObject):
    """Persistent user settings for the simulator, with validation and caching."""

    settingChanged = pyqtSignal(str, object)
    settingsReset = pyqtSignal()

    SETTING_DEFINITIONS = {
        # Execution
        "execution_max_steps": SettingDefinition(
            "execution_max_steps", DEFAULT_MAX_STEPS, SettingCategory.EXECUTION,
            "Step budget for run-until-halt (0 means no limit)", min_value=0, max_value=10_000_000
        ),

        # New machine defaults
        "default_machine_kind": SettingDefinition(
            "default_machine_kind", "TM", SettingCategory.DEFAULTS,
            "Kind of machine created by File > New", allowed_values=["TM", "DFSA"]
        ),
        "default_alphabet": SettingDefinition(
            "default_alphabet", DEFAULT_ALPHABET_SYMBOLS, SettingCategory.DEFAULTS,
            "Letters and digits in the alphabet of a new machine", validator=_is_alphabet_string
        ),

        # Tape
        "tape_initial_capacity": SettingDefinition(
            "tape_initial_capacity", DEFAULT_TAPE_CAPACITY, SettingCategory.TAPE,
            "Cells allocated for a new tape", min_value=10, max_value=100000
        ),
        "notify_views_on_tape_change": SettingDefinition(
            "notify_views_on_tape_change", True, SettingCategory.TAPE,
            "Refresh views after every tape mutation"
        ),

        # Behavior
        "recent_files": SettingDefinition(
            "recent_files", [], SettingCategory.BEHAVIOR,
            "List of recently opened files"
        ),
    }

    DEFAULTS = {key: definition.default_value
                for key, definition in SETTING_DEFINITIONS.items()}

    def __init__(self, app_name=APP_NAME, parent=None):
        super().__init__(parent)
        self.app_name = app_name
        self.settings = QSettings(QSettings.Format.IniFormat, QSettings.Scope.UserScope,
                                  ORGANIZATION_NAME, app_name)

        # Cache for frequently accessed settings
        self._cache = {}

        # Batch update support
        self._batch_mode = False
        self._batch_changes = {}

        # Coalesces bursts of writes into one disk sync
        self._sync_timer = QTimer()
        self._sync_timer.setSingleShot(True)
        self._sync_timer.timeout.connect(self._perform_sync)
        self._sync_timer.setInterval(1000)

        logger.info(f"Settings will be loaded/saved at: {self.settings.fileName()}")
        self._init_defaults()

    def _init_defaults(self):
        """Initialize settings with defaults if they don't exist."""
        for key, definition in self.SETTING_DEFINITIONS.items():
            if not self.settings.contains(key):
                logger.info(f"Setting '{key}' not found, initializing with default: {definition.default_value}")
                self.settings.setValue(key, definition.default_value)
        self.settings.sync()

    def get(self, key: str, default_override=None) -> Any:
        """Get a setting value with caching and proper type conversion."""
        if key in self._cache:
            return self._cache[key]

        definition = self.SETTING_DEFINITIONS.get(key)
        if not definition:
            logger.warning(f"Unknown setting key: '{key}'")
            return default_override

        value = self.settings.value(key)
        default_value = default_override if default_override is not None else definition.default_value

        if value is None:
            logger.debug(f"Setting '{key}' is None in storage. Using default.")
            self._cache[key] = default_value
            return default_value

        try:
            converted_value = self._convert_value(value, definition.default_value)

            if not definition.validate(converted_value):
                logger.warning(f"Setting '{key}' value '{converted_value}' failed validation. Using default.")
                converted_value = default_value

            self._cache[key] = converted_value
            return converted_value

        except (ValueError, TypeError) as e:
            logger.warning(f"Could not convert setting '{key}' with value '{value}' to expected type. "
                           f"Error: {e}. Using default.")
            self._cache[key] = default_value
            return default_value

    def _convert_value(self, value: Any, default_value: Any) -> Any:
        """Convert a value read back from the INI file to match the type of the default value."""
        if isinstance(default_value, bool):
            if isinstance(value, str):
                return value.lower() in ('true', '1', 't', 'y', 'yes')
            return bool(value)
        elif isinstance(default_value, int):
            return int(value)
        elif isinstance(default_value, float):
            return float(value)
        elif isinstance(default_value, list) and not isinstance(value, list):
            if value == "":
                return []
            if isinstance(value, str):
                try:
                    return json.loads(value)
                except json.JSONDecodeError:
                    # QSettings stores a one-element list as a bare string
                    return [value]
            logger.warning(f"Could not convert value to list: {value}")
            return default_value
        return value

    def set(self, key: str, value: Any, save_immediately: bool = True) -> bool:
        """Set a setting value with validation and batching support."""
        definition = self.SETTING_DEFINITIONS.get(key)
        if not definition:
            logger.warning(f"Unknown setting key: '{key}'. Not setting.")
            return False
        if not definition.validate(value):
            logger.error(f"Setting '{key}' value '{value}' failed validation. Not setting.")
            return False

        old_value = self.get(key)
        if old_value == value and type(old_value) is type(value):
            logger.debug(f"Setting '{key}' set to same value: {value}. No change.")
            return True

        self._cache[key] = value

        if self._batch_mode:
            self._batch_changes[key] = value
        else:
            self.settings.setValue(key, value)
            if save_immediately:
                self._schedule_sync()
            self.settingChanged.emit(key, value)
            logger.info(f"Setting '{key}' changed to: {value}")

        return True

    def add_recent_file(self, file_path: str) -> None:
        """Move `file_path` to the front of the recent files list."""
        recent = [p for p in self.get("recent_files") if p != file_path]
        recent.insert(0, file_path)
        self.set("recent_files", recent[:MAX_RECENT_FILES])

    def get_by_category(self, category: SettingCategory) -> Dict[str, Any]:
        """Get all settings in a specific category."""
        return {key: self.get(key) for key, definition in self.SETTING_DEFINITIONS.items()
                if definition.category == category}

    def begin_batch_update(self):
        """Begin a batch update to avoid multiple sync operations."""
        self._batch_mode = True
        self._batch_changes.clear()

    def end_batch_update(self, save_immediately: bool = True):
        """End batch update and apply all changes."""
        if not self._batch_mode:
            return

        self._batch_mode = False

        for key, value in self._batch_changes.items():
            self.settings.setValue(key, value)
            self.settingChanged.emit(key, value)
            logger.info(f"Batch setting '{key}' changed to: {value}")

        if save_immediately:
            self._schedule_sync()

        self._batch_changes.clear()

    def _schedule_sync(self):
        self._sync_timer.start()

    def _perform_sync(self):
        self.settings.sync()
        logger.debug("Settings synced to disk.")

    def reset_to_defaults(self):
        """Reset all settings to their defaults."""
        logger.info("Resetting all settings to defaults.")

        self.begin_batch_update()
        try:
            self._cache.clear()
            for key, definition in self.SETTING_DEFINITIONS.items():
                self.settings.setValue(key, definition.default_value)
                self._cache[key] = definition.default_value
                self._batch_changes[key] = definition.default_value
        finally:
            self.end_batch_update(save_immediately=True)

        self.settingsReset.emit()
        logger.info("Settings have been reset to default values.")

    def export_settings(self, filepath: str) -> bool:
        """Export settings to a JSON file."""
        settings_data = {key: self.get(key) for key in self.SETTING_DEFINITIONS}
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(settings_data, f, indent=2)
        except (IOError, OSError, TypeError) as e:
            logger.error(f"Failed to export settings to '{filepath}': {e}", exc_info=True)
            return False
        logger.info(f"Settings exported to: {filepath}")
        return True

    def import_settings(self, filepath: str) -> bool:
        """Import settings from a JSON file. Unknown keys and invalid values are skipped."""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                settings_data = json.load(f)
        except (IOError, json.JSONDecodeError) as e:
            logger.error(f"Failed to import settings from '{filepath}': {e}", exc_info=True)
            return False
        if not isinstance(settings_data, dict):
            logger.error(f"Failed to import settings from '{filepath}': expected a JSON object.")
            return False

        self.begin_batch_update()
        try:
            for key, value in settings_data.items():
                if key in self.SETTING_DEFINITIONS:
                    self.set(key, value, save_immediately=False)
        finally:
            self.end_batch_update(save_immediately=True)

        logger.info(f"Settings imported from: {filepath}")
        return True

    def save_settings(self):
        """Force immediate save of all settings."""
        self._sync_timer.stop()
        self._perform_sync()

    def clear_cache(self):
        self._cache.clear()
