# tuatara_sim/managers/__init__.py
from .signal_bus import SignalBus, signal_bus
from .settings_manager import SettingsManager, SettingDefinition, SettingCategory
from .execution_manager import ExecutionManager

__all__ = [
    "SignalBus",
    "signal_bus",
    "SettingsManager",
    "SettingDefinition",
    "SettingCategory",
    "ExecutionManager",
]
