# tests/test_settings_manager.py
import json
import pytest
from PyQt6.QtCore import QCoreApplication
from tuatara_sim.managers.settings_manager import SettingsManager, SettingCategory


@pytest.fixture
def settings_manager(qapp_args):
    # Use a unique org/app name for testing to not interfere with user settings
    QCoreApplication.setOrganizationName("Tuatara_Test_Org")
    QCoreApplication.setApplicationName("Tuatara_Test_App")
    sm = SettingsManager(app_name="Tuatara_Test_App")
    sm.settings.clear()  # Ensure a clean slate for each test
    sm.clear_cache()
    yield sm
    sm.settings.clear()  # Cleanup after test


def test_settings_manager_defaults(settings_manager):
    assert settings_manager.get("execution_max_steps") == 10000
    assert settings_manager.get("default_machine_kind") == "TM"
    assert settings_manager.get("default_alphabet") == "01"
    assert settings_manager.get("tape_initial_capacity") == 100
    assert settings_manager.get("notify_views_on_tape_change") is True
    assert settings_manager.get("recent_files") == []
    assert settings_manager.get("non_existent_key") is None
    assert settings_manager.get("non_existent_key", "fallback") == "fallback"


def test_settings_manager_set_get(settings_manager):
    assert settings_manager.set("execution_max_steps", 0)
    assert settings_manager.get("execution_max_steps") == 0

    assert settings_manager.set("default_machine_kind", "DFSA")
    assert settings_manager.get("default_machine_kind") == "DFSA"

    test_list = ["/path/a.tmachine", "/path/b.tmachine"]
    settings_manager.set("recent_files", test_list)
    assert settings_manager.get("recent_files") == test_list


def test_values_survive_a_cache_flush(settings_manager):
    settings_manager.set("tape_initial_capacity", 250)
    settings_manager.set("notify_views_on_tape_change", False)
    settings_manager.save_settings()
    settings_manager.clear_cache()
    assert settings_manager.get("tape_initial_capacity") == 250
    assert settings_manager.get("notify_views_on_tape_change") is False


@pytest.mark.parametrize("key, value", [
    ("tape_initial_capacity", 5),
    ("tape_initial_capacity", "100"),
    ("execution_max_steps", -1),
    ("execution_max_steps", True),
    ("default_machine_kind", "PDA"),
    ("default_alphabet", "0#1"),
    ("unknown_key", 1),
])
def test_invalid_values_are_refused(settings_manager, key, value):
    assert settings_manager.set(key, value) is False
    if key in settings_manager.DEFAULTS:
        assert settings_manager.get(key) == settings_manager.DEFAULTS[key]


def test_settings_manager_signal(settings_manager, qtbot):
    with qtbot.waitSignal(settings_manager.settingChanged, timeout=1000) as blocker:
        settings_manager.set("default_alphabet", "01AB")

    assert blocker.args == ["default_alphabet", "01AB"]


def test_recent_files_are_most_recent_first(settings_manager):
    settings_manager.add_recent_file("a.tmachine")
    settings_manager.add_recent_file("b.tmachine")
    settings_manager.add_recent_file("a.tmachine")
    assert settings_manager.get("recent_files") == ["a.tmachine", "b.tmachine"]


def test_reset_to_defaults(settings_manager, qtbot):
    settings_manager.set("execution_max_steps", 42)
    assert settings_manager.get("execution_max_steps") == 42

    changed = []
    settings_manager.settingChanged.connect(lambda key, value: changed.append(key))
    with qtbot.waitSignal(settings_manager.settingsReset, timeout=1000):
        settings_manager.reset_to_defaults()

    assert settings_manager.get("execution_max_steps") == 10000
    assert sorted(changed) == sorted(settings_manager.DEFAULTS)


def test_category_lookup(settings_manager):
    assert settings_manager.get_by_category(SettingCategory.TAPE) == {
        "tape_initial_capacity": 100,
        "notify_views_on_tape_change": True,
    }


def test_export_import(settings_manager, tmp_path):
    path = str(tmp_path / "settings.json")
    settings_manager.set("default_machine_kind", "DFSA")
    assert settings_manager.export_settings(path)

    settings_manager.reset_to_defaults()
    assert settings_manager.get("default_machine_kind") == "TM"
    assert settings_manager.import_settings(path)
    assert settings_manager.get("default_machine_kind") == "DFSA"


def test_import_skips_bad_entries(settings_manager, tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"execution_max_steps": -5, "bogus": 1, "default_alphabet": "ABC"}))
    assert settings_manager.import_settings(str(path))
    assert settings_manager.get("execution_max_steps") == 10000
    assert settings_manager.get("default_alphabet") == "ABC"
    assert not settings_manager.import_settings(str(tmp_path / "missing.json"))
