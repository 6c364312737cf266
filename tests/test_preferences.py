"""Tests for preferences."""

import json
from datetime import date

import pytest

from barista_log import AppTheme, Preferences, WeightPrecision, WeightUnit
from barista_log.preferences import DEFAULTS, parse_value


def test_defaults(preferences):
    assert preferences.weight_unit is WeightUnit.GRAMS
    assert preferences.weight_precision is WeightPrecision.ONE
    assert preferences.theme is AppTheme.SYSTEM
    assert preferences.default_grinder_name == ""
    assert preferences.default_brewer_name == ""
    assert preferences.ai_coaching_enabled is True
    assert preferences.has_onboarded is False
    assert preferences.debug_show_onboarding is False


def test_missing_file_is_not_created_by_reading(tmp_path):
    path = tmp_path / "preferences.json"
    Preferences(path).as_dict()
    assert not path.exists()


def test_set_persists_across_instances(tmp_path):
    path = tmp_path / "preferences.json"
    first = Preferences(path)
    first.weight_unit = WeightUnit.OUNCES
    first.weight_precision = WeightPrecision.TWO
    first.default_grinder_name = "Niche Zero"
    first.ai_coaching_enabled = False

    second = Preferences(path)

    assert second.weight_unit is WeightUnit.OUNCES
    assert second.weight_precision is WeightPrecision.TWO
    assert second.default_grinder_name == "Niche Zero"
    assert second.ai_coaching_enabled is False
    assert json.loads(path.read_text())["weight_unit"] == "ounces"


def test_get_with_custom_key(preferences):
    assert preferences.get("missing", 7) == 7
    preferences.set("missing", 3)
    assert preferences.get("missing", 7) == 3


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text("{not json")

    preferences = Preferences(path)

    assert preferences.weight_unit is WeightUnit.GRAMS
    assert preferences.ai_coaching_enabled is True


def test_unusable_stored_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text(
        json.dumps({"weight_precision": 7, "weight_unit": "stones", "ai_coaching_enabled": "maybe", "theme": "dark"})
    )

    preferences = Preferences(path)

    assert preferences.weight_precision is WeightPrecision.ONE
    assert preferences.weight_unit is WeightUnit.GRAMS
    assert preferences.ai_coaching_enabled is True
    assert preferences.theme is AppTheme.DARK


def test_reset_restores_defaults(preferences):
    preferences.theme = AppTheme.DARK
    preferences.has_onboarded = True
    preferences.default_brewer_name = "Linea Mini"

    preferences.reset()

    assert preferences.as_dict() == DEFAULTS


def test_should_show_onboarding(preferences):
    assert preferences.should_show_onboarding is True
    preferences.has_onboarded = True
    assert preferences.should_show_onboarding is False
    preferences.debug_show_onboarding = True
    assert preferences.should_show_onboarding is True


def test_in_memory_preferences():
    preferences = Preferences()
    preferences.theme = AppTheme.LIGHT
    assert preferences.theme is AppTheme.LIGHT


def test_write_failure_keeps_value_in_memory(tmp_path, mocker, caplog):
    preferences = Preferences(tmp_path / "preferences.json")
    mocker.patch("barista_log.preferences.os.replace", side_effect=OSError("read-only"))

    preferences.theme = AppTheme.DARK

    assert preferences.theme is AppTheme.DARK
    assert "Could not write preferences" in caplog.text


@pytest.mark.parametrize(
    "key, text, expected",
    [
        ("weight_unit", "ounces", WeightUnit.OUNCES),
        ("weight_precision", "2", WeightPrecision.TWO),
        ("theme", "light", AppTheme.LIGHT),
        ("ai_coaching_enabled", "off", False),
        ("has_onboarded", "yes", True),
        ("default_grinder_name", "Niche Zero", "Niche Zero"),
    ],
)
def test_parse_value(key, text, expected):
    assert parse_value(key, text) == expected


def test_parse_value_rejects_unknown_key_and_bad_value():
    with pytest.raises(ValueError):
        parse_value("colour", "red")
    with pytest.raises(ValueError):
        parse_value("weight_unit", "stones")


def test_unencodable_value_is_dropped(tmp_path, caplog):
    path = tmp_path / "preferences.json"
    preferences = Preferences(path)
    preferences.theme = AppTheme.DARK

    preferences.set("last_opened", date(2024, 5, 1))
    preferences.weight_unit = WeightUnit.OUNCES

    assert preferences.get("last_opened", None) is None
    assert "cannot be stored" in caplog.text
    reloaded = Preferences(path)
    assert reloaded.weight_unit is WeightUnit.OUNCES
    assert reloaded.theme is AppTheme.DARK
    assert sorted(p.name for p in tmp_path.iterdir()) == ["preferences.json"]


def test_failed_write_leaves_no_temporary_file(tmp_path, mocker):
    mocker.patch("barista_log.preferences.os.replace", side_effect=OSError("read-only"))

    Preferences(tmp_path / "preferences.json").theme = AppTheme.LIGHT

    assert list(tmp_path.iterdir()) == []
