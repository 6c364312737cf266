"""Tests for schema models and store validation."""

from datetime import datetime, timedelta, timezone

import pytest

from barista_log import Bean, Extraction, Grinder, WeightPrecision, WeightUnit
from barista_log.exceptions import ValidationError
from barista_log.schema import LogSnapshot
from barista_log.store import validate_entity, validate_rating


def test_equipment_defaults():
    """Equipment with only a name should work."""
    grinder = Grinder(name="Niche Zero")
    assert grinder.id is None
    assert grinder.brand is None
    assert grinder.image_id is None
    assert grinder.image_data is None


def test_extraction_date_defaults_to_now():
    before = datetime.now()
    extraction = Extraction(grind_setting="12")
    assert before <= extraction.date <= datetime.now()


def test_extraction_bean_name():
    assert Extraction(grind_setting="12").bean_name is None
    assert Extraction(grind_setting="12", bean=Bean(name="Kenya AA")).bean_name == "Kenya AA"


def test_weight_unit_symbols():
    assert WeightUnit.GRAMS.symbol == "g"
    assert WeightUnit.OUNCES.symbol == "oz"


def test_weight_precision_labels():
    assert WeightPrecision.ZERO.label == "No decimals"
    assert WeightPrecision.ONE.label == "1 decimal"
    assert WeightPrecision.TWO.label == "2 decimals"


def test_snapshot_json_leaves_out_images_and_resolved_equipment():
    snapshot = LogSnapshot(
        beans=[Bean(id="b1", name="Kenya AA", image_id="i1", image_data=b"\xff\xd8")],
        extractions=[Extraction(id="e1", grind_setting="12", bean_id="b1", bean=Bean(name="Kenya AA"))],
    )

    data = snapshot.model_dump(mode="json")

    assert "image_data" not in data["beans"][0]
    assert data["beans"][0]["image_id"] == "i1"
    assert "bean" not in data["extractions"][0]
    assert data["extractions"][0]["bean_id"] == "b1"


def test_validate_trims_required_fields():
    clean = validate_entity(Extraction(grind_setting="  12  "))
    assert clean.grind_setting == "12"

    bean = validate_entity(Bean(name="  Kenya AA "))
    assert bean.name == "Kenya AA"


def test_validate_does_not_modify_input():
    original = Extraction(grind_setting=" 12 ")
    validate_entity(original)
    assert original.grind_setting == " 12 "


@pytest.mark.parametrize("grind", ["", "   ", "\t\n"])
def test_validate_rejects_blank_grind_setting(grind):
    with pytest.raises(ValidationError):
        validate_entity(Extraction(grind_setting=grind))


def test_validate_rejects_blank_name():
    with pytest.raises(ValidationError, match="bean name is required"):
        validate_entity(Bean(name="  "))


def test_validate_blank_optional_text_becomes_none():
    grinder = validate_entity(Grinder(name="Niche", brand="  ", notes=""))
    assert grinder.brand is None
    assert grinder.notes is None


def test_validate_converts_aware_date_to_local_naive():
    aware = datetime(2024, 5, 15, 8, 30, tzinfo=timezone(timedelta(hours=2)))

    clean = validate_entity(Extraction(grind_setting="12", date=aware))

    assert clean.date.tzinfo is None
    assert clean.date == aware.astimezone().replace(tzinfo=None)


@pytest.mark.parametrize("rating", [1, 3, 5, None])
def test_validate_rating_accepts_valid_values(rating):
    assert validate_rating(rating) == rating


@pytest.mark.parametrize("rating", [0, 6, -1, True, 2.5, "4"])
def test_validate_rating_rejects_invalid_values(rating):
    with pytest.raises(ValidationError):
        validate_rating(rating)


def test_validation_error_is_value_error():
    with pytest.raises(ValueError):
        validate_rating(9)
