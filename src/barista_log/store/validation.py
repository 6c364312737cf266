"""Invariant checks applied at the store boundary."""

from __future__ import annotations

import math
from datetime import datetime

from barista_log.exceptions import ValidationError
from barista_log.schema import Bean, Brewer, Equipment, Extraction, Grinder

Entity = Bean | Grinder | Brewer | Extraction

RATING_MIN = 1
RATING_MAX = 5

_OPTIONAL_TEXT: dict[type, tuple[str, ...]] = {
    Bean: ("roaster", "origin", "notes"),
    Grinder: ("brand", "burr_type", "burr_size", "adjustment_notes", "notes"),
    Brewer: ("brand", "brew_type", "portafilter_size", "basket_size", "notes"),
    Extraction: ("notes",),
}


def validate_entity(entity: Entity) -> Entity:
    """Return a normalized copy of ``entity`` or raise ValidationError.

    Required strings are trimmed, blank optional text becomes ``None`` and
    aware datetimes are converted to local time.
    """
    if isinstance(entity, Extraction):
        updates = _validate_extraction(entity)
    elif isinstance(entity, Equipment):
        updates = _validate_equipment(entity)
    else:
        raise ValidationError(f"Unsupported entity type: {type(entity).__name__}")

    for field in _OPTIONAL_TEXT.get(type(entity), ()):
        updates[field] = _clean_text(field, getattr(entity, field))

    return entity.model_copy(update=updates)


def validate_rating(rating: object) -> int | None:
    if rating is None:
        return None
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError(f"rating must be an integer, got {rating!r}")
    if not RATING_MIN <= rating <= RATING_MAX:
        raise ValidationError(f"rating must be between {RATING_MIN} and {RATING_MAX}, got {rating}")
    return rating


def _validate_equipment(entity: Equipment) -> dict[str, object]:
    label = type(entity).__name__.lower()
    name = entity.name
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"{label} name is required")
    return {"name": name.strip()}


def _validate_extraction(entity: Extraction) -> dict[str, object]:
    grind = entity.grind_setting
    if not isinstance(grind, str) or not grind.strip():
        raise ValidationError("grind setting is required")

    updates: dict[str, object] = {
        "grind_setting": grind.strip(),
        "rating": validate_rating(entity.rating),
        "date": _local_datetime(entity.date),
    }
    for field in ("dose_in", "yield_out", "time_seconds"):
        updates[field] = _measurement(field, getattr(entity, field))
    return updates


def _measurement(field: str, value: object) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValidationError(f"{field} must be finite")
    if value < 0:
        raise ValidationError(f"{field} must not be negative, got {value}")
    return float(value)


def _local_datetime(value: object) -> datetime:
    if not isinstance(value, datetime):
        raise ValidationError(f"date must be a datetime, got {value!r}")
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def _clean_text(field: str, value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be text, got {value!r}")
    return value if value.strip() else None
