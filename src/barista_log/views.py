"""Display projections over extractions.

Everything here is a pure function of its arguments: nothing is cached and
nothing is written back to the store.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable

from barista_log.schema import Extraction, WeightPrecision, WeightUnit

GRAMS_PER_OUNCE = 28.349523125
HISTORY_LIMIT = 5


@dataclass(frozen=True)
class DayGroup:
    day: date
    label: str
    extractions: list[Extraction]


@dataclass(frozen=True)
class EquipmentHistory:
    recent: list[Extraction]
    total: int

    @property
    def remaining(self) -> int:
        return self.total - len(self.recent)

    @property
    def more_label(self) -> str | None:
        return f"+{self.remaining} more" if self.remaining > 0 else None


def group_by_day(extractions: Iterable[Extraction], now: datetime | None = None) -> list[DayGroup]:
    """Group extractions by local calendar day, newest day first.

    Within a day, extractions are ordered by time, newest first.
    """
    today = (now or datetime.now()).date()
    buckets: dict[date, list[Extraction]] = defaultdict(list)
    for extraction in extractions:
        buckets[_local(extraction.date).date()].append(extraction)

    return [
        DayGroup(
            day=day,
            label=section_label(day, today),
            extractions=sorted(items, key=lambda e: _local(e.date), reverse=True),
        )
        for day, items in sorted(buckets.items(), key=lambda item: item[0], reverse=True)
    ]


def section_label(day: date, today: date) -> str:
    delta = (today - day).days
    if delta == 0:
        return "Today"
    if delta == 1:
        return "Yesterday"
    return f"{day:%A}, {day:%B} {day.day}"


def equipment_history(extractions: Iterable[Extraction], limit: int = HISTORY_LIMIT) -> EquipmentHistory:
    """Newest extractions for a bean, grinder or brewer detail view."""
    ordered = sorted(extractions, key=lambda e: _local(e.date), reverse=True)
    return EquipmentHistory(recent=ordered[:limit], total=len(ordered))


def previous_extractions(extractions: Iterable[Extraction], target: Extraction) -> list[Extraction]:
    """Every extraction except ``target``, newest first."""
    others = [e for e in extractions if e.id != target.id]
    return sorted(others, key=lambda e: _local(e.date), reverse=True)


def most_recent(extractions: Iterable[Extraction]) -> Extraction | None:
    return max(extractions, key=lambda e: _local(e.date), default=None)


def brew_ratio(extraction: Extraction) -> float | None:
    """Yield divided by dose, or None unless both are present and dose > 0."""
    dose, yield_out = extraction.dose_in, extraction.yield_out
    if dose is None or yield_out is None or dose <= 0:
        return None
    return yield_out / dose


def format_ratio(extraction: Extraction, precision: WeightPrecision = WeightPrecision.ONE) -> str | None:
    ratio = brew_ratio(extraction)
    if ratio is None:
        return None
    return f"1:{ratio:.{int(precision)}f}"


def format_time(seconds: float) -> str:
    """``"3m 5s"`` from 185 seconds, ``"28s"`` below a minute. Truncates."""
    minutes, secs = divmod(int(seconds), 60)
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def grams_to_ounces(grams: float) -> float:
    return grams / GRAMS_PER_OUNCE


def format_weight(
    grams: float,
    unit: WeightUnit = WeightUnit.GRAMS,
    precision: WeightPrecision = WeightPrecision.ONE,
) -> str:
    value = grams_to_ounces(grams) if unit is WeightUnit.OUNCES else grams
    return f"{value:.{int(precision)}f} {unit.symbol}"


def format_rating(rating: int | None) -> str:
    if rating is None:
        return ""
    return "★" * rating + "☆" * (5 - rating)


def days_since(day: date | datetime, today: date | None = None) -> int:
    """Whole days from ``day`` to ``today``; used for bean freshness."""
    if isinstance(day, datetime):
        day = _local(day).date()
    return ((today or date.today()) - day).days


def measurement_fields(
    extraction: Extraction,
    unit: WeightUnit = WeightUnit.GRAMS,
    precision: WeightPrecision = WeightPrecision.ONE,
) -> list[tuple[str, str]]:
    """Label/value pairs for the measurements that are present."""
    fields: list[tuple[str, str]] = []
    if extraction.dose_in is not None:
        fields.append(("Dose In", format_weight(extraction.dose_in, unit, precision)))
    if extraction.yield_out is not None:
        fields.append(("Yield Out", format_weight(extraction.yield_out, unit, precision)))
    if extraction.time_seconds is not None:
        fields.append(("Time", format_time(extraction.time_seconds)))
    ratio = format_ratio(extraction, precision)
    if ratio is not None:
        fields.append(("Ratio", ratio))
    return fields


def _local(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value
