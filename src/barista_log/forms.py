"""Form state for recording and editing extractions."""

from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel

from barista_log.exceptions import ValidationError
from barista_log.preferences import Preferences
from barista_log.schema import Brewer, Extraction, Grinder
from barista_log.store import EntityStore


class ExtractionDraft(BaseModel):
    """Editable values behind the new/edit extraction form."""

    editing_id: str | None = None
    bean_id: str | None = None
    grinder_id: str | None = None
    brewer_id: str | None = None
    grind_setting: str = ""
    dose_in: float | None = None
    yield_out: float | None = None
    time_seconds: float | None = None
    rating: int | None = None
    notes: str = ""

    @classmethod
    def new(
        cls,
        *,
        grinders: Iterable[Grinder] = (),
        brewers: Iterable[Brewer] = (),
        preferences: Preferences | None = None,
    ) -> "ExtractionDraft":
        """Blank draft with the default grinder and brewer pre-selected by name."""
        draft = cls()
        if preferences is None:
            return draft
        if preferences.default_grinder_name:
            draft.grinder_id = _first_named(grinders, preferences.default_grinder_name)
        if preferences.default_brewer_name:
            draft.brewer_id = _first_named(brewers, preferences.default_brewer_name)
        return draft

    @classmethod
    def from_recent(cls, template: Extraction) -> "ExtractionDraft":
        """Copy the setup of a previous shot.

        Only the equipment, grind setting and dose carry over; yield, time,
        rating and notes belong to the earlier shot.
        """
        return cls(
            bean_id=template.bean_id,
            grinder_id=template.grinder_id,
            brewer_id=template.brewer_id,
            grind_setting=template.grind_setting,
            dose_in=template.dose_in,
        )

    @classmethod
    def for_edit(cls, extraction: Extraction) -> "ExtractionDraft":
        return cls(
            editing_id=extraction.id,
            bean_id=extraction.bean_id,
            grinder_id=extraction.grinder_id,
            brewer_id=extraction.brewer_id,
            grind_setting=extraction.grind_setting,
            dose_in=extraction.dose_in,
            yield_out=extraction.yield_out,
            time_seconds=extraction.time_seconds,
            rating=extraction.rating,
            notes=extraction.notes or "",
        )

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    @property
    def can_save(self) -> bool:
        return (
            self.bean_id is not None
            and self.grinder_id is not None
            and self.brewer_id is not None
            and bool(self.grind_setting.strip())
        )

    def toggle_rating(self, star: int) -> None:
        """Select ``star``, or clear the rating when it is already selected."""
        self.rating = None if self.rating == star else star

    def to_extraction(self) -> Extraction:
        return Extraction(**self._values())

    def save(self, store: EntityStore) -> str:
        """Create the extraction, or update the one being edited. Returns its identity."""
        if not self.can_save:
            raise ValidationError("bean, grinder, brewer and grind setting are required")

        if self.editing_id is None:
            return store.create(self.to_extraction())

        values = self._values()

        def apply(extraction: Extraction) -> None:
            for name, value in values.items():
                setattr(extraction, name, value)

        store.update(self.editing_id, apply)
        return self.editing_id

    def _values(self) -> dict[str, object]:
        return {
            "bean_id": self.bean_id,
            "grinder_id": self.grinder_id,
            "brewer_id": self.brewer_id,
            "grind_setting": self.grind_setting.strip(),
            "dose_in": self.dose_in,
            "yield_out": self.yield_out,
            "time_seconds": self.time_seconds,
            "rating": self.rating,
            "notes": self.notes or None,
        }


def _first_named(items: Iterable[Grinder | Brewer], name: str) -> str | None:
    for item in items:
        if item.name == name:
            return item.id
    return None
