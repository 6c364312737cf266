"""Data models for barista-log."""

from datetime import date, datetime
from enum import Enum, IntEnum

from pydantic import BaseModel, Field


class WeightUnit(str, Enum):
    """Unit used when displaying weights. Stored magnitudes are always grams."""

    GRAMS = "grams"
    OUNCES = "ounces"

    @property
    def symbol(self) -> str:
        return "g" if self is WeightUnit.GRAMS else "oz"


class WeightPrecision(IntEnum):
    """Number of decimal places shown for weights and ratios."""

    ZERO = 0
    ONE = 1
    TWO = 2

    @property
    def label(self) -> str:
        if self is WeightPrecision.ZERO:
            return "No decimals"
        return f"{self.value} decimal" + ("s" if self.value > 1 else "")


class AppTheme(str, Enum):
    SYSTEM = "system"
    LIGHT = "light"
    DARK = "dark"


class Equipment(BaseModel):
    """Fields shared by beans, grinders and brewers.

    ``image_data`` is only populated when explicitly requested from the store;
    records carry ``image_id`` pointing at the out-of-line image row.
    """

    id: str | None = None
    name: str = ""
    notes: str | None = None
    image_id: str | None = None
    image_data: bytes | None = Field(default=None, repr=False, exclude=True)


class Bean(Equipment):
    """A coffee bean, usually one bag."""

    roaster: str | None = None
    origin: str | None = None
    roast_date: date | None = None
    opened_date: date | None = None


class Grinder(Equipment):
    """A coffee grinder."""

    brand: str | None = None
    burr_type: str | None = None
    burr_size: str | None = None
    adjustment_notes: str | None = None


class Brewer(Equipment):
    """An espresso machine or other brewing device."""

    brand: str | None = None
    brew_type: str | None = None
    portafilter_size: str | None = None
    basket_size: str | None = None


class Extraction(BaseModel):
    """A single recorded shot.

    Equipment references are plain identities. Snapshots read from the store
    also carry the resolved ``bean``, ``grinder`` and ``brewer`` records; those
    are ignored on write.
    """

    id: str | None = None
    grind_setting: str = ""
    dose_in: float | None = None
    yield_out: float | None = None
    time_seconds: float | None = None
    rating: int | None = None
    notes: str | None = None
    bean_id: str | None = None
    grinder_id: str | None = None
    brewer_id: str | None = None
    bean: Bean | None = Field(default=None, exclude=True)
    grinder: Grinder | None = Field(default=None, exclude=True)
    brewer: Brewer | None = Field(default=None, exclude=True)
    date: datetime = Field(default_factory=datetime.now)

    @property
    def bean_name(self) -> str | None:
        return self.bean.name if self.bean else None


class LogSnapshot(BaseModel):
    """Everything in the store, read in one session."""

    version: int = 1
    beans: list[Bean] = Field(default_factory=list)
    grinders: list[Grinder] = Field(default_factory=list)
    brewers: list[Brewer] = Field(default_factory=list)
    extractions: list[Extraction] = Field(default_factory=list)
