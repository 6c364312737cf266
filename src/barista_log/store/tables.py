"""SQLModel tables backing the entity store."""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class ImageRow(SQLModel, table=True):
    """Image bytes, kept out of line from the equipment records."""

    __tablename__ = "images"

    id: str = Field(primary_key=True)
    data: bytes
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))


class BeanRow(SQLModel, table=True):
    __tablename__ = "beans"

    id: str = Field(primary_key=True)
    name: str = Field(index=True)
    roaster: Optional[str] = None
    origin: Optional[str] = None
    roast_date: Optional[date] = None
    opened_date: Optional[date] = None
    notes: Optional[str] = None
    image_id: Optional[str] = Field(default=None, foreign_key="images.id")
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))


class GrinderRow(SQLModel, table=True):
    __tablename__ = "grinders"

    id: str = Field(primary_key=True)
    name: str = Field(index=True)
    brand: Optional[str] = None
    burr_type: Optional[str] = None
    burr_size: Optional[str] = None
    adjustment_notes: Optional[str] = None
    notes: Optional[str] = None
    image_id: Optional[str] = Field(default=None, foreign_key="images.id")
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))


class BrewerRow(SQLModel, table=True):
    __tablename__ = "brewers"

    id: str = Field(primary_key=True)
    name: str = Field(index=True)
    brand: Optional[str] = None
    brew_type: Optional[str] = None
    portafilter_size: Optional[str] = None
    basket_size: Optional[str] = None
    notes: Optional[str] = None
    image_id: Optional[str] = Field(default=None, foreign_key="images.id")
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))


class ExtractionRow(SQLModel, table=True):
    __tablename__ = "extractions"

    id: str = Field(primary_key=True)
    grind_setting: str
    dose_in: Optional[float] = None
    yield_out: Optional[float] = None
    time_seconds: Optional[float] = None
    rating: Optional[int] = None
    notes: Optional[str] = None
    # Nulled explicitly by EntityStore.delete; not left to the database.
    bean_id: Optional[str] = Field(default=None, foreign_key="beans.id", index=True)
    grinder_id: Optional[str] = Field(default=None, foreign_key="grinders.id", index=True)
    brewer_id: Optional[str] = Field(default=None, foreign_key="brewers.id", index=True)
    date: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False), index=True)
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))
