"""Entity store: create, update, delete and query beans, equipment and shots."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, TypeVar

from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from barista_log.exceptions import EntityNotFoundError, PersistenceError, ValidationError
from barista_log.schema import Bean, Brewer, Equipment, Extraction, Grinder, LogSnapshot
from barista_log.store.tables import BeanRow, BrewerRow, ExtractionRow, GrinderRow, ImageRow
from barista_log.store.validation import Entity, validate_entity

logger = logging.getLogger(__name__)

E = TypeVar("E", Bean, Grinder, Brewer, Extraction)

Action = Literal["created", "updated", "deleted", "reset"]
Mutator = Callable[[E], "E | None"]

_ROW_TYPES: dict[type, type[SQLModel]] = {
    Bean: BeanRow,
    Grinder: GrinderRow,
    Brewer: BrewerRow,
    Extraction: ExtractionRow,
}

# Extraction column that points at each equipment type.
_REFERENCE_COLUMNS: dict[type, str] = {
    Bean: "bean_id",
    Grinder: "grinder_id",
    Brewer: "brewer_id",
}

_DEFAULT_SORT: dict[type, tuple[str, bool]] = {
    Bean: ("name", False),
    Grinder: ("name", False),
    Brewer: ("name", False),
    Extraction: ("date", True),
}

_NOT_STORED = {"id", "image_data", "bean", "grinder", "brewer"}


@dataclass(frozen=True)
class StoreEvent:
    """Something changed in the store."""

    action: Action
    entity_type: str | None = None
    identity: str | None = None


Subscriber = Callable[[StoreEvent], None]


def create_store_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine, preparing SQLite files and in-memory databases."""
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite"):
        return create_engine(database_url, echo=echo)

    database = url.database
    if not database or database == ":memory:":
        # One shared connection, otherwise every session sees an empty database.
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    directory = Path(database).expanduser().parent
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PersistenceError(f"Cannot create data directory {directory}: {exc}") from exc
    return create_engine(database_url, echo=echo, connect_args={"check_same_thread": False})


class EntityStore:
    """Durable store for beans, grinders, brewers and extractions.

    Every public method runs in its own session and transaction. Writes are
    expected to come from a single coordinating thread; the store does no
    locking of its own.
    """

    def __init__(self, database_url: str = "sqlite://", *, engine: Engine | None = None, echo: bool = False):
        self.engine = engine or create_store_engine(database_url, echo=echo)
        self._subscribers: list[Subscriber] = []
        self.init_db()

    def init_db(self) -> None:
        try:
            SQLModel.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to initialize storage: {exc}") from exc

    # ------------------------------------------------------------------ observers

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call ``callback`` after every committed change. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, event: StoreEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("store subscriber failed for %s", event)

    # ------------------------------------------------------------------ mutations

    def create(self, entity: Entity) -> str:
        """Validate and persist a new entity, returning its identity.

        The caller's ``id`` and ``image_id`` are ignored; ``image_data`` on
        equipment is written to the image table in the same transaction.

        Raises:
            ValidationError: If a required field is empty, the rating is out of
                range or an equipment reference does not exist.
            PersistenceError: If the database write fails.
        """
        entity_type = _entity_type(entity)
        clean = validate_entity(entity)
        identity = uuid.uuid4().hex

        with self._session() as session:
            values = _column_values(clean)
            if isinstance(clean, Extraction):
                self._check_references(session, clean)
            else:
                values["image_id"] = None
                if clean.image_data is not None:
                    values["image_id"] = self._add_image(session, clean.image_data)
            session.add(_ROW_TYPES[entity_type](id=identity, **values))
            session.commit()

        logger.debug("Created %s %s", entity_type.__name__, identity)
        self._notify(StoreEvent("created", entity_type.__name__, identity))
        return identity

    def update(self, identity: str, mutator: Mutator) -> Entity:
        """Apply ``mutator`` to a fresh copy of the entity and persist the result.

        The mutator may change the copy in place or return a replacement of
        the same type. Setting ``image_data`` replaces the stored image;
        setting ``image_id`` to ``None`` removes it.

        Returns:
            The stored entity after the update.

        Raises:
            EntityNotFoundError: If no entity has this identity.
            ValidationError: If the mutated entity breaks an invariant. Nothing
                is written in that case.
            PersistenceError: If the database write fails.
        """
        with self._session() as session:
            row, entity_type = self._find(session, identity)
            draft = self._to_entity(session, row, entity_type)
            result = mutator(draft)
            updated = draft if result is None else result
            if not isinstance(updated, entity_type):
                raise ValidationError(
                    f"mutator must return a {entity_type.__name__}, got {type(updated).__name__}"
                )

            clean = validate_entity(updated)
            values = _column_values(clean)
            if isinstance(clean, Extraction):
                self._check_references(session, clean)
            else:
                values["image_id"] = self._replace_image(session, row.image_id, clean)

            for name, value in values.items():
                setattr(row, name, value)
            session.add(row)
            session.commit()
            stored = self._to_entity(session, row, entity_type)

        logger.debug("Updated %s %s", entity_type.__name__, identity)
        self._notify(StoreEvent("updated", entity_type.__name__, identity))
        return stored

    def delete(self, identity: str) -> None:
        """Delete an entity.

        Deleting a bean, grinder or brewer clears the matching reference on
        every extraction that used it, in the same transaction. Extractions are
        never deleted as a side effect.
        """
        with self._session() as session:
            row, entity_type = self._find(session, identity)
            nullified = 0
            column = _REFERENCE_COLUMNS.get(entity_type)
            if column is not None:
                statement = select(ExtractionRow).where(getattr(ExtractionRow, column) == identity)
                for dependent in session.exec(statement).all():
                    setattr(dependent, column, None)
                    session.add(dependent)
                    nullified += 1
                self._remove_image(session, row.image_id)
            session.delete(row)
            session.commit()

        logger.info("Deleted %s %s (cleared %d extraction references)", entity_type.__name__, identity, nullified)
        self._notify(StoreEvent("deleted", entity_type.__name__, identity))

    def reset(self) -> None:
        """Remove every extraction, bean, grinder, brewer and image in one transaction."""
        counts: dict[str, int] = {}
        with self._session() as session:
            for row_type in (ExtractionRow, BeanRow, GrinderRow, BrewerRow, ImageRow):
                rows = session.exec(select(row_type)).all()
                for row in rows:
                    session.delete(row)
                counts[row_type.__tablename__] = len(rows)
            session.commit()

        logger.info("Reset store: %s", ", ".join(f"{n} {name}" for name, n in counts.items()))
        self._notify(StoreEvent("reset"))

    # ------------------------------------------------------------------ queries

    def get(self, identity: str, *, include_image: bool = False) -> Entity:
        """Return the entity with this identity.

        Raises:
            EntityNotFoundError: If no entity has this identity.
        """
        with self._session() as session:
            row, entity_type = self._find(session, identity)
            return self._to_entity(session, row, entity_type, include_image=include_image)

    def list(self, entity_type: type[E], *, sort_by: str | None = None, descending: bool | None = None) -> list[E]:
        """Return every entity of a type, ordered by ``sort_by``.

        Defaults to name ascending for equipment and date descending for
        extractions.
        """
        row_type = _row_type(entity_type)
        default_key, default_descending = _DEFAULT_SORT[entity_type]
        key = sort_by or default_key
        if key not in row_type.model_fields:
            raise ValueError(f"Cannot sort {entity_type.__name__} by {key!r}")
        if descending is None:
            descending = default_descending if sort_by is None else False

        column = getattr(row_type, key)
        order = (column.desc(), row_type.id.desc()) if descending else (column.asc(), row_type.id.asc())
        with self._session() as session:
            rows = session.exec(select(row_type).order_by(*order)).all()
            if entity_type is Extraction:
                lookup = _EquipmentLookup.load(session)
                return [lookup.extraction(row) for row in rows]
            return [entity_type.model_validate(row.model_dump()) for row in rows]

    def related(self, entity: Entity | str, relationship: str) -> list[Extraction] | Equipment | None:
        """Follow a relationship.

        ``"extractions"`` on a bean, grinder or brewer returns the extractions
        that reference it, newest first. ``"bean"``, ``"grinder"`` or
        ``"brewer"`` on an extraction returns the referenced record or ``None``.
        """
        identity = entity if isinstance(entity, str) else entity.id
        if identity is None:
            raise EntityNotFoundError("entity has no identity; create it first")

        with self._session() as session:
            row, entity_type = self._find(session, identity)
            if relationship == "extractions" and entity_type in _REFERENCE_COLUMNS:
                column = getattr(ExtractionRow, _REFERENCE_COLUMNS[entity_type])
                statement = (
                    select(ExtractionRow)
                    .where(column == identity)
                    .order_by(ExtractionRow.date.desc(), ExtractionRow.id.desc())
                )
                lookup = _EquipmentLookup.load(session)
                return [lookup.extraction(r) for r in session.exec(statement).all()]
            if entity_type is Extraction and relationship in ("bean", "grinder", "brewer"):
                extraction = self._to_entity(session, row, Extraction)
                return getattr(extraction, relationship)

        raise ValueError(f"{entity_type.__name__} has no relationship {relationship!r}")

    def snapshot(self) -> LogSnapshot:
        """Read all four collections in a single session."""
        with self._session() as session:
            lookup = _EquipmentLookup.load(session)
            statement = select(ExtractionRow).order_by(ExtractionRow.date.desc(), ExtractionRow.id.desc())
            extractions = [lookup.extraction(row) for row in session.exec(statement).all()]
            return LogSnapshot(
                beans=sorted(lookup.beans.values(), key=lambda b: b.name.lower()),
                grinders=sorted(lookup.grinders.values(), key=lambda g: g.name.lower()),
                brewers=sorted(lookup.brewers.values(), key=lambda b: b.name.lower()),
                extractions=extractions,
            )

    def load_image(self, image_id: str | None) -> bytes | None:
        if image_id is None:
            return None
        with self._session() as session:
            image = session.get(ImageRow, image_id)
            return image.data if image else None

    # ------------------------------------------------------------------ internals

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with Session(self.engine, expire_on_commit=False) as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("storage operation failed: %s", exc)
            raise PersistenceError(f"Storage operation failed: {exc}") from exc

    def _find(self, session: Session, identity: str) -> tuple[SQLModel, type]:
        for entity_type, row_type in _ROW_TYPES.items():
            row = session.get(row_type, identity)
            if row is not None:
                return row, entity_type
        raise EntityNotFoundError(f"No entity with identity {identity!r}")

    def _to_entity(self, session: Session, row: SQLModel, entity_type: type, *, include_image: bool = False) -> Entity:
        if entity_type is Extraction:
            return _EquipmentLookup.for_row(session, row).extraction(row)
        entity = entity_type.model_validate(row.model_dump())
        if include_image and row.image_id:
            image = session.get(ImageRow, row.image_id)
            entity.image_data = image.data if image else None
        return entity

    def _check_references(self, session: Session, extraction: Extraction) -> None:
        for entity_type, column in _REFERENCE_COLUMNS.items():
            reference = getattr(extraction, column)
            if reference is not None and session.get(_ROW_TYPES[entity_type], reference) is None:
                raise ValidationError(f"{column} does not reference an existing {entity_type.__name__.lower()}")

    def _add_image(self, session: Session, data: bytes) -> str:
        image_id = uuid.uuid4().hex
        session.add(ImageRow(id=image_id, data=bytes(data)))
        return image_id

    def _remove_image(self, session: Session, image_id: str | None) -> None:
        if image_id is None:
            return
        image = session.get(ImageRow, image_id)
        if image is not None:
            session.delete(image)

    def _replace_image(self, session: Session, current_id: str | None, entity: Equipment) -> str | None:
        if entity.image_data is not None:
            self._remove_image(session, current_id)
            return self._add_image(session, entity.image_data)
        if entity.image_id is None:
            self._remove_image(session, current_id)
            return None
        return current_id


@dataclass
class _EquipmentLookup:
    """Equipment records keyed by identity, for resolving extraction references."""

    beans: dict[str, Bean]
    grinders: dict[str, Grinder]
    brewers: dict[str, Brewer]

    @classmethod
    def load(cls, session: Session) -> "_EquipmentLookup":
        return cls(
            beans={r.id: Bean.model_validate(r.model_dump()) for r in session.exec(select(BeanRow)).all()},
            grinders={r.id: Grinder.model_validate(r.model_dump()) for r in session.exec(select(GrinderRow)).all()},
            brewers={r.id: Brewer.model_validate(r.model_dump()) for r in session.exec(select(BrewerRow)).all()},
        )

    @classmethod
    def for_row(cls, session: Session, row: ExtractionRow) -> "_EquipmentLookup":
        def one(row_type: type[SQLModel], entity_type: type, identity: str | None) -> dict:
            found = session.get(row_type, identity) if identity else None
            return {identity: entity_type.model_validate(found.model_dump())} if found else {}

        return cls(
            beans=one(BeanRow, Bean, row.bean_id),
            grinders=one(GrinderRow, Grinder, row.grinder_id),
            brewers=one(BrewerRow, Brewer, row.brewer_id),
        )

    def extraction(self, row: ExtractionRow) -> Extraction:
        extraction = Extraction.model_validate(row.model_dump())
        extraction.bean = self.beans.get(row.bean_id) if row.bean_id else None
        extraction.grinder = self.grinders.get(row.grinder_id) if row.grinder_id else None
        extraction.brewer = self.brewers.get(row.brewer_id) if row.brewer_id else None
        return extraction


def _entity_type(entity: object) -> type:
    for entity_type in _ROW_TYPES:
        if type(entity) is entity_type:
            return entity_type
    raise ValidationError(f"Unsupported entity type: {type(entity).__name__}")


def _row_type(entity_type: type) -> type[SQLModel]:
    try:
        return _ROW_TYPES[entity_type]
    except KeyError:
        raise ValueError(f"Unsupported entity type: {entity_type!r}") from None


def _column_values(entity: Entity) -> dict[str, object]:
    row_fields = _ROW_TYPES[type(entity)].model_fields
    return {
        name: getattr(entity, name)
        for name in type(entity).model_fields
        if name in row_fields and name not in _NOT_STORED
    }
