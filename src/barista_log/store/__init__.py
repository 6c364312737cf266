"""Persistent entity store for barista-log."""

from barista_log.store.repository import EntityStore, StoreEvent, create_store_engine
from barista_log.store.validation import validate_entity, validate_rating

__all__ = [
    "EntityStore",
    "StoreEvent",
    "create_store_engine",
    "validate_entity",
    "validate_rating",
]
