"""Store layer - entities and the record stores the cache reads and writes."""

from __future__ import annotations

from aggregate_cache.store.entity import Entity
from aggregate_cache.store.memory import InMemoryStore
from aggregate_cache.store.protocol import EntityStore, RecordStore, SchemaProvider
from aggregate_cache.store.sql import SQLRecordStore

__all__ = [
    "Entity",
    "RecordStore",
    "EntityStore",
    "SchemaProvider",
    "InMemoryStore",
    "SQLRecordStore",
]
