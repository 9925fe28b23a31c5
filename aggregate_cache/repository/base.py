"""Repository - runs child writes inside the aggregate cache hooks.

Thin wrapper over an EntityStore for hosts that have no lifecycle events of
their own to attach AggregateCache to.
"""

from __future__ import annotations

from typing import Any

from aggregate_cache.cache.orchestrator import AggregateCache, WriteReport
from aggregate_cache.store.entity import Entity
from aggregate_cache.store.protocol import EntityStore


class Repository:
    """Persists entities and keeps their parents' aggregate caches current.

    A failing store write propagates unchanged and no after-hook runs.
    """

    def __init__(self, store: EntityStore, cache: AggregateCache) -> None:
        self.store = store
        self.cache = cache

    def get(self, entity_type: str, record_id: Any) -> Entity:
        return Entity(entity_type, self.store.get(entity_type, record_id), persisted=True)

    def save(self, entity: Entity) -> WriteReport:
        """Insert a new entity or update a persisted one."""
        snapshot = self.cache.before_write(entity)
        is_new = entity.is_new
        if is_new:
            values = entity.to_dict()
            if values.get(entity.primary_key) is None:
                values.pop(entity.primary_key, None)
            record_id = self.store.insert(entity.entity_type, values)
            entity.mark_persisted(record_id)
        else:
            self.store.update(entity.entity_type, entity.id, entity.dirty())
            entity.mark_persisted()
        return self.cache.after_write(entity, is_new, snapshot)

    def delete(self, entity: Entity) -> WriteReport:
        snapshot = self.cache.before_delete(entity)
        self.store.delete(entity.entity_type, entity.id)
        return self.cache.after_delete(entity, snapshot)
