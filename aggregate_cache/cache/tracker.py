"""Foreign-key snapshots taken before a child write.

A snapshot belongs to exactly one write: the before-hook returns it and the
caller hands it to the matching after-hook. The tracker keeps no state of
its own, so concurrent writes never see each other's snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from aggregate_cache.rules.relationships import RelationshipResolver
from aggregate_cache.store.entity import Entity


@dataclass(frozen=True)
class ForeignKeySnapshot:
    """Pre-write foreign-key values of one entity, keyed by relationship name."""

    entity_type: str
    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def prior_value(self, relationship: str) -> Any:
        """Foreign-key value captured for *relationship*, or None."""
        return self.values.get(relationship)

    def __contains__(self, relationship: object) -> bool:
        return relationship in self.values


class ForeignKeyTracker:
    """Captures foreign keys of every belongs-to relationship of one child type."""

    def __init__(self, resolver: RelationshipResolver) -> None:
        self._resolver = resolver

    def snapshot(self, entity: Entity) -> ForeignKeySnapshot:
        """Persisted foreign keys, ignoring pending in-memory changes.

        Used before a create or update, so a move between parents is still
        visible after the write.
        """
        return ForeignKeySnapshot(
            entity.entity_type,
            {d.name: entity.get_original(d.foreign_key) for d in self._resolver.descriptors},
        )

    def snapshot_for_delete(self, entity: Entity) -> ForeignKeySnapshot:
        """Current foreign keys; a delete has no later state to compare to."""
        return ForeignKeySnapshot(
            entity.entity_type,
            {d.name: entity.get(d.foreign_key) for d in self._resolver.descriptors},
        )
