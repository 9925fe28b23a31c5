"""Protocols for the data layer the cache runs against.

RecordStore is all the aggregate cache itself needs. EntityStore adds the
plain CRUD that Repository uses to perform the child writes the cache hooks
wrap. SchemaProvider exposes the belongs-to relationships of entity types.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Protocol, runtime_checkable

if TYPE_CHECKING:
    from aggregate_cache.core.enums import AggregateFunction
    from aggregate_cache.rules.plan import RelationshipDescriptor


@runtime_checkable
class RecordStore(Protocol):
    """Record access used by the recompute engine and the cache writer."""

    def exists(self, entity_type: str, record_id: Any) -> bool:
        """Whether a record with *record_id* exists."""
        ...

    def get(self, entity_type: str, record_id: Any) -> dict[str, Any]:
        """Load a record. Raises RecordNotFoundError if absent."""
        ...

    def patch_and_save(
        self,
        entity_type: str,
        record_id: Any,
        values: Mapping[str, Any],
    ) -> None:
        """Merge *values* onto an existing record and persist it."""
        ...

    def aggregate(
        self,
        entity_type: str,
        function: AggregateFunction,
        field: str,
        filters: Mapping[str, Any],
        group_by: str,
        *,
        recursion_depth: int | None = None,
    ) -> Any:
        """Aggregate *field* over records matching *filters*, grouped by *group_by*.

        Returns the value of the first group, or None when no record matches.
        ``recursion_depth`` is a hint for stores that can join related data;
        stores that cannot may ignore it.
        """
        ...


@runtime_checkable
class EntityStore(RecordStore, Protocol):
    """RecordStore plus insert/update/delete of single records."""

    def insert(self, entity_type: str, values: Mapping[str, Any]) -> Any:
        """Insert a record and return its id."""
        ...

    def update(self, entity_type: str, record_id: Any, values: Mapping[str, Any]) -> None:
        """Update columns of an existing record."""
        ...

    def delete(self, entity_type: str, record_id: Any) -> None:
        """Delete a record."""
        ...


@runtime_checkable
class SchemaProvider(Protocol):
    """Source of belongs-to relationships per child entity type."""

    def belongs_to_of(self, child_type: str) -> list[RelationshipDescriptor]:
        ...
