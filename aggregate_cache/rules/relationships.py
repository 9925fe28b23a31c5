"""Belongs-to relationship declarations and lookup."""

from __future__ import annotations

from typing import Any, Mapping

from aggregate_cache.core.exceptions import UnknownRelationshipError
from aggregate_cache.rules.plan import RelationshipDescriptor
from aggregate_cache.store.protocol import SchemaProvider


class Schema:
    """In-process SchemaProvider.

    Usage:
        schema = Schema()
        schema.belongs_to("Comments", "Posts", foreign_key="post_id")
    """

    def __init__(self) -> None:
        self._belongs_to: dict[str, dict[str, RelationshipDescriptor]] = {}

    def belongs_to(
        self,
        child_type: str,
        name: str,
        *,
        foreign_key: str,
        conditions: Mapping[str, Any] | None = None,
        target: str | None = None,
    ) -> Schema:
        """Declare that *child_type* belongs to the parent reached through *name*.

        Args:
            child_type: The child entity type.
            name: Relationship alias that rules refer to as ``model``.
            foreign_key: Child attribute holding the parent id.
            conditions: Default equality filters for aggregate queries.
            target: Parent entity type; defaults to *name*.
        """
        descriptor = RelationshipDescriptor(
            name=name,
            foreign_key=foreign_key,
            default_conditions=dict(conditions or {}),
            target=target or name,
        )
        self._belongs_to.setdefault(child_type, {})[name] = descriptor
        return self

    def belongs_to_of(self, child_type: str) -> list[RelationshipDescriptor]:
        return list(self._belongs_to.get(child_type, {}).values())


class RelationshipResolver:
    """Maps relationship names of one child type to their descriptors.

    Loaded once from a SchemaProvider; pure lookup afterwards.
    """

    def __init__(self, child_type: str, descriptors: list[RelationshipDescriptor]) -> None:
        self._child_type = child_type
        self._descriptors = {d.name: d for d in descriptors}

    @classmethod
    def from_schema(cls, schema: SchemaProvider, child_type: str) -> RelationshipResolver:
        return cls(child_type, list(schema.belongs_to_of(child_type)))

    @property
    def child_type(self) -> str:
        return self._child_type

    @property
    def descriptors(self) -> list[RelationshipDescriptor]:
        return list(self._descriptors.values())

    def resolve(self, name: str) -> RelationshipDescriptor:
        """Look up a relationship by name.

        Raises:
            UnknownRelationshipError: If the child type declares no such relationship.
        """
        try:
            return self._descriptors[name]
        except KeyError:
            raise UnknownRelationshipError(self._child_type, name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors
