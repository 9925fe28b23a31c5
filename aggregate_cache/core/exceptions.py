"""aggregate_cache exception hierarchy.

Driver and store exceptions are always wrapped before they leave the
package so callers only ever need to catch ``AggregateCacheError``.
"""

from __future__ import annotations

from typing import Any


class AggregateCacheError(Exception):
    """Base exception for all aggregate_cache errors."""


# --- Configuration ---


class ConfigurationError(AggregateCacheError):
    """Raised when an aggregate rule is malformed."""

    def __init__(self, child_type: str, detail: str) -> None:
        self.child_type = child_type
        self.detail = detail
        super().__init__(f"Invalid aggregate rule for '{child_type}': {detail}")


class UnknownRelationshipError(AggregateCacheError):
    """Raised when a rule names a relationship the child type does not declare."""

    def __init__(self, child_type: str, relationship: str) -> None:
        self.child_type = child_type
        self.relationship = relationship
        super().__init__(f"'{child_type}' has no belongs-to relationship '{relationship}'")


# --- Cache maintenance ---


class CacheError(AggregateCacheError):
    """Base for errors raised while recomputing or writing a cache."""


class ParentNotFoundError(CacheError):
    """Raised when the parent record holding the cache does not exist."""

    def __init__(self, target_type: str, parent_id: Any) -> None:
        self.target_type = target_type
        self.parent_id = parent_id
        super().__init__(f"{target_type} #{parent_id} does not exist")


class QueryError(CacheError):
    """Raised when an aggregate query fails."""

    def __init__(self, child_type: str, field: str, parent_id: Any, detail: str) -> None:
        self.child_type = child_type
        self.field = field
        self.parent_id = parent_id
        super().__init__(
            f"Aggregate query on {child_type}.{field} for parent {parent_id!r} failed: {detail}"
        )


class PersistenceError(CacheError):
    """Raised when recomputed values cannot be saved onto the parent."""

    def __init__(self, target_type: str, parent_id: Any, detail: str) -> None:
        self.target_type = target_type
        self.parent_id = parent_id
        super().__init__(f"Cannot save cache on {target_type} #{parent_id}: {detail}")


# --- Store ---


class StoreError(AggregateCacheError):
    """Base for record store errors."""


class RecordNotFoundError(StoreError):
    """Raised when a record lookup by id finds nothing."""

    def __init__(self, entity_type: str, record_id: Any) -> None:
        self.entity_type = entity_type
        self.record_id = record_id
        super().__init__(f"{entity_type} #{record_id} not found")


class InvalidIdentifierError(StoreError):
    """Raised when a table or column name is not a plain SQL identifier."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Invalid SQL identifier: {identifier!r}")


# --- Adapter ---


class AdapterError(AggregateCacheError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""


class PoolError(AdapterError):
    """Raised on connection pool failures."""
