"""Full recomputation of a rule's aggregates for one parent.

Each recomputation re-aggregates the current child set instead of applying
a delta, so a missed or reordered write is corrected by the next one.
"""

from __future__ import annotations

from typing import Any

import structlog

from aggregate_cache.core.exceptions import QueryError
from aggregate_cache.rules.plan import AggregateRule, RelationshipDescriptor
from aggregate_cache.store.protocol import RecordStore

logger = structlog.get_logger()

# Stored for every function when the parent has no matching children.
EMPTY_GROUP_VALUE = 0


def build_filters(
    rule: AggregateRule,
    relationship: RelationshipDescriptor,
    parent_id: Any,
) -> dict[str, Any]:
    """Foreign-key equality merged with the rule's or the relationship's conditions.

    A rule that declares conditions (even an empty set) replaces the
    relationship defaults. The merged conditions come last and win on
    key collision.
    """
    filters: dict[str, Any] = {relationship.foreign_key: parent_id}
    if rule.conditions is not None:
        filters.update(rule.conditions)
    else:
        filters.update(relationship.default_conditions)
    return filters


class RecomputeEngine:
    """Runs the grouped aggregate queries for a rule against a RecordStore."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def recompute(
        self,
        child_type: str,
        rule: AggregateRule,
        relationship: RelationshipDescriptor,
        parent_id: Any,
    ) -> dict[str, Any]:
        """Compute every configured aggregate of *rule* for *parent_id*.

        Returns:
            Destination attribute -> value. Functions over an empty child set
            (including min, max and avg) yield 0.

        Raises:
            QueryError: If the store fails to run an aggregate query.
        """
        filters = build_filters(rule, relationship, parent_id)
        values: dict[str, Any] = {}
        for function, destination in rule.function_map.items():
            try:
                result = self._store.aggregate(
                    child_type,
                    function,
                    rule.source_field,
                    filters,
                    relationship.foreign_key,
                    recursion_depth=rule.recursion_depth,
                )
            except Exception as e:
                raise QueryError(child_type, rule.source_field, parent_id, str(e)) from e
            values[destination] = EMPTY_GROUP_VALUE if result is None else result

        logger.debug(
            "aggregates_recomputed",
            child_type=child_type,
            relationship=relationship.name,
            parent_id=parent_id,
            values=values,
        )
        return values
