"""Write-hook orchestration.

The host calls the hooks around each child write::

    snapshot = cache.before_write(comment)
    ...insert or update the comment...
    report = cache.after_write(comment, is_new, snapshot)

    snapshot = cache.before_delete(comment)
    ...delete the comment...
    report = cache.after_delete(comment, snapshot)

Hooks never raise for cache problems: the child write has already happened,
so failures are logged and returned in the WriteReport instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from aggregate_cache.cache.recompute import RecomputeEngine
from aggregate_cache.cache.tracker import ForeignKeySnapshot, ForeignKeyTracker
from aggregate_cache.cache.writer import CacheWriter
from aggregate_cache.core.exceptions import (
    AggregateCacheError,
    CacheError,
    ParentNotFoundError,
    UnknownRelationshipError,
)
from aggregate_cache.rules.plan import AggregateRule, RelationshipDescriptor
from aggregate_cache.rules.registry import RuleRegistry
from aggregate_cache.rules.relationships import RelationshipResolver
from aggregate_cache.store.entity import Entity
from aggregate_cache.store.protocol import RecordStore, SchemaProvider

logger = structlog.get_logger()


@dataclass(frozen=True)
class CacheUpdate:
    """Aggregate values written onto one parent."""

    target_type: str
    parent_id: Any
    values: dict[str, Any]


@dataclass
class WriteReport:
    """Outcome of one hook invocation.

    ``skipped`` holds the non-failures (unknown relationship, missing parent);
    ``errors`` holds query and persistence failures.
    """

    updated: list[CacheUpdate] = field(default_factory=list)
    skipped: list[AggregateCacheError] = field(default_factory=list)
    errors: list[CacheError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class AggregateCache:
    """Keeps parent aggregate caches in sync with child writes.

    Args:
        registry: Configured rules, read-only from here on.
        schema: Belongs-to relationships of the child types.
        store: Data layer the aggregates are computed on and written to.
    """

    def __init__(
        self,
        registry: RuleRegistry,
        schema: SchemaProvider,
        store: RecordStore,
    ) -> None:
        self._registry = registry
        self._resolvers = {
            child_type: RelationshipResolver.from_schema(schema, child_type)
            for child_type in registry.child_types
        }
        self._trackers = {
            child_type: ForeignKeyTracker(resolver)
            for child_type, resolver in self._resolvers.items()
        }
        self._engine = RecomputeEngine(store)
        self._writer = CacheWriter(store)

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    def resolver_for(self, child_type: str) -> RelationshipResolver:
        return self._resolvers.get(child_type) or RelationshipResolver(child_type, [])

    def before_write(self, entity: Entity) -> ForeignKeySnapshot:
        """Snapshot the persisted foreign keys before a create or update."""
        tracker = self._trackers.get(entity.entity_type)
        if tracker is None:
            return ForeignKeySnapshot(entity.entity_type)
        return tracker.snapshot(entity)

    def after_write(
        self,
        entity: Entity,
        is_new: bool,
        snapshot: ForeignKeySnapshot,
    ) -> WriteReport:
        """Recompute caches for the entity's parent and, after a move, its old parent."""
        report = WriteReport()
        for rule, relationship in self._applicable(entity.entity_type, report):
            parent_id = entity.get(relationship.foreign_key)
            self._update(entity.entity_type, rule, relationship, parent_id, report)

            old_parent_id = snapshot.prior_value(relationship.name)
            if not is_new and old_parent_id != parent_id:
                self._update(entity.entity_type, rule, relationship, old_parent_id, report)
        return report

    def before_delete(self, entity: Entity) -> ForeignKeySnapshot:
        """Snapshot the current foreign keys before a delete."""
        tracker = self._trackers.get(entity.entity_type)
        if tracker is None:
            return ForeignKeySnapshot(entity.entity_type)
        return tracker.snapshot_for_delete(entity)

    def after_delete(self, entity: Entity, snapshot: ForeignKeySnapshot) -> WriteReport:
        """Recompute caches for the parent the deleted entity belonged to."""
        report = WriteReport()
        for rule, relationship in self._applicable(entity.entity_type, report):
            parent_id = snapshot.prior_value(relationship.name)
            self._update(entity.entity_type, rule, relationship, parent_id, report)
        return report

    def refresh(self, child_type: str, relationship: str, parent_id: Any) -> WriteReport:
        """Recompute every rule of *child_type* cached on one parent.

        For repairing caches after writes that bypassed the hooks, such as
        bulk imports.
        """
        report = WriteReport()
        for rule, descriptor in self._applicable(child_type, report):
            if descriptor.name == relationship:
                self._update(child_type, rule, descriptor, parent_id, report)
        return report

    def _applicable(
        self,
        child_type: str,
        report: WriteReport,
    ) -> list[tuple[AggregateRule, RelationshipDescriptor]]:
        resolver = self.resolver_for(child_type)
        pairs = []
        for rule in self._registry.rules_for(child_type):
            try:
                pairs.append((rule, resolver.resolve(rule.target_model)))
            except UnknownRelationshipError as e:
                logger.warning(
                    "aggregate_rule_skipped",
                    child_type=child_type,
                    relationship=rule.target_model,
                )
                report.skipped.append(e)
        return pairs

    def _update(
        self,
        child_type: str,
        rule: AggregateRule,
        relationship: RelationshipDescriptor,
        parent_id: Any,
        report: WriteReport,
    ) -> None:
        if parent_id is None:
            return
        try:
            values = self._engine.recompute(child_type, rule, relationship, parent_id)
            applied = self._writer.apply_cache(relationship.target, parent_id, values)
        except CacheError as e:
            logger.error(
                "aggregate_cache_failed",
                child_type=child_type,
                relationship=relationship.name,
                parent_id=parent_id,
                error=str(e),
            )
            report.errors.append(e)
            return

        if applied:
            report.updated.append(CacheUpdate(relationship.target, parent_id, values))
        else:
            report.skipped.append(ParentNotFoundError(relationship.target, parent_id))
