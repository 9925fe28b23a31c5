"""aggregate_cache - denormalized min/max/sum/avg/count caches on parent records."""

from __future__ import annotations

from aggregate_cache.cache.orchestrator import AggregateCache, CacheUpdate, WriteReport
from aggregate_cache.cache.recompute import RecomputeEngine
from aggregate_cache.cache.tracker import ForeignKeySnapshot, ForeignKeyTracker
from aggregate_cache.cache.writer import CacheWriter
from aggregate_cache.core.connection import ConnectionConfig, ConnectionManager
from aggregate_cache.core.enums import AggregateFunction, DatabaseBackend
from aggregate_cache.core.exceptions import (
    AdapterError,
    AggregateCacheError,
    CacheError,
    ConfigurationError,
    ConnectionError,  # noqa: A004
    InvalidIdentifierError,
    ParentNotFoundError,
    PersistenceError,
    PoolError,
    QueryError,
    RecordNotFoundError,
    StoreError,
    UnknownRelationshipError,
)
from aggregate_cache.core.logging import configure_logging
from aggregate_cache.repository.base import Repository
from aggregate_cache.rules.builder import rule
from aggregate_cache.rules.plan import AggregateRule, RelationshipDescriptor
from aggregate_cache.rules.registry import RuleRegistry
from aggregate_cache.rules.relationships import RelationshipResolver, Schema
from aggregate_cache.store.entity import Entity
from aggregate_cache.store.memory import InMemoryStore
from aggregate_cache.store.sql import SQLRecordStore

__all__ = [
    # Orchestration
    "AggregateCache",
    "WriteReport",
    "CacheUpdate",
    "RecomputeEngine",
    "CacheWriter",
    "ForeignKeyTracker",
    "ForeignKeySnapshot",
    # Rules
    "AggregateRule",
    "RelationshipDescriptor",
    "RuleRegistry",
    "RelationshipResolver",
    "Schema",
    "rule",
    # Stores
    "Entity",
    "InMemoryStore",
    "SQLRecordStore",
    "Repository",
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    # Enums
    "AggregateFunction",
    "DatabaseBackend",
    # Logging
    "configure_logging",
    # Exceptions
    "AggregateCacheError",
    "ConfigurationError",
    "UnknownRelationshipError",
    "CacheError",
    "ParentNotFoundError",
    "QueryError",
    "PersistenceError",
    "StoreError",
    "RecordNotFoundError",
    "InvalidIdentifierError",
    "AdapterError",
    "ConnectionError",
    "PoolError",
]
