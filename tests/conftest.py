"""Shared test fixtures.

The fixtures model the classic blog example: Comments belong to Posts
through ``post_id`` and Posts cache aggregates of their comments' ratings.
"""

from __future__ import annotations

import pytest

from aggregate_cache.cache.orchestrator import AggregateCache
from aggregate_cache.core.connection import ConnectionConfig
from aggregate_cache.repository.base import Repository
from aggregate_cache.rules.registry import RuleRegistry
from aggregate_cache.rules.relationships import Schema
from aggregate_cache.store.memory import InMemoryStore

RATING_RULE = {
    "field": "rating",
    "model": "Posts",
    "avg": "average_rating",
    "max": "best_rating",
}


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config."""
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)


@pytest.fixture
def schema() -> Schema:
    return Schema().belongs_to("Comments", "Posts", foreign_key="post_id", target="posts")


@pytest.fixture
def registry() -> RuleRegistry:
    registry = RuleRegistry()
    registry.register("Comments", [RATING_RULE])
    return registry


@pytest.fixture
def store() -> InMemoryStore:
    """Memory store with two empty posts, ids 1 and 2."""
    store = InMemoryStore()
    store.insert("posts", {"id": 1, "title": "first", "average_rating": 0, "best_rating": 0})
    store.insert("posts", {"id": 2, "title": "second", "average_rating": 0, "best_rating": 0})
    return store


@pytest.fixture
def cache(registry: RuleRegistry, schema: Schema, store: InMemoryStore) -> AggregateCache:
    return AggregateCache(registry, schema, store)


@pytest.fixture
def repo(store: InMemoryStore, cache: AggregateCache) -> Repository:
    return Repository(store, cache)
