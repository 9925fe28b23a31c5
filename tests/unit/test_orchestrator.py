"""Unit tests for AggregateCache write hooks."""

from __future__ import annotations

from unittest.mock import patch

from aggregate_cache.cache.orchestrator import AggregateCache
from aggregate_cache.core.exceptions import (
    ParentNotFoundError,
    PersistenceError,
    QueryError,
    UnknownRelationshipError,
)
from aggregate_cache.rules.registry import RuleRegistry
from aggregate_cache.rules.relationships import Schema
from aggregate_cache.store.entity import Entity
from aggregate_cache.store.memory import InMemoryStore


def _insert_comment(store: InMemoryStore, cache: AggregateCache, **values) -> Entity:
    comment = Entity("Comments", values)
    snapshot = cache.before_write(comment)
    comment.mark_persisted(store.insert("Comments", comment.to_dict()))
    cache.after_write(comment, True, snapshot)
    return comment


class TestAfterWrite:
    def test_insert_updates_parent(self, store: InMemoryStore, cache: AggregateCache) -> None:
        comment = Entity("Comments", {"post_id": 1, "rating": 4})
        snapshot = cache.before_write(comment)
        comment.mark_persisted(store.insert("Comments", comment.to_dict()))
        report = cache.after_write(comment, True, snapshot)

        assert report.ok
        assert len(report.updated) == 1
        assert report.updated[0].parent_id == 1
        assert report.updated[0].values == {"average_rating": 4, "best_rating": 4}
        assert store.get("posts", 1)["average_rating"] == 4

    def test_move_updates_both_parents(self, store: InMemoryStore, cache: AggregateCache) -> None:
        _insert_comment(store, cache, post_id=1, rating=2)
        moving = _insert_comment(store, cache, post_id=1, rating=5)
        assert store.get("posts", 1)["best_rating"] == 5

        snapshot = cache.before_write(moving)
        moving.set("post_id", 2)
        store.update("Comments", moving.id, moving.dirty())
        moving.mark_persisted()
        report = cache.after_write(moving, False, snapshot)

        assert [u.parent_id for u in report.updated] == [2, 1]
        assert store.get("posts", 1)["best_rating"] == 2
        assert store.get("posts", 1)["average_rating"] == 2
        assert store.get("posts", 2)["best_rating"] == 5

    def test_update_without_move_touches_one_parent(
        self, store: InMemoryStore, cache: AggregateCache
    ) -> None:
        comment = _insert_comment(store, cache, post_id=1, rating=2)
        snapshot = cache.before_write(comment)
        comment.set("rating", 3)
        store.update("Comments", comment.id, comment.dirty())
        comment.mark_persisted()
        report = cache.after_write(comment, False, snapshot)

        assert [u.parent_id for u in report.updated] == [1]
        assert store.get("posts", 1)["average_rating"] == 3

    def test_missing_parent_is_skipped(self, store: InMemoryStore, cache: AggregateCache) -> None:
        comment = Entity("Comments", {"post_id": 99, "rating": 4})
        snapshot = cache.before_write(comment)
        comment.mark_persisted(store.insert("Comments", comment.to_dict()))
        report = cache.after_write(comment, True, snapshot)

        assert report.ok
        assert report.updated == []
        assert isinstance(report.skipped[0], ParentNotFoundError)
        assert not store.exists("posts", 99)

    def test_orphan_child_is_ignored(self, store: InMemoryStore, cache: AggregateCache) -> None:
        comment = Entity("Comments", {"post_id": None, "rating": 4})
        snapshot = cache.before_write(comment)
        comment.mark_persisted(store.insert("Comments", comment.to_dict()))
        report = cache.after_write(comment, True, snapshot)
        assert report.updated == [] and report.skipped == [] and report.errors == []

    def test_unknown_relationship_is_skipped(self, store: InMemoryStore, schema: Schema) -> None:
        registry = RuleRegistry()
        registry.register(
            "Comments",
            [
                {"field": "rating", "model": "Blogs", "sum": "rating_sum"},
                {"field": "rating", "model": "Posts", "count": "comment_count"},
            ],
        )
        cache = AggregateCache(registry, schema, store)
        comment = Entity("Comments", {"post_id": 1, "rating": 4})
        snapshot = cache.before_write(comment)
        comment.mark_persisted(store.insert("Comments", comment.to_dict()))
        report = cache.after_write(comment, True, snapshot)

        assert report.ok
        assert isinstance(report.skipped[0], UnknownRelationshipError)
        assert store.get("posts", 1)["comment_count"] == 1

    def test_type_without_rules(self, cache: AggregateCache) -> None:
        tag = Entity("Tags", {"post_id": 1})
        snapshot = cache.before_write(tag)
        assert snapshot.values == {}
        report = cache.after_write(tag, True, snapshot)
        assert report.updated == []

    def test_query_failure_reported(self, store: InMemoryStore, cache: AggregateCache) -> None:
        comment = Entity("Comments", {"post_id": 1, "rating": 4})
        snapshot = cache.before_write(comment)
        comment.mark_persisted(store.insert("Comments", comment.to_dict()))
        with patch.object(store, "aggregate", side_effect=RuntimeError("timeout")):
            report = cache.after_write(comment, True, snapshot)

        assert not report.ok
        assert isinstance(report.errors[0], QueryError)
        assert store.get("posts", 1)["average_rating"] == 0

    def test_persistence_failure_reported(
        self, store: InMemoryStore, cache: AggregateCache
    ) -> None:
        comment = Entity("Comments", {"post_id": 1, "rating": 4})
        snapshot = cache.before_write(comment)
        comment.mark_persisted(store.insert("Comments", comment.to_dict()))
        with patch.object(store, "patch_and_save", side_effect=RuntimeError("read-only")):
            report = cache.after_write(comment, True, snapshot)

        assert isinstance(report.errors[0], PersistenceError)
        assert store.exists("Comments", comment.id)


class TestAfterDelete:
    def test_delete_recomputes_old_parent(
        self, store: InMemoryStore, cache: AggregateCache
    ) -> None:
        _insert_comment(store, cache, post_id=1, rating=2)
        comment = _insert_comment(store, cache, post_id=1, rating=6)

        snapshot = cache.before_delete(comment)
        store.delete("Comments", comment.id)
        report = cache.after_delete(comment, snapshot)

        assert report.ok
        assert store.get("posts", 1)["average_rating"] == 2
        assert store.get("posts", 1)["best_rating"] == 2

    def test_delete_last_child_resets_to_zero(
        self, store: InMemoryStore, cache: AggregateCache
    ) -> None:
        comment = _insert_comment(store, cache, post_id=2, rating=5)
        assert store.get("posts", 2)["best_rating"] == 5

        snapshot = cache.before_delete(comment)
        store.delete("Comments", comment.id)
        cache.after_delete(comment, snapshot)

        post = store.get("posts", 2)
        assert post["average_rating"] == 0
        assert post["best_rating"] == 0


class TestRefresh:
    def test_refresh_repairs_cache(self, store: InMemoryStore, cache: AggregateCache) -> None:
        store.insert("Comments", {"post_id": 1, "rating": 3})
        store.insert("Comments", {"post_id": 1, "rating": 5})
        assert store.get("posts", 1)["average_rating"] == 0

        report = cache.refresh("Comments", "Posts", 1)

        assert report.ok
        assert store.get("posts", 1)["average_rating"] == 4
        assert store.get("posts", 1)["best_rating"] == 5

    def test_refresh_other_relationship_is_noop(self, cache: AggregateCache) -> None:
        assert cache.refresh("Comments", "Authors", 1).updated == []

    def test_refresh_is_idempotent(self, store: InMemoryStore, cache: AggregateCache) -> None:
        store.insert("Comments", {"post_id": 1, "rating": 3})
        cache.refresh("Comments", "Posts", 1)
        first = store.get("posts", 1)
        cache.refresh("Comments", "Posts", 1)
        assert store.get("posts", 1) == first
