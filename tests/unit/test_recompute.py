"""Unit tests for RecomputeEngine and filter building."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from aggregate_cache.cache.recompute import RecomputeEngine, build_filters
from aggregate_cache.core.enums import AggregateFunction
from aggregate_cache.core.exceptions import QueryError
from aggregate_cache.rules.builder import rule
from aggregate_cache.rules.plan import RelationshipDescriptor
from aggregate_cache.store.memory import InMemoryStore

POSTS = RelationshipDescriptor(
    name="Posts",
    foreign_key="post_id",
    default_conditions={"visible": 1},
    target="posts",
)

ALL_FUNCTIONS = (
    rule("rating").on("Posts").min("lo").max("hi").avg("mean").sum("total").count("n").where()
)


@pytest.fixture
def comments() -> InMemoryStore:
    store = InMemoryStore()
    for rating in (2, 4, 6):
        store.insert("Comments", {"post_id": 1, "rating": rating, "visible": 1})
    store.insert("Comments", {"post_id": 1, "rating": 100, "visible": 0})
    store.insert("Comments", {"post_id": 2, "rating": 9, "visible": 1})
    return store


class TestBuildFilters:
    def test_relationship_defaults(self) -> None:
        compiled = rule("rating").on("Posts").avg("mean").build()
        assert build_filters(compiled, POSTS, 5) == {"post_id": 5, "visible": 1}

    def test_rule_conditions_replace_defaults(self) -> None:
        compiled = rule("rating").on("Posts").avg("mean").where(approved=True).build()
        assert build_filters(compiled, POSTS, 5) == {"post_id": 5, "approved": True}

    def test_empty_rule_conditions_drop_defaults(self) -> None:
        compiled = rule("rating").on("Posts").avg("mean").where().build()
        assert build_filters(compiled, POSTS, 5) == {"post_id": 5}

    def test_rule_conditions_win_on_collision(self) -> None:
        compiled = rule("rating").on("Posts").avg("mean").where(post_id=9).build()
        assert build_filters(compiled, POSTS, 5) == {"post_id": 9}


class TestRecomputeEngine:
    def test_matches_direct_computation(self, comments: InMemoryStore) -> None:
        engine = RecomputeEngine(comments)
        compiled = rule("rating").on("Posts").min("lo").max("hi").avg("mean").sum("total").count("n")
        values = engine.recompute("Comments", compiled.build(), POSTS, 1)
        assert values == {"lo": 2, "hi": 6, "mean": 4, "total": 12, "n": 3}

    def test_without_conditions_counts_everything(self, comments: InMemoryStore) -> None:
        engine = RecomputeEngine(comments)
        values = engine.recompute("Comments", ALL_FUNCTIONS.build(), POSTS, 1)
        assert values["n"] == 4
        assert values["hi"] == 100

    def test_empty_group_is_zero(self, comments: InMemoryStore) -> None:
        engine = RecomputeEngine(comments)
        values = engine.recompute("Comments", ALL_FUNCTIONS.build(), POSTS, 42)
        assert values == {"lo": 0, "hi": 0, "mean": 0, "total": 0, "n": 0}
        assert all(v is not None for v in values.values())

    def test_one_query_per_function(self) -> None:
        store = MagicMock()
        store.aggregate.return_value = 1
        engine = RecomputeEngine(store)
        compiled = rule("rating").on("Posts").avg("mean").max("hi").recursive(-1).build()
        engine.recompute("Comments", compiled, POSTS, 3)

        assert store.aggregate.call_count == 2
        functions = [c.args[1] for c in store.aggregate.call_args_list]
        assert functions == [AggregateFunction.AVG, AggregateFunction.MAX]
        call = store.aggregate.call_args_list[0]
        assert call.args == (
            "Comments",
            AggregateFunction.AVG,
            "rating",
            {"post_id": 3, "visible": 1},
            "post_id",
        )
        assert call.kwargs == {"recursion_depth": -1}

    def test_query_failure_wrapped(self) -> None:
        store = MagicMock()
        store.aggregate.side_effect = RuntimeError("connection reset")
        engine = RecomputeEngine(store)
        with pytest.raises(QueryError, match="connection reset") as exc_info:
            engine.recompute("Comments", ALL_FUNCTIONS.build(), POSTS, 3)
        assert exc_info.value.parent_id == 3
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_idempotent(self, comments: InMemoryStore) -> None:
        engine = RecomputeEngine(comments)
        compiled = ALL_FUNCTIONS.build()
        assert engine.recompute("Comments", compiled, POSTS, 1) == engine.recompute(
            "Comments", compiled, POSTS, 1
        )
