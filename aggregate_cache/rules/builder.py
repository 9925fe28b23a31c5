"""Aggregate rule DSL builder.

Fluent alternative to rule dicts::

    rule("rating").on("Posts").avg("average_rating").max("best_rating").where(visible=1).build()
"""

from __future__ import annotations

from typing import Any

from aggregate_cache.core.enums import AggregateFunction
from aggregate_cache.core.exceptions import ConfigurationError
from aggregate_cache.rules.plan import AggregateRule


def rule(source_field: str) -> AggregateRuleBuilder:
    """Entry point for the rule DSL.

    Args:
        source_field: Child attribute the aggregates are computed over.
    """
    return AggregateRuleBuilder(source_field)


class AggregateRuleBuilder:
    """Fluent builder for a single AggregateRule."""

    def __init__(self, source_field: str) -> None:
        self._source_field = source_field
        self._target_model: str | None = None
        self._function_map: dict[AggregateFunction, str] = {}
        self._conditions: dict[str, Any] | None = None
        self._recursion_depth: int | None = None

    def on(self, model: str) -> AggregateRuleBuilder:
        """Set the belongs-to relationship whose parent stores the cache."""
        self._target_model = model
        return self

    def min(self, attribute: str) -> AggregateRuleBuilder:
        return self._add(AggregateFunction.MIN, attribute)

    def max(self, attribute: str) -> AggregateRuleBuilder:
        return self._add(AggregateFunction.MAX, attribute)

    def sum(self, attribute: str) -> AggregateRuleBuilder:
        return self._add(AggregateFunction.SUM, attribute)

    def avg(self, attribute: str) -> AggregateRuleBuilder:
        return self._add(AggregateFunction.AVG, attribute)

    def count(self, attribute: str) -> AggregateRuleBuilder:
        return self._add(AggregateFunction.COUNT, attribute)

    def where(self, **conditions: Any) -> AggregateRuleBuilder:
        """Add equality filters. Replaces the relationship's default conditions."""
        if self._conditions is None:
            self._conditions = {}
        self._conditions.update(conditions)
        return self

    def recursive(self, depth: int) -> AggregateRuleBuilder:
        """Pass a recursion depth hint through to the aggregate query."""
        self._recursion_depth = depth
        return self

    def _add(self, function: AggregateFunction, attribute: str) -> AggregateRuleBuilder:
        self._function_map[function] = attribute
        return self

    def build(self, child_type: str = "<builder>") -> AggregateRule:
        """Validate and compile the rule.

        Raises:
            ConfigurationError: If field, model or every function is missing.
        """
        if not self._source_field or not self._source_field.strip():
            raise ConfigurationError(child_type, "field: must not be empty")
        if not self._target_model or not self._target_model.strip():
            raise ConfigurationError(child_type, "model: a relationship is required, use .on()")
        empty = [f.value for f, attr in self._function_map.items() if not attr]
        if empty:
            raise ConfigurationError(child_type, f"empty destination for {', '.join(empty)}")
        if not self._function_map:
            raise ConfigurationError(child_type, "at least one aggregate function is required")

        return AggregateRule(
            source_field=self._source_field,
            target_model=self._target_model,
            function_map=self._function_map,
            conditions=self._conditions,
            recursion_depth=self._recursion_depth,
        )
