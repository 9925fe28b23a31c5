"""Aggregate rule registry.

Holds the configured AggregateRules per child entity type. Built once at
startup, then passed by reference to AggregateCache; read-only afterwards.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

import structlog

from aggregate_cache.core.exceptions import ConfigurationError
from aggregate_cache.rules.builder import AggregateRuleBuilder
from aggregate_cache.rules.config import compile_rule
from aggregate_cache.rules.plan import AggregateRule

logger = structlog.get_logger()


def _check_rule(child_type: str, compiled: AggregateRule) -> AggregateRule:
    """Apply the dict-rule checks to a rule built elsewhere."""
    if not compiled.source_field or not compiled.source_field.strip():
        raise ConfigurationError(child_type, "field: must not be empty")
    if not compiled.target_model or not compiled.target_model.strip():
        raise ConfigurationError(child_type, "model: must not be empty")
    if not compiled.function_map:
        raise ConfigurationError(child_type, "at least one aggregate function is required")
    empty = [f.value for f, attr in compiled.function_map.items() if not attr]
    if empty:
        raise ConfigurationError(child_type, f"empty destination for {', '.join(empty)}")
    return compiled


class RuleRegistry:
    """Indexes aggregate rules by child entity type.

    Malformed rules are dropped with a warning so one bad entry does not take
    the whole configuration down. Pass ``strict=True`` to raise instead.

    Args:
        strict: Raise ConfigurationError on malformed rules.
    """

    def __init__(self, strict: bool = False) -> None:
        self._strict = strict
        self._rules: dict[str, list[AggregateRule]] = {}

    @property
    def strict(self) -> bool:
        return self._strict

    def register(
        self,
        child_type: str,
        rule_specs: Mapping[Any, Any] | Iterable[Any],
    ) -> list[AggregateRule]:
        """Validate and index rules for *child_type*.

        Args:
            child_type: Entity type whose writes trigger the rules.
            rule_specs: Either a mapping of key -> rule (the key is the source
                field when the rule has no ``field``) or an iterable of rules.
                Each rule is a dict, an AggregateRule or a rule builder.

        Returns:
            The rules that were accepted, in order.

        Raises:
            ConfigurationError: In strict mode, for the first malformed rule.
        """
        if isinstance(rule_specs, Mapping):
            items: Iterable[tuple[Any, Any]] = rule_specs.items()
        else:
            items = ((None, spec) for spec in rule_specs)

        accepted: list[AggregateRule] = []
        for key, spec in items:
            try:
                compiled = self._compile(child_type, key, spec)
            except ConfigurationError as e:
                if self._strict:
                    raise
                logger.warning(
                    "aggregate_rule_dropped",
                    child_type=child_type,
                    key=key,
                    reason=e.detail,
                )
                continue
            accepted.append(compiled)

        self._rules.setdefault(child_type, []).extend(accepted)
        logger.debug("aggregate_rules_registered", child_type=child_type, count=len(accepted))
        return accepted

    def _compile(self, child_type: str, key: Any, spec: Any) -> AggregateRule:
        if isinstance(spec, AggregateRule):
            return _check_rule(child_type, spec)
        if isinstance(spec, AggregateRuleBuilder):
            return spec.build(child_type)
        if isinstance(spec, Mapping):
            return compile_rule(child_type, spec, key)
        raise ConfigurationError(child_type, f"unsupported rule type {type(spec).__name__}")

    def rules_for(self, child_type: str) -> tuple[AggregateRule, ...]:
        """Rules registered for *child_type*, in registration order."""
        return tuple(self._rules.get(child_type, ()))

    @property
    def child_types(self) -> list[str]:
        """Child types with at least one rule, sorted alphabetically."""
        return sorted(t for t, rules in self._rules.items() if rules)

    def __contains__(self, child_type: object) -> bool:
        return bool(self._rules.get(child_type))  # type: ignore[arg-type]

    def __len__(self) -> int:
        """Total number of registered rules."""
        return sum(len(rules) for rules in self._rules.values())
