"""Rule layer - aggregate rules, their registry and parent relationships."""

from __future__ import annotations

from aggregate_cache.rules.builder import AggregateRuleBuilder, rule
from aggregate_cache.rules.config import RuleConfig, compile_rule
from aggregate_cache.rules.plan import AggregateRule, RelationshipDescriptor
from aggregate_cache.rules.registry import RuleRegistry
from aggregate_cache.rules.relationships import RelationshipResolver, Schema

__all__ = [
    "AggregateRule",
    "RelationshipDescriptor",
    "RuleConfig",
    "compile_rule",
    "AggregateRuleBuilder",
    "rule",
    "RuleRegistry",
    "RelationshipResolver",
    "Schema",
]
