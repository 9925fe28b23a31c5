"""Compiled rule and relationship data classes.

Frozen dataclasses built once at configuration time and read-only after.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from aggregate_cache.core.enums import AggregateFunction


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
    if mapping is None:
        return None
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class AggregateRule:
    """One cached aggregate: source field, parent relationship, destinations.

    ``conditions`` is ``None`` when the rule does not declare any, in which
    case the relationship's default conditions apply. An empty mapping is a
    declaration too and suppresses the defaults.
    """

    source_field: str
    target_model: str
    function_map: Mapping[AggregateFunction, str]
    conditions: Mapping[str, Any] | None = None
    recursion_depth: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "function_map", MappingProxyType(dict(self.function_map)))
        object.__setattr__(self, "conditions", _freeze(self.conditions))

    @property
    def functions(self) -> tuple[AggregateFunction, ...]:
        return tuple(self.function_map)


@dataclass(frozen=True)
class RelationshipDescriptor:
    """A belongs-to relationship of a child entity type."""

    name: str
    foreign_key: str
    default_conditions: Mapping[str, Any] = field(default_factory=dict)
    target: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "default_conditions", _freeze(self.default_conditions))
        if not self.target:
            object.__setattr__(self, "target", self.name)
