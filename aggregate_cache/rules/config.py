"""Validation of raw rule dictionaries.

Rules arrive as plain dicts in the shape::

    {
        "field": "rating",           # optional when given as the mapping key
        "model": "Posts",            # belongs-to relationship name
        "avg": "average_rating",     # function -> parent attribute
        "max": "best_rating",
        "conditions": {"visible": 1},
        "recursive": -1,
    }

RuleConfig checks them with Pydantic and compiles them into AggregateRule.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from aggregate_cache.core.enums import AggregateFunction
from aggregate_cache.core.exceptions import ConfigurationError
from aggregate_cache.rules.plan import AggregateRule


class RuleConfig(BaseModel):
    """Pydantic model for one aggregate rule dict. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    field: str
    model: str
    min: str | None = None
    max: str | None = None
    sum: str | None = None
    avg: str | None = None
    count: str | None = None
    conditions: dict[str, Any] | None = None
    recursive: int | None = None

    @field_validator("field", "model")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @model_validator(mode="after")
    def _has_function(self) -> RuleConfig:
        if not self.function_map():
            names = ", ".join(f.value for f in AggregateFunction)
            raise ValueError(f"at least one aggregate function ({names}) is required")
        return self

    def function_map(self) -> dict[AggregateFunction, str]:
        result: dict[AggregateFunction, str] = {}
        for function in AggregateFunction:
            destination = getattr(self, function.value)
            if destination:
                result[function] = destination
        return result

    def to_rule(self) -> AggregateRule:
        return AggregateRule(
            source_field=self.field,
            target_model=self.model,
            function_map=self.function_map(),
            conditions=self.conditions,
            recursion_depth=self.recursive,
        )


def compile_rule(child_type: str, raw: Mapping[str, Any], key: Any = None) -> AggregateRule:
    """Validate *raw* and compile it into an AggregateRule.

    Args:
        child_type: Entity type the rule is registered for (error context).
        raw: The rule dict.
        key: Mapping key the rule was given under. Used as the source field
            when the dict has no ``field`` entry and the key is a string.

    Raises:
        ConfigurationError: If the rule is malformed.
    """
    data = dict(raw)
    if not data.get("field") and isinstance(key, str):
        data["field"] = key
    try:
        return RuleConfig.model_validate(data).to_rule()
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'rule'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(child_type, details) from e
