"""Entity: a record's attributes plus the values it was loaded with."""

from __future__ import annotations

from typing import Any, Mapping


class Entity:
    """A typed record tracking pending changes against its persisted state.

    ``get`` returns the current (possibly modified) value of an attribute;
    ``get_original`` returns the value as last loaded from or saved to the
    store. A new entity has no original values.
    """

    def __init__(
        self,
        entity_type: str,
        values: Mapping[str, Any] | None = None,
        *,
        persisted: bool = False,
        primary_key: str = "id",
    ) -> None:
        self.entity_type = entity_type
        self.primary_key = primary_key
        self._values: dict[str, Any] = dict(values or {})
        self._original: dict[str, Any] = dict(self._values) if persisted else {}
        self._new = not persisted

    @property
    def id(self) -> Any:
        return self._values.get(self.primary_key)

    @property
    def is_new(self) -> bool:
        return self._new

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def set(self, name: str, value: Any) -> Entity:
        self._values[name] = value
        return self

    def get_original(self, name: str, default: Any = None) -> Any:
        """Persisted value of *name*, falling back to the current one if unchanged."""
        if self._new:
            return self._values.get(name, default)
        return self._original.get(name, default)

    def dirty(self) -> dict[str, Any]:
        """Attributes changed since the entity was loaded or last saved."""
        if self._new:
            return dict(self._values)
        return {
            name: value
            for name, value in self._values.items()
            if name not in self._original or self._original[name] != value
        }

    def mark_persisted(self, record_id: Any = None) -> None:
        """Record a successful save: current values become the originals."""
        if record_id is not None:
            self._values[self.primary_key] = record_id
        self._original = dict(self._values)
        self._new = False

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)

    def __repr__(self) -> str:
        return f"Entity({self.entity_type!r}, {self._values!r}, persisted={not self._new})"
