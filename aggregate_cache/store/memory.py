"""Dict-backed EntityStore.

Follows SQL aggregate semantics so it behaves like SQLRecordStore: NULL
(None) values are ignored by every function, COUNT(field) counts non-null
values, and MIN/MAX/SUM/AVG over no values give None.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from aggregate_cache.core.enums import AggregateFunction
from aggregate_cache.core.exceptions import RecordNotFoundError


def _avg(values: list[Any]) -> Any:
    return sum(values) / len(values) if values else None


_FUNCTIONS: dict[AggregateFunction, Callable[[list[Any]], Any]] = {
    AggregateFunction.MIN: lambda values: min(values) if values else None,
    AggregateFunction.MAX: lambda values: max(values) if values else None,
    AggregateFunction.SUM: lambda values: sum(values) if values else None,
    AggregateFunction.AVG: _avg,
    AggregateFunction.COUNT: len,
}


class InMemoryStore:
    """In-process EntityStore keyed by entity type and primary key."""

    def __init__(self, primary_key: str = "id") -> None:
        self.primary_key = primary_key
        self._tables: dict[str, dict[Any, dict[str, Any]]] = {}

    def _table(self, entity_type: str) -> dict[Any, dict[str, Any]]:
        return self._tables.setdefault(entity_type, {})

    def insert(self, entity_type: str, values: Mapping[str, Any]) -> Any:
        table = self._table(entity_type)
        row = dict(values)
        record_id = row.get(self.primary_key)
        if record_id is None:
            # per table, past every integer id already taken
            record_id = max((k for k in table if isinstance(k, int)), default=0) + 1
            row[self.primary_key] = record_id
        table[record_id] = row
        return record_id

    def update(self, entity_type: str, record_id: Any, values: Mapping[str, Any]) -> None:
        table = self._table(entity_type)
        if record_id not in table:
            raise RecordNotFoundError(entity_type, record_id)
        table[record_id].update(values)

    def delete(self, entity_type: str, record_id: Any) -> None:
        table = self._table(entity_type)
        if table.pop(record_id, None) is None:
            raise RecordNotFoundError(entity_type, record_id)

    def exists(self, entity_type: str, record_id: Any) -> bool:
        return record_id in self._table(entity_type)

    def get(self, entity_type: str, record_id: Any) -> dict[str, Any]:
        try:
            return dict(self._table(entity_type)[record_id])
        except KeyError:
            raise RecordNotFoundError(entity_type, record_id) from None

    def patch_and_save(
        self,
        entity_type: str,
        record_id: Any,
        values: Mapping[str, Any],
    ) -> None:
        record = self.get(entity_type, record_id)
        record.update(values)
        self._table(entity_type)[record_id] = record

    def all(self, entity_type: str) -> list[dict[str, Any]]:
        return [dict(row) for row in self._table(entity_type).values()]

    def aggregate(
        self,
        entity_type: str,
        function: AggregateFunction,
        field: str,
        filters: Mapping[str, Any],
        group_by: str,
        *,
        recursion_depth: int | None = None,
    ) -> Any:
        groups: dict[Any, list[Any]] = {}
        for row in self._table(entity_type).values():
            if all(row.get(column) == value for column, value in filters.items()):
                value = row.get(field)
                bucket = groups.setdefault(row.get(group_by), [])
                if value is not None:
                    bucket.append(value)

        if not groups:
            return None
        first = next(iter(groups.values()))
        return _FUNCTIONS[function](first)
