"""SQL-backed EntityStore.

Renders parameterized statements with ``:name`` placeholders, normalizes
them to the adapter's paramstyle and runs them on pooled connections from
a ConnectionManager. Table and column names cannot be bound as parameters,
so every identifier is checked against a strict pattern before it is
interpolated.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

import structlog

from aggregate_cache.core.connection import ConnectionManager
from aggregate_cache.core.enums import AggregateFunction
from aggregate_cache.core.exceptions import (
    InvalidIdentifierError,
    RecordNotFoundError,
    StoreError,
)
from aggregate_cache.core.params import normalize_params

logger = structlog.get_logger()

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _ident(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise InvalidIdentifierError(name)
    return name


def _row_to_dict(cursor: Any, row: Any) -> dict[str, Any]:
    """Handle both tuple-like rows and dict rows (psycopg dict_row)."""
    if isinstance(row, dict):
        return dict(row)
    columns = [desc[0] for desc in cursor.description]
    return dict(zip(columns, row, strict=True))


def _first_value(row: Any) -> Any:
    if isinstance(row, dict):
        return next(iter(row.values()))
    return row[0]


def _where(filters: Mapping[str, Any], params: dict[str, Any]) -> str:
    """Render equality filters as a WHERE body, adding bound values to *params*."""
    clauses = []
    for column, value in filters.items():
        if value is None:
            clauses.append(f"{_ident(column)} IS NULL")
            continue
        key = f"w{len(params)}"
        params[key] = value
        clauses.append(f"{_ident(column)} = :{key}")
    return " AND ".join(clauses) if clauses else "1 = 1"


class SQLRecordStore:
    """EntityStore over any adapter supported by ConnectionManager.

    Args:
        connection_manager: Source of pooled connections.
        tables: Entity type -> table name. Unmapped types use their own name.
        primary_key: Primary key column shared by all tables.
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        tables: Mapping[str, str] | None = None,
        primary_key: str = "id",
    ) -> None:
        self._connection_manager = connection_manager
        self._tables = dict(tables or {})
        self._primary_key = _ident(primary_key)
        self._paramstyle: str = connection_manager.adapter.paramstyle

    def table_for(self, entity_type: str) -> str:
        return _ident(self._tables.get(entity_type, entity_type))

    def _run(
        self,
        sql: str,
        params: dict[str, Any],
        *,
        fetch: str | None = None,
        commit: bool = False,
    ) -> Any:
        """Execute one statement and return the fetched row, rows or rowcount."""
        sql = normalize_params(sql, self._paramstyle)
        adapter = self._connection_manager.adapter
        with self._connection_manager.get_connection() as conn:
            try:
                cursor = adapter.execute(conn, sql, params)
                result: Any = None
                if fetch is not None:
                    # drain the cursor so a RETURNING statement is finished before commit
                    rows = cursor.fetchall()
                    if rows and fetch == "one":
                        result = _row_to_dict(cursor, rows[0])
                    elif rows:
                        result = _first_value(rows[0])
                else:
                    result = int(cursor.rowcount)
                if commit:
                    conn.commit()
            except Exception as e:
                if commit:
                    conn.rollback()
                raise StoreError(f"{e} [sql: {sql}]") from e
        return result

    def exists(self, entity_type: str, record_id: Any) -> bool:
        sql = (
            f"SELECT 1 FROM {self.table_for(entity_type)} "
            f"WHERE {self._primary_key} = :record_id LIMIT 1"
        )
        return self._run(sql, {"record_id": record_id}, fetch="value") is not None

    def get(self, entity_type: str, record_id: Any) -> dict[str, Any]:
        sql = f"SELECT * FROM {self.table_for(entity_type)} WHERE {self._primary_key} = :record_id"
        row = self._run(sql, {"record_id": record_id}, fetch="one")
        if row is None:
            raise RecordNotFoundError(entity_type, record_id)
        return row

    def insert(self, entity_type: str, values: Mapping[str, Any]) -> Any:
        columns = [_ident(c) for c in values]
        params = {f"v{i}": values[c] for i, c in enumerate(values)}
        placeholders = ", ".join(f":v{i}" for i in range(len(columns)))
        sql = (
            f"INSERT INTO {self.table_for(entity_type)} ({', '.join(columns)}) "
            f"VALUES ({placeholders}) RETURNING {self._primary_key}"
        )
        return self._run(sql, params, fetch="value", commit=True)

    def update(self, entity_type: str, record_id: Any, values: Mapping[str, Any]) -> None:
        if not values:
            return
        params: dict[str, Any] = {"record_id": record_id}
        assignments = []
        for i, (column, value) in enumerate(values.items()):
            params[f"v{i}"] = value
            assignments.append(f"{_ident(column)} = :v{i}")
        sql = (
            f"UPDATE {self.table_for(entity_type)} SET {', '.join(assignments)} "
            f"WHERE {self._primary_key} = :record_id"
        )
        if self._run(sql, params, commit=True) == 0:
            raise RecordNotFoundError(entity_type, record_id)

    def patch_and_save(
        self,
        entity_type: str,
        record_id: Any,
        values: Mapping[str, Any],
    ) -> None:
        self.update(entity_type, record_id, values)

    def delete(self, entity_type: str, record_id: Any) -> None:
        sql = f"DELETE FROM {self.table_for(entity_type)} WHERE {self._primary_key} = :record_id"
        if self._run(sql, {"record_id": record_id}, commit=True) == 0:
            raise RecordNotFoundError(entity_type, record_id)

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
        params: dict[str, Any] = {}
        sql = (
            f"SELECT {function.sql}({_ident(field)}) AS {function.value}_value "
            f"FROM {self.table_for(entity_type)} "
            f"WHERE {_where(filters, params)} "
            f"GROUP BY {_ident(group_by)}"
        )
        logger.debug(
            "aggregate_query",
            entity_type=entity_type,
            function=function.value,
            field=field,
            recursion_depth=recursion_depth,
        )
        return self._run(sql, params, fetch="value")
