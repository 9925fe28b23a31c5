"""Enumerations shared across the package."""

from __future__ import annotations

from enum import Enum


class AggregateFunction(Enum):
    """Aggregate functions a rule may cache on its parent."""

    MIN = "min"
    MAX = "max"
    SUM = "sum"
    AVG = "avg"
    COUNT = "count"

    @property
    def sql(self) -> str:
        return self.value.upper()


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
