"""Cache layer - snapshot, recompute and write back parent aggregates."""

from __future__ import annotations

from aggregate_cache.cache.orchestrator import AggregateCache, CacheUpdate, WriteReport
from aggregate_cache.cache.recompute import EMPTY_GROUP_VALUE, RecomputeEngine, build_filters
from aggregate_cache.cache.tracker import ForeignKeySnapshot, ForeignKeyTracker
from aggregate_cache.cache.writer import CacheWriter

__all__ = [
    "AggregateCache",
    "WriteReport",
    "CacheUpdate",
    "RecomputeEngine",
    "build_filters",
    "EMPTY_GROUP_VALUE",
    "ForeignKeySnapshot",
    "ForeignKeyTracker",
    "CacheWriter",
]
