"""Repository layer - host write lifecycle around an EntityStore."""

from __future__ import annotations

from aggregate_cache.repository.base import Repository

__all__ = [
    "Repository",
]
