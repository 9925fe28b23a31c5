"""Writes recomputed aggregate values onto the parent record."""

from __future__ import annotations

from typing import Any, Mapping

import structlog

from aggregate_cache.core.exceptions import PersistenceError
from aggregate_cache.store.protocol import RecordStore

logger = structlog.get_logger()


class CacheWriter:
    """Patches cached aggregate attributes onto existing parents.

    Never creates a parent: a cache for a parent that does not exist is
    dropped.
    """

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def apply_cache(
        self,
        target_type: str,
        parent_id: Any,
        values: Mapping[str, Any],
    ) -> bool:
        """Merge *values* onto parent *parent_id* and persist it.

        Returns:
            True if the parent was updated, False if it does not exist.

        Raises:
            PersistenceError: If the lookup or the save fails.
        """
        try:
            if not self._store.exists(target_type, parent_id):
                logger.debug("cache_parent_missing", target_type=target_type, parent_id=parent_id)
                return False
            self._store.patch_and_save(target_type, parent_id, values)
        except Exception as e:
            raise PersistenceError(target_type, parent_id, str(e)) from e

        logger.debug(
            "cache_applied",
            target_type=target_type,
            parent_id=parent_id,
            values=dict(values),
        )
        return True
