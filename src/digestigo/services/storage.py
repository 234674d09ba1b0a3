"""Persistent collection of tracking entries."""

import asyncio
import logging
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from ..exceptions import StaleSessionError, StorageReadError
from ..models.tracking import NewEntry, TrackingEntry
from .backends import Store

logger = logging.getLogger(__name__)

_entries_adapter = TypeAdapter(list[TrackingEntry])


class EntryStore:
    """
    Append-only store for tracking entries.

    The whole collection is serialized as one JSON array under a single key.
    No two entries share a ``(category, summary)`` pair; appending a
    duplicate is skipped and returns ``None``.

    ``generation`` increases on every :meth:`clear`. Callers that capture it
    before a slow operation can pass it back to :meth:`append` so nothing is
    written into a collection that was cleared in the meantime.
    """

    def __init__(self, store: Store, key: str = "tracking_entries"):
        self.store = store
        self.key = key
        self.generation = 0
        self._lock = asyncio.Lock()

    async def _load(self) -> list[TrackingEntry]:
        raw = await self.store.get(self.key)
        if not raw:
            return []
        try:
            return _entries_adapter.validate_json(raw)
        except ValidationError as e:
            raise StorageReadError(f"Stored entries under {self.key!r} are corrupt") from e

    async def append(
        self,
        new_entry: NewEntry,
        expected_generation: Optional[int] = None,
    ) -> Optional[TrackingEntry]:
        """
        Save a new entry unless an identical one already exists.

        Returns the stored entry, or ``None`` if it was a duplicate.
        Raises ``StorageError`` if the backing store fails and
        ``StaleSessionError`` if ``expected_generation`` is outdated.
        """
        async with self._lock:
            if expected_generation is not None and expected_generation != self.generation:
                raise StaleSessionError(expected_generation, self.generation)

            entries = await self._load()

            if any(e.dedup_key == new_entry.dedup_key for e in entries):
                logger.info(
                    "Skipping duplicate %s entry: %s",
                    new_entry.category.value,
                    new_entry.summary,
                )
                return None

            entry = TrackingEntry.from_new(new_entry)
            entries.append(entry)
            await self.store.set(self.key, _entries_adapter.dump_json(entries).decode())

            logger.info("Saved %s entry: %s", entry.category.value, entry.summary)
            return entry

    async def all(self) -> list[TrackingEntry]:
        """All entries in insertion order; empty if storage can't be read."""
        try:
            return await self._load()
        except StorageReadError as e:
            logger.warning("Could not read tracking entries: %s", e)
            return []

    async def clear(self) -> None:
        """Remove every entry. Irreversible."""
        async with self._lock:
            await self.store.remove(self.key)
            self.generation += 1
            logger.info("Cleared tracking entries")
