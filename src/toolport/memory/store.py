"""
In-process key-value memory store.

The store lives for the lifetime of the process and is never persisted.
Every mutating method runs as one synchronous step, so handlers sharing
the store on a single event loop never observe a half-applied update and
no locking is needed.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from toolport.memory.models import MemoryEntry, MemoryStats, utc_now

logger = logging.getLogger(__name__)


class MemoryStore:
    """Key-value store with tags and timestamps.

    Entries are kept in insertion order; overwriting a key keeps its
    original position.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        """Initialize the store.

        Args:
            clock: Source of timestamps (injectable for tests)
        """
        self._entries: dict[str, MemoryEntry] = {}
        self._clock = clock

    def set(self, key: str, value: str, tags: list[str] | None = None) -> MemoryEntry:
        """Create or replace an entry.

        Replacing keeps ``created_at`` from the first write and advances
        ``updated_at``. Tags are replaced, de-duplicated in order.
        """
        now = self._clock()
        existing = self._entries.get(key)
        entry = MemoryEntry(
            key=key,
            value=value,
            tags=list(dict.fromkeys(tags or [])),
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        self._entries[key] = entry
        logger.debug(f"Memory set: {key}")
        return entry

    def get(self, key: str) -> MemoryEntry | None:
        return self._entries.get(key)

    def append(self, key: str, value: str, separator: str = "\n") -> MemoryEntry | None:
        """Append to an existing entry.

        Returns:
            The updated entry, or None if the key does not exist
        """
        existing = self._entries.get(key)
        if existing is None:
            return None

        entry = existing.model_copy(
            update={"value": existing.value + separator + value, "updated_at": self._clock()}
        )
        self._entries[key] = entry
        return entry

    def delete(self, key: str) -> bool:
        """Delete an entry. Returns True if it existed."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Remove every entry. Returns how many were removed."""
        count = len(self._entries)
        self._entries.clear()
        logger.debug(f"Memory cleared ({count} entries)")
        return count

    def entries(self, tag: str | None = None, limit: int | None = None) -> list[MemoryEntry]:
        """Entries in insertion order, optionally filtered by exact tag."""
        entries = [e for e in self._entries.values() if tag is None or e.has_tag(tag)]
        return entries[:limit] if limit is not None else entries

    def search(self, query: str, limit: int | None = None) -> list[MemoryEntry]:
        """Entries whose key, value or tags contain ``query`` (case-insensitive)."""
        matches = [e for e in self._entries.values() if e.matches(query)]
        return matches[:limit] if limit is not None else matches

    def stats(self) -> MemoryStats:
        tags: dict[str, None] = {}
        for entry in self._entries.values():
            tags.update(dict.fromkeys(entry.tags))
        return MemoryStats(
            total_entries=len(self._entries),
            total_size=sum(len(e.value) for e in self._entries.values()),
            tags=list(tags),
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
