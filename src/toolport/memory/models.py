"""
Memory models for toolport.

Defines the entries held by the in-process key-value store.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryEntry(BaseModel):
    """A single stored value.

    Created on the first ``set``, mutated by later ``set``/``append`` calls,
    destroyed on ``delete`` or ``clear``. ``created_at`` never changes after
    creation; ``updated_at`` moves forward on every mutation.
    """

    key: str
    value: str
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on key, value or any tag."""
        needle = query.lower()
        return (
            needle in self.key.lower()
            or needle in self.value.lower()
            or any(needle in tag.lower() for tag in self.tags)
        )


class MemoryStats(BaseModel):
    """Aggregate statistics over the store."""

    total_entries: int
    total_size: int
    tags: list[str]
