"""
In-process memory for toolport.

This package provides the key-value store the memory tools share.
Nothing is persisted beyond the lifetime of the process.
"""

from toolport.memory.models import MemoryEntry, MemoryStats
from toolport.memory.store import MemoryStore

__all__ = [
    "MemoryEntry",
    "MemoryStats",
    "MemoryStore",
]
