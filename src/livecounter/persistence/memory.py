"""
LiveCounter Persistence Layer - Memory Backend

In-memory scalar store for development and testing.
"""

from typing import Dict, Optional, Tuple

from .base import ScalarStore


class MemoryStore(ScalarStore):
    """
    In-memory scalar store.

    Provides fast persistence for development and testing.
    Data survives session eviction but is lost when the process exits.
    """

    def __init__(self):
        self._data: Dict[Tuple[str, str], int] = {}

    async def get(self, partition: str, key: str, default: Optional[int] = None) -> Optional[int]:
        """Read a value from memory."""
        return self._data.get((partition, key), default)

    async def put(self, partition: str, key: str, value: int) -> None:
        """Write a value to memory."""
        self._data[(partition, key)] = value

    def clear(self) -> None:
        """Drop every stored value."""
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


_memory_store: Optional[MemoryStore] = None


def get_memory_store() -> MemoryStore:
    """Get the process-wide memory store instance."""
    global _memory_store
    if _memory_store is None:
        _memory_store = MemoryStore()
    return _memory_store
