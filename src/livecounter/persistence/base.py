"""
LiveCounter Persistence Layer - Base Classes

This module provides the abstract interface for durable scalar stores.
"""

from abc import ABC, abstractmethod
from typing import Optional


class ScalarStore(ABC):
    """
    Abstract base class for durable scalar stores.

    Values are integers addressed by ``(partition, key)``. Each session owns
    one partition (its identifier), so sessions never contend on keys.
    Implementations must give read-your-writes consistency to the owner of a
    partition and raise ``PersistenceError`` when the substrate fails.
    """

    @abstractmethod
    async def get(self, partition: str, key: str, default: Optional[int] = None) -> Optional[int]:
        """
        Read a value.

        Args:
            partition: Storage partition, the session identifier
            key: Entry name inside the partition

        Returns:
            The stored value, or ``default`` when absent
        """
        pass

    @abstractmethod
    async def put(self, partition: str, key: str, value: int) -> None:
        """
        Durably write a value. Returns only once the write is committed.

        Args:
            partition: Storage partition, the session identifier
            key: Entry name inside the partition
            value: Value to store
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the store."""
        pass
