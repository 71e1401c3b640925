"""
LiveCounter Persistence Module

Durable scalar stores used by session actors.
"""

from ..config import PersistenceConfig
from .base import ScalarStore
from .memory import MemoryStore, get_memory_store
from .sql import SQLStore, CounterEntry


def create_store(config: PersistenceConfig) -> ScalarStore:
    """Build the store selected by ``config.backend``."""
    if config.backend == "memory":
        return get_memory_store()
    if config.backend == "sql":
        return SQLStore(config.url, echo=config.echo)
    raise ValueError(f"Unknown storage backend: {config.backend}")


__all__ = [
    "ScalarStore",
    "MemoryStore",
    "get_memory_store",
    "SQLStore",
    "CounterEntry",
    "create_store",
]
