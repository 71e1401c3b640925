"""
LiveCounter Persistence Layer - SQL Backend

🗃️ SQLModel backed scalar store:
Stores each ``(partition, key)`` entry as one row so counters survive
process restarts. Works with any SQLAlchemy URL; SQLite is the default.
Database calls run in a worker thread so the event loop is never blocked.
"""

import asyncio
import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Field, Session, SQLModel, create_engine

from ..errors import PersistenceError
from .base import ScalarStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CounterEntry(SQLModel, table=True):
    """One persisted scalar"""
    __tablename__ = "counter_entries"
    __table_args__ = {'extend_existing': True}

    partition: str = Field(primary_key=True)
    key: str = Field(primary_key=True)
    value: int = 0
    updated_at: datetime = Field(default_factory=utc_now)


class SQLStore(ScalarStore):
    """
    SQL scalar store using SQLModel.

    Writes are committed before ``put`` returns, which is what lets the
    session broadcast a value only after it is durable.
    """

    def __init__(self, url: str = "sqlite:///livecounter.db", echo: bool = False):
        engine_kwargs = {}
        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                engine_kwargs["poolclass"] = StaticPool

        self.url = url
        self.engine = create_engine(url, echo=echo, **engine_kwargs)
        self._lock = threading.Lock()

        try:
            SQLModel.metadata.create_all(self.engine, tables=[CounterEntry.__table__])
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to initialize store at {url}: {e}") from e

        logger.info(f"SQLStore initialized: {self.engine.url}")

    async def get(self, partition: str, key: str, default: Optional[int] = None) -> Optional[int]:
        """Read a value from the database."""
        return await asyncio.to_thread(self._get_sync, partition, key, default)

    async def put(self, partition: str, key: str, value: int) -> None:
        """Write and commit a value."""
        await asyncio.to_thread(self._put_sync, partition, key, value)

    async def close(self) -> None:
        await asyncio.to_thread(self.engine.dispose)

    def _get_sync(self, partition: str, key: str, default: Optional[int]) -> Optional[int]:
        try:
            with self._lock, Session(self.engine) as session:
                entry = session.get(CounterEntry, (partition, key))
                return default if entry is None else entry.value
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read {partition}/{key}: {e}") from e

    def _put_sync(self, partition: str, key: str, value: int) -> None:
        try:
            with self._lock, Session(self.engine) as session:
                entry = session.get(CounterEntry, (partition, key))
                if entry is None:
                    entry = CounterEntry(partition=partition, key=key, value=value)
                else:
                    entry.value = value
                    entry.updated_at = utc_now()
                session.add(entry)
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to write {partition}/{key}: {e}") from e
