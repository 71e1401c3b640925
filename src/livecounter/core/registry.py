"""
Session Registry

Maps an opaque session identifier to its single ``CounterSession`` actor,
creating actors on first use and evicting those that have been idle for too
long. An evicted session reactivates from the store on its next request.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..config import SessionConfig
from ..persistence.base import ScalarStore
from .session import CounterSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Identifier-addressed lookup of session actors"""

    def __init__(self, store: ScalarStore, config: Optional[SessionConfig] = None):
        self.store = store
        self.config = config or SessionConfig()
        self._sessions: Dict[str, CounterSession] = {}
        self._cleanup_task: Optional[asyncio.Task] = None

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str) -> CounterSession:
        """Return the actor for ``session_id``, creating it if needed."""
        session = self._sessions.get(session_id)
        if session is None or session.closed:
            session = CounterSession.from_config(session_id, self.store, self.config)
            self._sessions[session_id] = session
            logger.debug(f"Created session actor {session_id}")
        return session

    async def evict(self, session_id: str) -> bool:
        """Shut down and forget one session."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        await session.shutdown()
        return True

    async def evict_idle(self, idle_timeout: Optional[float] = None) -> int:
        """
        Evict sessions without subscribers that have been idle long enough.

        Returns:
            Number of sessions evicted
        """
        timeout = self.config.idle_timeout if idle_timeout is None else idle_timeout
        idle: List[str] = [
            session_id for session_id, session in self._sessions.items()
            if not session.subscriber_count and not session.is_running
            and session.idle_for() >= timeout
        ]

        evicted = 0
        for session_id in idle:
            session = self._sessions.get(session_id)
            # A request may have re-attached while an earlier eviction awaited
            if session is None or session.subscriber_count or session.is_running:
                continue
            await self.evict(session_id)
            evicted += 1
        return evicted

    def start_cleanup(self) -> None:
        """Start the background idle-eviction task."""
        if self._cleanup_task is not None and not self._cleanup_task.done():
            return
        self._cleanup_task = asyncio.get_running_loop().create_task(self._cleanup_loop())

    async def stop_cleanup(self) -> None:
        """Stop the background idle-eviction task."""
        task, self._cleanup_task = self._cleanup_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.cleanup_interval)
            try:
                evicted = await self.evict_idle()
                if evicted > 0:
                    logger.info(f"Evicted {evicted} idle sessions")
            except Exception as e:
                logger.error(f"Error during session cleanup: {e}")

    async def shutdown(self) -> None:
        """Stop cleanup and shut down every session."""
        await self.stop_cleanup()
        for session_id in list(self._sessions):
            await self.evict(session_id)
        logger.info("Session registry shut down")

    def stats(self) -> Dict[str, Any]:
        """Get registry statistics"""
        sessions = list(self._sessions.values())
        return {
            'sessions': len(sessions),
            'running_sessions': sum(1 for s in sessions if s.is_running),
            'subscribers': sum(s.subscriber_count for s in sessions)
        }
