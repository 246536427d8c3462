"""In-memory store of live MCP sessions.

The store is the only mutable state shared between requests. It owns:

- the table ``session id -> Session``;
- one lock per session, used by `exclusive` to serialize access to that
  session's protocol state;
- a single-consumer event channel on which contexts announce their closure,
  drained by the store's reaper task which removes the closed session.

Nothing is persisted: every session is lost on restart.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from .errors import SessionInvalid
from .protocol import SessionClosed, SessionContext

ContextFactory = Callable[[str, "asyncio.Queue[SessionClosed]"], SessionContext]


@dataclass
class Session:
    """One client's protocol conversation."""

    session_id: str
    context: SessionContext
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def closed(self) -> bool:
        return self.context.closed


class SessionStore:
    """Lock-guarded table of live sessions with explicit lifecycle."""

    def __init__(self, context_factory: ContextFactory) -> None:
        self._context_factory = context_factory
        self._sessions: Dict[str, Session] = {}
        self._table_lock = asyncio.Lock()
        self._events: "asyncio.Queue[SessionClosed]" = asyncio.Queue()
        self._reaper: Optional["asyncio.Task[None]"] = None
        self._logger = logging.getLogger(__name__)

    def start(self) -> None:
        """Start the reaper task consuming close notifications. Idempotent."""
        if self._reaper is None or self._reaper.done():
            self._reaper = asyncio.get_running_loop().create_task(self._reap(), name="session-reaper")

    async def stop(self) -> None:
        if self._reaper is None:
            return
        self._reaper.cancel()
        try:
            await self._reaper
        except asyncio.CancelledError:
            pass
        self._reaper = None

    async def create(self) -> Session:
        self.start()
        async with self._table_lock:
            session_id = str(uuid.uuid4())
            while session_id in self._sessions:
                session_id = str(uuid.uuid4())
            session = Session(session_id=session_id, context=self._context_factory(session_id, self._events))
            self._sessions[session_id] = session
        self._logger.info("Session created: %s (active=%d)", session_id, len(self._sessions))
        return session

    def lookup(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    @asynccontextmanager
    async def exclusive(self, session_id: str, *, request_id: Optional[Any] = None) -> AsyncIterator[Session]:
        """Hold the per-session lock of a live session.

        Raises `SessionInvalid` if the session is unknown or already closed,
        before or after waiting for the lock.
        """
        session = self.lookup(session_id)
        if session is None or session.closed:
            raise SessionInvalid(session_id, request_id=request_id)
        async with session.lock:
            if session.closed or self._sessions.get(session_id) is not session:
                raise SessionInvalid(session_id, request_id=request_id)
            yield session

    async def remove(self, session_id: str) -> bool:
        """Remove a session and close its context. Idempotent."""
        async with self._table_lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        async with session.lock:
            await session.context.close(reason="removed")
        self._logger.info("Session removed: %s (active=%d)", session_id, len(self._sessions))
        return True

    async def close_all(self) -> None:
        async with self._table_lock:
            sessions: List[Session] = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            self._logger.info("Closing session: %s", session.session_id)
            async with session.lock:
                await session.context.close(reason="shutdown")

    def count(self) -> int:
        return sum(1 for s in self._sessions.values() if not s.closed)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return isinstance(session_id, str) and session_id in self._sessions

    async def _reap(self) -> None:
        while True:
            event = await self._events.get()
            try:
                if await self.remove(event.session_id):
                    self._logger.debug("Reaped session %s (%s)", event.session_id, event.reason)
            except Exception:
                self._logger.exception("Failed to tear down session %s", event.session_id)
            finally:
                self._events.task_done()
