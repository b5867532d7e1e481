"""Session Store - in-memory table of tracking sessions.

Concurrency:
- One table lock guards the id -> record mapping.
- Each record carries its own lock that serialises event appends.
- Removal (delete or sweep) marks the record closed under its lock, so an
  append racing with removal either lands first or raises
  SessionNotFoundError.

Store methods never block on I/O and are safe to call from the event loop
and from the sweeper thread alike.
"""

import logging, threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List

from linktrace.common.exceptions import SessionNotFoundError
from linktrace.tracking.identifiers import generate_tracking_id
from linktrace.tracking.schemas import Session, TrackingEvent

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _SessionRecord:
    """Mutable record owned exclusively by the store."""
    session_id: str
    target_url: str
    created_at: datetime
    events: List[TrackingEvent] = field(default_factory=list)
    closed: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def snapshot(self) -> Session:
        with self.lock:
            if self.closed:
                raise SessionNotFoundError(self.session_id)
            events = tuple(self.events)
        return Session(
            session_id=self.session_id,
            target_url=self.target_url,
            created_at=self.created_at,
            events=events,
        )

    def close(self) -> None:
        with self.lock:
            self.closed = True


class SessionStore:
    """Thread-safe mapping from tracking id to session record."""

    def __init__(
        self,
        clock: Clock = utc_now,
        id_factory: Callable[[], str] = generate_tracking_id,
    ):
        """Initialize an empty store.

        Args:
            clock: Returns the current time. Shared with the sweeper so
                creation times are never ahead of sweep times.
            id_factory: Mints new tracking ids.
        """
        self._clock = clock
        self._id_factory = id_factory
        self._sessions: Dict[str, _SessionRecord] = {}
        self._lock = threading.Lock()

    @property
    def clock(self) -> Clock:
        return self._clock

    def create(self, target_url: str) -> str:
        """Register a new session for ``target_url`` and return its id."""
        with self._lock:
            session_id = self._id_factory()
            # A live id is never handed out twice.
            while session_id in self._sessions:
                session_id = self._id_factory()
            self._sessions[session_id] = _SessionRecord(
                session_id=session_id,
                target_url=target_url,
                created_at=self._clock(),
            )
        logger.info(f"Created tracking session {session_id}")
        return session_id

    def get(self, session_id: str) -> Session:
        """Return a snapshot of the session.

        Raises:
            SessionNotFoundError: If the id is unknown, expired or deleted.
        """
        return self._lookup(session_id).snapshot()

    def append_event(self, session_id: str, event: TrackingEvent) -> None:
        """Append ``event`` to the session's event log.

        Raises:
            SessionNotFoundError: If the session does not exist or was
                removed before the append could land.
        """
        record = self._lookup(session_id)
        with record.lock:
            if record.closed:
                raise SessionNotFoundError(session_id)
            record.events.append(event)

    def delete(self, session_id: str) -> None:
        """Remove a session.

        Raises:
            SessionNotFoundError: If the id is not live.
        """
        with self._lock:
            record = self._sessions.pop(session_id, None)
        if record is None:
            raise SessionNotFoundError(session_id)
        record.close()
        logger.info(f"Deleted tracking session {session_id}")

    def sweep(self, now: datetime, retention: timedelta) -> List[str]:
        """Remove every session older than ``retention`` at ``now``.

        Returns:
            Ids of the removed sessions.
        """
        with self._lock:
            expired = [
                record for record in self._sessions.values()
                if now - record.created_at > retention
            ]
            for record in expired:
                del self._sessions[record.session_id]
        for record in expired:
            record.close()
        return [record.session_id for record in expired]

    def size(self) -> int:
        """Number of live sessions."""
        with self._lock:
            return len(self._sessions)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def _lookup(self, session_id: str) -> _SessionRecord:
        with self._lock:
            record = self._sessions.get(session_id)
        if record is None:
            raise SessionNotFoundError(session_id)
        return record
