"""In-memory interview session store with bounded retention."""
from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterator, Optional

from .errors import NotFoundError
from .models import STATUS_ACTIVE, Session, utcnow
from .question_bank import QuestionBank, normalize_level

Clock = Callable[[], datetime]


class _ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class SessionStore:
    """Sessions keyed by id, kept for ``ttl`` after their last update.

    Callers always receive deep copies: mutating a returned session has no
    effect until it is passed back to :meth:`save`.
    """

    def __init__(
        self,
        bank: QuestionBank,
        *,
        ttl_seconds: int = 24 * 60 * 60,
        max_sessions: int = 10_000,
        clock: Optional[Clock] = None,
    ) -> None:
        self._bank = bank
        self._ttl = timedelta(seconds=ttl_seconds)
        self._max_sessions = max(1, max_sessions)
        self._clock = clock or utcnow
        self._sessions: Dict[str, Session] = {}
        self._lock = _ReadWriteLock()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._sessions)

    def create(self, user_id: str = "", level: str = "") -> Session:
        """Select questions for ``level`` and persist a new active session."""

        questions = self._bank.select_for_level(level)
        now = self._clock()
        session = Session(
            id=str(uuid.uuid4()),
            user_id=user_id,
            level=normalize_level(level),
            selected_questions=questions,
            question_index=0,
            current_question=questions[0].id if questions else "",
            status=STATUS_ACTIVE,
            created_at=now,
            updated_at=now,
        )
        self.save(session)
        return session

    def save(self, session: Session) -> None:
        """Upsert ``session`` and bump its ``updated_at``; expired sessions are dropped."""

        session.updated_at = self._clock()
        stored = session.model_copy(deep=True)
        with self._lock.write():
            self._sessions[stored.id] = stored
            self._purge_locked()
            self._evict_locked()

    def get(self, session_id: str) -> Optional[Session]:
        with self._lock.read():
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if not self._expired(session):
                return session.model_copy(deep=True)
        with self._lock.write():
            current = self._sessions.get(session_id)
            if current is not None and self._expired(current):
                del self._sessions[session_id]
        return None

    def require(self, session_id: str) -> Session:
        session = self.get(session_id)
        if session is None:
            raise NotFoundError("session", session_id)
        return session

    def purge_expired(self) -> int:
        """Drop expired sessions and return how many were removed."""

        with self._lock.write():
            return self._purge_locked()

    def _expired(self, session: Session) -> bool:
        return self._clock() - session.updated_at > self._ttl

    def _purge_locked(self) -> int:
        expired = [key for key, value in self._sessions.items() if self._expired(value)]
        for key in expired:
            del self._sessions[key]
        return len(expired)

    def _evict_locked(self) -> None:
        overflow = len(self._sessions) - self._max_sessions
        if overflow <= 0:
            return
        oldest = sorted(self._sessions.values(), key=lambda item: item.updated_at)[:overflow]
        for session in oldest:
            del self._sessions[session.id]


__all__ = ["SessionStore"]
