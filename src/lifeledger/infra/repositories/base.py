"""Shared session handling for SQLModel repositories."""

from __future__ import annotations

from contextlib import nullcontext
from typing import Callable, ContextManager

from sqlmodel import Session


class SessionRepository:
    """Opens a session per call, or joins a caller's unit of work.

    A repository built with :meth:`in_session` reuses that session and only
    flushes; committing is left to whoever owns the session.
    """

    def __init__(self, session_factory: Callable[[], ContextManager[Session]]):
        """Initialize with a session factory."""
        self.session_factory = session_factory
        self._joined = False

    @classmethod
    def in_session(cls, session: Session):
        """Return a repository bound to *session*."""
        repo = cls(lambda: nullcontext(session))
        repo._joined = True
        return repo

    def _save(self, session: Session) -> None:
        if self._joined:
            session.flush()
        else:
            session.commit()


__all__ = ["SessionRepository"]
