"""SQLModel implementation of the period log repository."""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlmodel import col, select

from ...models.cycle import PeriodLog
from .base import SessionRepository

_LOG_FIELDS = (
    "is_start_day",
    "is_end_day",
    "flow_intensity",
    "symptoms",
    "mood",
    "energy_level",
    "severity",
    "notes",
)


class SQLModelPeriodLogRepository(SessionRepository):
    """SQLModel-based period log repository implementation."""

    def get(self, log_date: date, *, user_id: int) -> Optional[PeriodLog]:
        """Retrieve the log for a calendar day."""
        with self.session_factory() as session:
            return session.exec(
                select(PeriodLog).where(
                    PeriodLog.user_id == user_id, PeriodLog.log_date == log_date
                )
            ).first()

    def list_all(
        self, *, user_id: int, start: date | None = None, end: date | None = None
    ) -> list[PeriodLog]:
        """List logs in date order, optionally within [start, end]."""
        with self.session_factory() as session:
            statement = select(PeriodLog).where(PeriodLog.user_id == user_id)
            if start is not None:
                statement = statement.where(PeriodLog.log_date >= start)
            if end is not None:
                statement = statement.where(PeriodLog.log_date <= end)
            return list(session.exec(statement.order_by(col(PeriodLog.log_date))).all())

    def upsert(self, log: PeriodLog, *, user_id: int) -> PeriodLog:
        """Insert or replace the log for its day."""
        with self.session_factory() as session:
            existing = session.exec(
                select(PeriodLog).where(
                    PeriodLog.user_id == user_id, PeriodLog.log_date == log.log_date
                )
            ).first()

            if existing:
                for field in _LOG_FIELDS:
                    setattr(existing, field, getattr(log, field))
                target = existing
            else:
                log.user_id = user_id
                target = log
            session.add(target)
            self._save(session)
            session.refresh(target)
            return target

    def delete(self, log_date: date, *, user_id: int) -> Optional[PeriodLog]:
        """Delete the log for a calendar day; returns the removed row, if any."""
        with self.session_factory() as session:
            log = session.exec(
                select(PeriodLog).where(
                    PeriodLog.user_id == user_id, PeriodLog.log_date == log_date
                )
            ).first()
            if log:
                session.delete(log)
                self._save(session)
            return log


__all__ = ["SQLModelPeriodLogRepository"]
