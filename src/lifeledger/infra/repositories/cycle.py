"""SQLModel implementations for explicit cycles and cycle settings."""

from __future__ import annotations

from typing import Optional

from sqlmodel import col, select

from ...models.cycle import CycleSettings, CycleStatus, PeriodCycle
from .base import SessionRepository


class SQLModelPeriodCycleRepository(SessionRepository):
    """Read access to the cycle records kept by the period tracking service."""

    def list_all(self, *, user_id: int) -> list[PeriodCycle]:
        with self.session_factory() as session:
            statement = (
                select(PeriodCycle)
                .where(PeriodCycle.user_id == user_id)
                .order_by(col(PeriodCycle.start_date))
            )
            return list(session.exec(statement).all())

    def get_open(self, *, user_id: int) -> Optional[PeriodCycle]:
        with self.session_factory() as session:
            statement = (
                select(PeriodCycle)
                .where(PeriodCycle.user_id == user_id, PeriodCycle.status == CycleStatus.OPEN)
                .order_by(col(PeriodCycle.start_date).desc())
            )
            return session.exec(statement).first()


class SQLModelCycleSettingsRepository(SessionRepository):
    """SQLModel-based cycle settings repository."""

    def get(self, *, user_id: int) -> Optional[CycleSettings]:
        with self.session_factory() as session:
            return session.get(CycleSettings, user_id)

    def save(self, settings: CycleSettings, *, user_id: int) -> CycleSettings:
        with self.session_factory() as session:
            existing = session.get(CycleSettings, user_id)
            if existing:
                existing.cycle_length = settings.cycle_length
                existing.period_length = settings.period_length
                existing.last_period_date = settings.last_period_date
                target = existing
            else:
                settings.user_id = user_id
                target = settings
            session.add(target)
            self._save(session)
            session.refresh(target)
            return target


__all__ = ["SQLModelCycleSettingsRepository", "SQLModelPeriodCycleRepository"]
