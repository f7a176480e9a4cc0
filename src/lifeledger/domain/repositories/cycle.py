"""Period tracking repository protocols."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.cycle import CycleSettings, PeriodCycle, PeriodLog


class PeriodLogRepository(Protocol):
    """Repository for day-level period logs."""

    def get(self, log_date: date, *, user_id: int) -> Optional[PeriodLog]:
        """Retrieve the log for a calendar day."""
        ...

    def list_all(
        self, *, user_id: int, start: date | None = None, end: date | None = None
    ) -> list[PeriodLog]:
        """List logs in date order, optionally within [start, end]."""
        ...

    def upsert(self, log: PeriodLog, *, user_id: int) -> PeriodLog:
        """Insert or replace the log for its day."""
        ...

    def delete(self, log_date: date, *, user_id: int) -> Optional[PeriodLog]:
        """Delete the log for a calendar day."""
        ...


class PeriodCycleRepository(Protocol):
    """Repository for explicit cycle records."""

    def list_all(self, *, user_id: int) -> list[PeriodCycle]:
        """List cycles ordered by start date."""
        ...

    def get_open(self, *, user_id: int) -> Optional[PeriodCycle]:
        """Return the most recent open cycle, if any."""
        ...


class CycleSettingsRepository(Protocol):
    """Repository for per-user cycle settings."""

    def get(self, *, user_id: int) -> Optional[CycleSettings]:
        """Return stored settings or ``None``."""
        ...

    def save(self, settings: CycleSettings, *, user_id: int) -> CycleSettings:
        """Insert or update settings."""
        ...
