"""Period tracking workflows: logging starts, ends and daily entries.

Each workflow runs in a single session so the day log, the explicit
``PeriodCycle`` rows and ``CycleSettings`` change together or not at all.
The repositories join that session and flush; the workflow commits.
Cycle rows are rebuilt from the logs with the same pairing rule the
prediction engine uses.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

from sqlmodel import Session

from ..errors import CycleError, FutureLogError, NoOpenPeriodError
from ..infra.database import SessionFactory
from ..infra.repositories.cycle import (
    SQLModelCycleSettingsRepository,
    SQLModelPeriodCycleRepository,
)
from ..infra.repositories.period_log import SQLModelPeriodLogRepository
from ..logging_config import get_logger
from ..models.cycle import (
    CycleSettings,
    CycleStatus,
    EnergyLevel,
    FlowIntensity,
    PeriodCycle,
    PeriodLog,
    SymptomSeverity,
)
from .cycles import get_last_period_start, get_period_cycles

logger = get_logger("period_tracking")


def _reject_future(day: date, today: date | None) -> None:
    if day > (today or date.today()):
        raise FutureLogError(f"Cannot log a period day in the future ({day.isoformat()})")


def _settings_for(
    settings_repo: SQLModelCycleSettingsRepository, *, user_id: int
) -> CycleSettings:
    return settings_repo.get(user_id=user_id) or CycleSettings(user_id=user_id)


def sync_cycles(session: Session, *, user_id: int) -> list[PeriodCycle]:
    """Rebuild the user's ``PeriodCycle`` rows from their start and end logs."""

    logs = SQLModelPeriodLogRepository.in_session(session).list_all(user_id=user_id)
    wanted = {cycle.start: cycle for cycle in get_period_cycles(logs)}
    stored = SQLModelPeriodCycleRepository.in_session(session).list_all(user_id=user_id)

    by_start: dict[date, PeriodCycle] = {}
    for row in stored:
        if row.start_date not in wanted or row.start_date in by_start:
            session.delete(row)
            continue
        by_start[row.start_date] = row

    rows: list[PeriodCycle] = []
    for start, cycle in sorted(wanted.items()):
        row = by_start.get(start) or PeriodCycle(user_id=user_id, start_date=start)
        row.end_date = cycle.end
        row.status = CycleStatus.OPEN if cycle.is_open else CycleStatus.CLOSED
        session.add(row)
        rows.append(row)
    session.flush()
    return rows


def get_cycle_settings(*, session_factory: SessionFactory, user_id: int) -> CycleSettings:
    """Return stored settings, or unsaved defaults when the user has none."""

    settings = SQLModelCycleSettingsRepository(session_factory).get(user_id=user_id)
    return settings or CycleSettings(user_id=user_id)


def update_cycle_settings(
    *,
    session_factory: SessionFactory,
    user_id: int,
    cycle_length: int | None = None,
    period_length: int | None = None,
) -> CycleSettings:
    """Change the fallback cycle or period length; only the values passed change."""

    for label, value in (("Cycle length", cycle_length), ("Period length", period_length)):
        if value is not None and value <= 0:
            raise CycleError(f"{label} must be a positive number of days")

    repo = SQLModelCycleSettingsRepository(session_factory)
    settings = _settings_for(repo, user_id=user_id)
    if cycle_length is not None:
        settings.cycle_length = cycle_length
    if period_length is not None:
        settings.period_length = period_length
    settings = repo.save(settings, user_id=user_id)

    logger.info(
        "cycle settings saved",
        extra={
            "user_id": user_id,
            "cycle_length": settings.cycle_length,
            "period_length": settings.period_length,
        },
    )
    return settings


def log_period_start(
    *,
    session_factory: SessionFactory,
    user_id: int,
    day: date,
    today: date | None = None,
) -> PeriodLog:
    """Mark *day* as the first day of a period and open its cycle."""

    _reject_future(day, today)
    with session_factory() as session:
        logs = SQLModelPeriodLogRepository.in_session(session)
        log = logs.get(day, user_id=user_id) or PeriodLog(user_id=user_id, log_date=day)
        log.is_start_day = True
        log.is_end_day = False
        if log.flow_intensity is None:
            log.flow_intensity = FlowIntensity.MODERATE
        log = logs.upsert(log, user_id=user_id)

        sync_cycles(session, user_id=user_id)
        settings_repo = SQLModelCycleSettingsRepository.in_session(session)
        settings = _settings_for(settings_repo, user_id=user_id)
        settings.last_period_date = day
        settings_repo.save(settings, user_id=user_id)
        session.commit()
        session.refresh(log)

    logger.info("period start logged", extra={"user_id": user_id, "log_date": day.isoformat()})
    return log


def log_period_end(
    *,
    session_factory: SessionFactory,
    user_id: int,
    day: date,
    today: date | None = None,
) -> PeriodCycle:
    """Close the open period that started before *day*; return the closed cycle."""

    _reject_future(day, today)
    with session_factory() as session:
        logs = SQLModelPeriodLogRepository.in_session(session)
        open_cycles = [
            cycle
            for cycle in get_period_cycles(logs.list_all(user_id=user_id))
            if cycle.is_open and cycle.start < day
        ]
        if not open_cycles:
            raise NoOpenPeriodError("No open period started before this day")
        start = max(cycle.start for cycle in open_cycles)

        log = logs.get(day, user_id=user_id)
        if log is not None and log.is_start_day:
            raise CycleError(f"{day.isoformat()} is already logged as a period start")
        if log is None:
            log = PeriodLog(user_id=user_id, log_date=day)
        log.is_end_day = True
        if log.flow_intensity is None:
            log.flow_intensity = FlowIntensity.LIGHT
        logs.upsert(log, user_id=user_id)

        rows = sync_cycles(session, user_id=user_id)
        closed = next(row for row in rows if row.start_date == start)

        settings_repo = SQLModelCycleSettingsRepository.in_session(session)
        settings = _settings_for(settings_repo, user_id=user_id)
        settings.period_length = (day - start).days + 1
        settings.last_period_date = start
        settings_repo.save(settings, user_id=user_id)
        session.commit()
        session.refresh(closed)

    logger.info(
        "period end logged",
        extra={
            "user_id": user_id,
            "start_date": start.isoformat(),
            "end_date": day.isoformat(),
            "period_length": (day - start).days + 1,
        },
    )
    return closed


def remove_period_log(*, session_factory: SessionFactory, user_id: int, day: date) -> bool:
    """Delete the log for *day*. Returns False when nothing was logged.

    Removing a start drops its cycle; removing an end reopens the cycle it closed.
    """

    with session_factory() as session:
        logs = SQLModelPeriodLogRepository.in_session(session)
        removed = logs.delete(day, user_id=user_id)
        if removed is None:
            return False
        was_start = removed.is_start_day

        sync_cycles(session, user_id=user_id)
        settings_repo = SQLModelCycleSettingsRepository.in_session(session)
        settings = settings_repo.get(user_id=user_id)
        if was_start and settings is not None and settings.last_period_date == day:
            settings.last_period_date = get_last_period_start(logs.list_all(user_id=user_id))
            settings_repo.save(settings, user_id=user_id)
        session.commit()

    logger.info("period log removed", extra={"user_id": user_id, "log_date": day.isoformat()})
    return True


def log_daily_entry(
    *,
    session_factory: SessionFactory,
    user_id: int,
    day: date,
    mood: str | None = None,
    energy_level: EnergyLevel | str | None = None,
    severity: SymptomSeverity | str | None = None,
    symptoms: Iterable[str] | None = None,
    flow_intensity: FlowIntensity | str | None = None,
    notes: str | None = None,
    today: date | None = None,
) -> PeriodLog:
    """Record how the day went; only the fields passed are changed."""

    _reject_future(day, today)
    with session_factory() as session:
        logs = SQLModelPeriodLogRepository.in_session(session)
        log = logs.get(day, user_id=user_id) or PeriodLog(user_id=user_id, log_date=day)
        if mood is not None:
            log.mood = mood.strip() or None
        if energy_level is not None:
            log.energy_level = EnergyLevel(energy_level)
        if severity is not None:
            log.severity = SymptomSeverity(severity)
        if flow_intensity is not None:
            log.flow_intensity = FlowIntensity(flow_intensity)
        if symptoms is not None:
            log.symptoms = sorted({s.strip() for s in symptoms if s and s.strip()})
        if notes is not None:
            log.notes = notes.strip()
        log = logs.upsert(log, user_id=user_id)
        session.commit()
        session.refresh(log)

    logger.info("daily entry logged", extra={"user_id": user_id, "log_date": day.isoformat()})
    return log


__all__ = [
    "get_cycle_settings",
    "log_daily_entry",
    "log_period_end",
    "log_period_start",
    "remove_period_log",
    "sync_cycles",
    "update_cycle_settings",
]
