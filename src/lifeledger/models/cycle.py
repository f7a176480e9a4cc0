"""Period tracking data structures."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import ClassVar, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from ..constants.cycle import DEFAULT_CYCLE_LENGTH, DEFAULT_PERIOD_LENGTH


class FlowIntensity(str, Enum):
    SPOTTING = "spotting"
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


class EnergyLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SymptomSeverity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class CycleStatus(str, Enum):
    """An open cycle has a start day but no end day yet."""

    OPEN = "open"
    CLOSED = "closed"


class PeriodLog(SQLModel, table=True):
    """One logged calendar day: period markers plus mood and symptoms."""

    __tablename__: ClassVar[str] = "period_log"
    __table_args__ = (UniqueConstraint("user_id", "log_date", name="uq_period_log_user_day"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, index=True)
    log_date: date = Field(nullable=False, index=True)
    is_start_day: bool = Field(default=False, nullable=False)
    is_end_day: bool = Field(default=False, nullable=False)
    flow_intensity: Optional[FlowIntensity] = Field(default=None)
    symptoms: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    mood: Optional[str] = Field(default=None, max_length=32)
    energy_level: Optional[EnergyLevel] = Field(default=None)
    severity: Optional[SymptomSeverity] = Field(default=None)
    notes: str = Field(default="", max_length=500)


class PeriodCycle(SQLModel, table=True):
    """Explicit cycle record maintained alongside start/end logs."""

    __tablename__: ClassVar[str] = "period_cycle"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, index=True)
    start_date: date = Field(nullable=False, index=True)
    end_date: Optional[date] = Field(default=None)
    status: CycleStatus = Field(default=CycleStatus.OPEN, nullable=False)


class CycleSettings(SQLModel, table=True):
    """Per-user cycle defaults, refreshed whenever a start or end is logged."""

    __tablename__: ClassVar[str] = "cycle_settings"

    user_id: int = Field(primary_key=True)
    cycle_length: int = Field(default=DEFAULT_CYCLE_LENGTH, ge=1)
    period_length: int = Field(default=DEFAULT_PERIOD_LENGTH, ge=1)
    last_period_date: Optional[date] = Field(default=None)
