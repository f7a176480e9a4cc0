"""SQLModel table exports."""

from .cycle import (
    CycleSettings,
    CycleStatus,
    EnergyLevel,
    FlowIntensity,
    PeriodCycle,
    PeriodLog,
    SymptomSeverity,
)
from .debt import Debt, DebtCategory, DebtPayment, DebtStatus

__all__ = [
    "CycleSettings",
    "CycleStatus",
    "Debt",
    "DebtCategory",
    "DebtPayment",
    "DebtStatus",
    "EnergyLevel",
    "FlowIntensity",
    "PeriodCycle",
    "PeriodLog",
    "SymptomSeverity",
]
