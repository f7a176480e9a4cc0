"""Repository protocols decoupling services from persistence."""

from .cycle import CycleSettingsRepository, PeriodCycleRepository, PeriodLogRepository
from .debt import DebtStore, PaymentRepository

__all__ = [
    "CycleSettingsRepository",
    "DebtStore",
    "PaymentRepository",
    "PeriodCycleRepository",
    "PeriodLogRepository",
]
