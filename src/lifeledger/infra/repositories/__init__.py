"""Concrete repository implementations using SQLModel."""

from .cycle import SQLModelCycleSettingsRepository, SQLModelPeriodCycleRepository
from .debt import SQLModelDebtStore
from .payment import SQLModelPaymentRepository
from .period_log import SQLModelPeriodLogRepository

__all__ = [
    "SQLModelCycleSettingsRepository",
    "SQLModelDebtStore",
    "SQLModelPaymentRepository",
    "SQLModelPeriodCycleRepository",
    "SQLModelPeriodLogRepository",
]
