"""Shared constants for debts and cycle tracking."""

from .cycle import (
    DEFAULT_CYCLE_LENGTH,
    DEFAULT_PERIOD_LENGTH,
    MAX_CYCLE_DAYS,
    MIN_CYCLE_DAYS,
    ONGOING_PERIOD_MAX_DAYS,
    PREDICTION_WINDOW,
)
from .debt import DEBT_CATEGORY_CONFIG, MAX_PAYOFF_MONTHS

__all__ = [
    "DEBT_CATEGORY_CONFIG",
    "DEFAULT_CYCLE_LENGTH",
    "DEFAULT_PERIOD_LENGTH",
    "MAX_CYCLE_DAYS",
    "MAX_PAYOFF_MONTHS",
    "MIN_CYCLE_DAYS",
    "ONGOING_PERIOD_MAX_DAYS",
    "PREDICTION_WINDOW",
]
