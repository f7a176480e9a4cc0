"""Domain errors raised by LifeLedger services."""

from __future__ import annotations


class DebtError(ValueError):
    """Base class for debt workflow failures."""


class DebtNotFoundError(DebtError):
    """Raised when a debt id does not resolve for the current user."""

    def __init__(self, debt_id: int):
        super().__init__(f"Debt {debt_id} not found")
        self.debt_id = debt_id


class InvalidPaymentError(DebtError):
    """Raised when a payment amount is zero or negative."""


class DebtAlreadyPaidError(DebtError):
    """Raised when a payment targets a debt with nothing left to pay."""


class CycleError(ValueError):
    """Base class for period tracking failures."""


class FutureLogError(CycleError):
    """Raised when a period day is logged after today."""


class NoOpenPeriodError(CycleError):
    """Raised when an end day is logged without a matching open period."""


__all__ = [
    "CycleError",
    "DebtAlreadyPaidError",
    "DebtError",
    "DebtNotFoundError",
    "FutureLogError",
    "InvalidPaymentError",
    "NoOpenPeriodError",
]
