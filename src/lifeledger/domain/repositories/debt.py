"""Debt and payment repository protocols."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.debt import Debt, DebtPayment, DebtStatus


class DebtStore(Protocol):
    """Repository for managing debt entities."""

    def get(self, debt_id: int, *, user_id: int) -> Optional[Debt]:
        """Retrieve a debt by ID."""
        ...

    def list(
        self, *, user_id: int, search: str | None = None, status: DebtStatus | None = None
    ) -> list[Debt]:
        """List debts, highest interest rate first."""
        ...

    def create(self, debt: Debt, *, user_id: int) -> Debt:
        """Create a new debt."""
        ...

    def update(self, debt: Debt, *, user_id: int) -> Debt:
        """Update an existing debt."""
        ...

    def delete(self, debt_id: int, *, user_id: int) -> None:
        """Delete a debt and its payments."""
        ...


class PaymentRepository(Protocol):
    """Repository for immutable debt payments."""

    def record(self, payment: DebtPayment, debt: Debt, *, user_id: int) -> DebtPayment:
        """Persist a payment together with the debt it changed."""
        ...

    def list_for_debt(self, debt_id: int, *, user_id: int) -> list[DebtPayment]:
        """List a debt's payments, newest first."""
        ...

    def list_all(self, *, user_id: int) -> list[DebtPayment]:
        """List every payment for the user."""
        ...
