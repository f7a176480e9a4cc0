"""SQLModel implementation of the debt store."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import delete
from sqlmodel import col, select

from ...models.debt import Debt, DebtPayment, DebtStatus
from ...services.debts import search_debts
from ...services.money import ZERO, quantize_money, to_decimal
from .base import SessionRepository


class SQLModelDebtStore(SessionRepository):
    """SQLModel-based debt repository implementation."""

    def get(self, debt_id: int, *, user_id: int) -> Optional[Debt]:
        """Retrieve a debt by ID."""
        with self.session_factory() as session:
            return session.exec(
                select(Debt).where(Debt.id == debt_id, Debt.user_id == user_id)
            ).first()

    def list(
        self, *, user_id: int, search: str | None = None, status: DebtStatus | None = None
    ) -> list[Debt]:
        """List debts, highest interest rate first, optionally filtered."""
        with self.session_factory() as session:
            statement = select(Debt).where(Debt.user_id == user_id)
            if status is not None:
                statement = statement.where(Debt.status == status)
            rows = list(session.exec(statement.order_by(col(Debt.id))).all())
        return search_debts(rows, search)

    def create(self, debt: Debt, *, user_id: int) -> Debt:
        """Create a new debt; the original balance defaults to the current one."""
        debt.user_id = user_id
        debt.current_balance = quantize_money(debt.current_balance)
        if debt.original_balance is None or to_decimal(debt.original_balance) <= 0:
            debt.original_balance = debt.current_balance
        self._settle(debt)
        self._validate(debt)
        now = datetime.now(timezone.utc)
        debt.created_at = now
        debt.updated_at = now
        with self.session_factory() as session:
            session.add(debt)
            self._save(session)
            session.refresh(debt)
            return debt

    def update(self, debt: Debt, *, user_id: int) -> Debt:
        """Update an existing debt."""
        debt.user_id = user_id
        self._settle(debt)
        self._validate(debt)
        debt.updated_at = datetime.now(timezone.utc)
        with self.session_factory() as session:
            session.add(debt)
            self._save(session)
            session.refresh(debt)
            return debt

    def delete(self, debt_id: int, *, user_id: int) -> None:
        """Delete a debt by ID along with its payment history."""
        with self.session_factory() as session:
            debt = session.exec(
                select(Debt).where(Debt.id == debt_id, Debt.user_id == user_id)
            ).first()
            if debt:
                session.execute(
                    delete(DebtPayment).where(
                        DebtPayment.debt_id == debt_id, DebtPayment.user_id == user_id
                    )
                )
                session.delete(debt)
                self._save(session)

    @staticmethod
    def _settle(debt: Debt) -> None:
        """A debt with nothing left to pay is paid off."""
        if to_decimal(debt.current_balance) != 0:
            return
        debt.status = DebtStatus.PAID_OFF
        debt.minimum_payment = ZERO
        if debt.paid_off_date is None:
            debt.paid_off_date = date.today()

    @staticmethod
    def _validate(debt: Debt) -> None:
        current = to_decimal(debt.current_balance)
        if current < 0:
            raise ValueError("Debt balance cannot be negative")
        if current > to_decimal(debt.original_balance):
            raise ValueError("Current balance cannot exceed the original balance")
        status = getattr(debt.status, "value", debt.status)
        if status == DebtStatus.ACTIVE.value and to_decimal(debt.minimum_payment) <= 0:
            raise ValueError("Minimum payment must be greater than zero for an active debt")


__all__ = ["SQLModelDebtStore"]
