"""SQLModel implementation of the payment repository."""

from __future__ import annotations

from sqlmodel import col, select

from ...models.debt import Debt, DebtPayment
from .base import SessionRepository


class SQLModelPaymentRepository(SessionRepository):
    """SQLModel-based payment repository implementation."""

    def record(self, payment: DebtPayment, debt: Debt, *, user_id: int) -> DebtPayment:
        """Persist a payment and the updated debt in one transaction."""
        with self.session_factory() as session:
            payment.user_id = user_id
            debt.user_id = user_id
            session.add(debt)
            session.add(payment)
            self._save(session)
            session.refresh(payment)
            session.refresh(debt)
            return payment

    def list_for_debt(self, debt_id: int, *, user_id: int) -> list[DebtPayment]:
        """List a debt's payments, newest first."""
        with self.session_factory() as session:
            statement = (
                select(DebtPayment)
                .where(DebtPayment.user_id == user_id, DebtPayment.debt_id == debt_id)
                .order_by(col(DebtPayment.payment_date).desc(), col(DebtPayment.id).desc())
            )
            return list(session.exec(statement).all())

    def list_all(self, *, user_id: int) -> list[DebtPayment]:
        """List every payment for the user, newest first."""
        with self.session_factory() as session:
            statement = (
                select(DebtPayment)
                .where(DebtPayment.user_id == user_id)
                .order_by(col(DebtPayment.payment_date).desc(), col(DebtPayment.id).desc())
            )
            return list(session.exec(statement).all())


__all__ = ["SQLModelPaymentRepository"]
