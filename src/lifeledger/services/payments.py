"""Recording payments against debts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from ..domain.repositories.debt import DebtStore, PaymentRepository
from ..errors import DebtAlreadyPaidError, DebtNotFoundError, InvalidPaymentError
from ..logging_config import get_logger
from ..models.debt import Debt, DebtPayment, DebtStatus
from .money import ZERO, Number, monthly_rate, quantize_money, to_decimal

logger = get_logger("payments")


@dataclass(slots=True, frozen=True)
class PaymentResult:
    payment: DebtPayment
    debt: Debt
    debt_paid_off: bool


def split_payment(debt: Any, amount: Number) -> tuple[Decimal, Decimal]:
    """Return (principal, interest) for a payment of *amount* against *debt*.

    One month of interest on the current balance is settled first; whatever is
    left of the payment goes to principal.
    """

    paid = quantize_money(amount)
    balance = max(to_decimal(debt.current_balance), ZERO)
    interest_due = quantize_money(balance * monthly_rate(debt.interest_rate))
    interest = min(interest_due, paid)
    return paid - interest, interest


def validate_payment(debt: Debt | None, amount: Number, *, debt_id: int) -> Decimal:
    """Reject payments that must not touch the stored debt; return the amount in cents."""

    if debt is None:
        raise DebtNotFoundError(debt_id)
    paid = quantize_money(amount)
    if not paid.is_finite() or paid <= 0:
        raise InvalidPaymentError("Payment amount must be greater than zero")
    status = getattr(debt.status, "value", debt.status)
    if status == DebtStatus.PAID_OFF.value or to_decimal(debt.current_balance) <= 0:
        raise DebtAlreadyPaidError(f"{debt.name} is already paid off")
    return paid


def record_payment(
    *,
    debt_store: DebtStore,
    payment_repo: PaymentRepository,
    debt_id: int,
    amount: Number,
    user_id: int,
    paid_on: date | None = None,
) -> PaymentResult:
    """Apply a payment: split it, reduce the balance and flip status at zero.

    Paying more than the balance is allowed; the balance floors at zero and the
    payment keeps its full amount.
    """

    debt = debt_store.get(debt_id, user_id=user_id)
    paid = validate_payment(debt, amount, debt_id=debt_id)
    principal, interest = split_payment(debt, paid)
    today = paid_on or date.today()

    new_balance = max(ZERO, to_decimal(debt.current_balance) - principal)
    debt.current_balance = new_balance
    debt.updated_at = datetime.now(timezone.utc)
    paid_off = new_balance == 0
    if paid_off:
        debt.status = DebtStatus.PAID_OFF
        debt.paid_off_date = today
        debt.minimum_payment = ZERO

    payment = DebtPayment(
        user_id=user_id,
        debt_id=debt_id,
        amount=paid,
        principal_paid=principal,
        interest_paid=interest,
        payment_date=today,
    )
    saved = payment_repo.record(payment, debt, user_id=user_id)

    logger.info(
        "payment recorded",
        extra={
            "debt_id": debt_id,
            "amount": str(paid),
            "principal_paid": str(principal),
            "interest_paid": str(interest),
            "remaining_balance": str(new_balance),
        },
    )
    if paid_off:
        logger.info("debt paid off", extra={"debt_id": debt_id, "paid_off_date": today.isoformat()})

    return PaymentResult(payment=saved, debt=debt, debt_paid_off=paid_off)


__all__ = ["PaymentResult", "record_payment", "split_payment", "validate_payment"]
