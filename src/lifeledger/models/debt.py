"""Debt and debt payment entities."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DebtCategory(str, Enum):
    """Kinds of debt a user can track."""

    CREDIT_CARD = "credit_card"
    PERSONAL_LOAN = "personal_loan"
    AUTO_LOAN = "auto_loan"
    STUDENT_LOAN = "student_loan"
    MORTGAGE = "mortgage"
    MEDICAL = "medical"
    OTHER = "other"


class DebtStatus(str, Enum):
    """Lifecycle of a debt: active until the balance reaches zero."""

    ACTIVE = "active"
    PAID_OFF = "paid_off"


class Debt(SQLModel, table=True):
    """Installment or revolving debt being paid down."""

    __tablename__: ClassVar[str] = "debt"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, index=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    category: DebtCategory = Field(default=DebtCategory.OTHER, nullable=False)
    status: DebtStatus = Field(default=DebtStatus.ACTIVE, nullable=False, index=True)
    current_balance: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    original_balance: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    interest_rate: Decimal = Field(
        default=Decimal("0"),
        max_digits=9,
        decimal_places=6,
        description="Annual rate as a fraction, e.g. 0.1999 for 19.99%",
    )
    minimum_payment: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    due_date: int = Field(default=1, ge=1, le=31, description="Day of month the payment is due")
    paid_off_date: Optional[date] = Field(default=None)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)


class DebtPayment(SQLModel, table=True):
    """A recorded payment against a debt; immutable once written."""

    __tablename__: ClassVar[str] = "debt_payment"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, index=True)
    debt_id: int = Field(foreign_key="debt.id", nullable=False, index=True)
    amount: Decimal = Field(max_digits=14, decimal_places=2)
    principal_paid: Decimal = Field(max_digits=14, decimal_places=2)
    interest_paid: Decimal = Field(max_digits=14, decimal_places=2)
    payment_date: date = Field(nullable=False, index=True)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
