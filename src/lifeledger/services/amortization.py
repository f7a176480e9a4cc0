"""Single-debt amortization: progress, payoff horizon, schedules and what-if scenarios.

Every function here is pure. A debt argument can be a ``Debt`` row, a
``DebtTerms`` snapshot or any object exposing ``current_balance``,
``original_balance``, ``interest_rate`` and ``minimum_payment``.

Interest is computed monthly as ``balance * annual_rate / 12`` and rounded to
cents before it is applied, so schedules reproduce exactly by hand. A payment
that does not exceed the month's interest never amortizes: payoff months are
``math.inf`` and total interest is ``Decimal("Infinity")``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterator, Optional

from ..constants.debt import MAX_PAYOFF_MONTHS
from .dates import add_months
from .money import HUNDRED, UNBOUNDED, ZERO, Number, monthly_rate, quantize_money, to_decimal


@dataclass(slots=True, frozen=True)
class DebtTerms:
    """Detached snapshot of the figures the amortization math needs."""

    current_balance: Decimal
    interest_rate: Decimal
    minimum_payment: Decimal
    original_balance: Decimal = ZERO


@dataclass(slots=True, frozen=True)
class ScheduleRow:
    """One projected month of a payoff schedule."""

    month: int
    principal: Decimal
    interest: Decimal
    balance: Decimal


@dataclass(slots=True, frozen=True)
class DebtScenario:
    """Outcome of paying a different monthly amount."""

    extra_payment: Decimal
    monthly_payment: Decimal
    original_months: float
    new_months: float
    months_saved: float
    original_payoff_date: Optional[date]
    new_payoff_date: Optional[date]
    original_total_interest: Decimal
    new_total_interest: Decimal
    total_interest_saved: Decimal


@dataclass(slots=True, frozen=True)
class RefinanceScenario:
    """Outcome of moving the debt to a different annual rate."""

    new_rate: Decimal
    new_monthly_payment: Decimal
    original_total_interest: Decimal
    new_total_interest: Decimal
    total_interest_saved: Decimal
    new_months: float
    new_payoff_date: Optional[date]


def terms_of(debt: Any) -> DebtTerms:
    """Snapshot *debt* into Decimal terms."""

    current = to_decimal(getattr(debt, "current_balance", None))
    return DebtTerms(
        current_balance=current,
        interest_rate=to_decimal(getattr(debt, "interest_rate", None)),
        minimum_payment=to_decimal(getattr(debt, "minimum_payment", None)),
        original_balance=to_decimal(getattr(debt, "original_balance", None), default=current),
    )


def with_overrides(
    debt: Any,
    *,
    minimum_payment: Number | None = None,
    interest_rate: Number | None = None,
) -> DebtTerms:
    """Return detached terms with a substituted payment and/or rate; *debt* is untouched."""

    terms = terms_of(debt)
    return DebtTerms(
        current_balance=terms.current_balance,
        interest_rate=(
            terms.interest_rate if interest_rate is None else to_decimal(interest_rate)
        ),
        minimum_payment=(
            terms.minimum_payment if minimum_payment is None else to_decimal(minimum_payment)
        ),
        original_balance=terms.original_balance,
    )


def _amortize(
    balance: Number, annual_rate: Number, monthly_payment: Number, *, max_months: int
) -> Iterator[ScheduleRow]:
    """Step the balance month by month until it is cleared or *max_months* is hit."""

    remaining = max(to_decimal(balance), ZERO)
    rate = monthly_rate(annual_rate)
    payment = to_decimal(monthly_payment)
    month = 0
    while remaining > 0 and month < max_months:
        month += 1
        interest = quantize_money(remaining * rate)
        # Final month never overshoots; a non-amortizing payment yields principal <= 0.
        principal = min(payment - interest, remaining)
        remaining = max(ZERO, remaining - principal)
        yield ScheduleRow(month=month, principal=principal, interest=interest, balance=remaining)


def calculate_debt_progress(debt: Any) -> Decimal:
    """Return percent of the original balance already repaid, clamped to [0, 100]."""

    terms = terms_of(debt)
    if terms.original_balance <= 0:
        return ZERO
    percent = (terms.original_balance - terms.current_balance) / terms.original_balance * HUNDRED
    percent = min(max(percent, ZERO), HUNDRED)
    return percent.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def calculate_payoff_months(
    balance: Number, annual_rate: Number, monthly_payment: Number
) -> int | float:
    """Return months until *balance* is cleared, or ``math.inf`` if it never is."""

    payment = to_decimal(monthly_payment)
    remaining = max(to_decimal(balance), ZERO)
    months = 0
    for row in _amortize(remaining, annual_rate, payment, max_months=MAX_PAYOFF_MONTHS):
        if payment <= row.interest:
            return math.inf
        months = row.month
        remaining = row.balance
    if remaining > 0:
        return math.inf
    return months


def calculate_total_interest(
    balance: Number, annual_rate: Number, monthly_payment: Number
) -> Decimal:
    """Return the interest paid over the payoff horizon (``Infinity`` if unbounded)."""

    payment = to_decimal(monthly_payment)
    remaining = max(to_decimal(balance), ZERO)
    total = ZERO
    for row in _amortize(remaining, annual_rate, payment, max_months=MAX_PAYOFF_MONTHS):
        if payment <= row.interest:
            return UNBOUNDED
        total += row.interest
        remaining = row.balance
    if remaining > 0:
        return UNBOUNDED
    return quantize_money(total)


def calculate_payoff_date(months: int | float | None, today: date | None = None) -> Optional[date]:
    """Return the date *months* from *today*, or ``None`` when it never arrives."""

    if months is None or not math.isfinite(months):
        return None
    return add_months(today or date.today(), int(months))


def calculate_payment_schedule(debt: Any, max_months: int | None = 12) -> list[ScheduleRow]:
    """Project the debt's monthly principal/interest split.

    ``max_months=None`` runs until payoff (bounded by the global ceiling).
    """

    if max_months is not None and max_months <= 0:
        return []
    terms = terms_of(debt)
    limit = MAX_PAYOFF_MONTHS if max_months is None else min(max_months, MAX_PAYOFF_MONTHS)
    return list(
        _amortize(
            terms.current_balance,
            terms.interest_rate,
            terms.minimum_payment,
            max_months=limit,
        )
    )


def _months_saved(original: int | float, new: int | float) -> int | float:
    if not math.isfinite(new):
        return 0
    if not math.isfinite(original):
        return math.inf
    return max(original - new, 0)


def _interest_saved(original: Decimal, new: Decimal) -> Decimal:
    if not new.is_finite():
        return ZERO
    if not original.is_finite():
        return UNBOUNDED
    return quantize_money(original - new)


def extra_payment_scenario(
    debt: Any, monthly_payment: Number, today: date | None = None
) -> DebtScenario:
    """Compare the current minimum payment against paying *monthly_payment* instead."""

    current = terms_of(debt)
    proposed = with_overrides(debt, minimum_payment=monthly_payment)

    original_months = calculate_payoff_months(
        current.current_balance, current.interest_rate, current.minimum_payment
    )
    new_months = calculate_payoff_months(
        proposed.current_balance, proposed.interest_rate, proposed.minimum_payment
    )
    original_interest = calculate_total_interest(
        current.current_balance, current.interest_rate, current.minimum_payment
    )
    new_interest = calculate_total_interest(
        proposed.current_balance, proposed.interest_rate, proposed.minimum_payment
    )

    return DebtScenario(
        extra_payment=quantize_money(proposed.minimum_payment - current.minimum_payment),
        monthly_payment=quantize_money(proposed.minimum_payment),
        original_months=original_months,
        new_months=new_months,
        months_saved=_months_saved(original_months, new_months),
        original_payoff_date=calculate_payoff_date(original_months, today),
        new_payoff_date=calculate_payoff_date(new_months, today),
        original_total_interest=original_interest,
        new_total_interest=new_interest,
        total_interest_saved=_interest_saved(original_interest, new_interest),
    )


def refinance_scenario(debt: Any, new_rate: Number, today: date | None = None) -> RefinanceScenario:
    """Compare the current rate against *new_rate* (a fraction) at the same payment."""

    current = terms_of(debt)
    proposed = with_overrides(debt, interest_rate=new_rate)

    original_interest = calculate_total_interest(
        current.current_balance, current.interest_rate, current.minimum_payment
    )
    new_interest = calculate_total_interest(
        proposed.current_balance, proposed.interest_rate, proposed.minimum_payment
    )
    new_months = calculate_payoff_months(
        proposed.current_balance, proposed.interest_rate, proposed.minimum_payment
    )

    return RefinanceScenario(
        new_rate=proposed.interest_rate,
        new_monthly_payment=quantize_money(proposed.minimum_payment),
        original_total_interest=original_interest,
        new_total_interest=new_interest,
        total_interest_saved=_interest_saved(original_interest, new_interest),
        new_months=new_months,
        new_payoff_date=calculate_payoff_date(new_months, today),
    )


def format_duration(months: int | float) -> str:
    """Render a month count as e.g. ``"2 yrs 3 mos"``."""

    if not math.isfinite(months):
        return "Never"
    months = int(months)
    if months <= 0:
        return "Paid off"
    years, rest = divmod(months, 12)
    parts = []
    if years:
        parts.append(f"{years} yr" if years == 1 else f"{years} yrs")
    if rest:
        parts.append(f"{rest} mo" if rest == 1 else f"{rest} mos")
    return " ".join(parts)


__all__ = [
    "DebtScenario",
    "DebtTerms",
    "RefinanceScenario",
    "ScheduleRow",
    "calculate_debt_progress",
    "calculate_payment_schedule",
    "calculate_payoff_date",
    "calculate_payoff_months",
    "calculate_total_interest",
    "extra_payment_scenario",
    "format_duration",
    "refinance_scenario",
    "terms_of",
    "with_overrides",
]
