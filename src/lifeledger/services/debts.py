"""Multi-debt helpers: strategy ranking, summaries and payoff plans (snowball and avalanche)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional, Protocol

from ..constants.debt import DEBT_CATEGORY_CONFIG, MAX_PAYOFF_MONTHS
from ..models.debt import DebtStatus
from .amortization import terms_of
from .dates import add_months, next_due_date
from .money import CENT, HUNDRED, ZERO, Number, monthly_rate, quantize_money, to_decimal

AVALANCHE = "avalanche"
SNOWBALL = "snowball"
STRATEGIES = (AVALANCHE, SNOWBALL)


@dataclass(slots=True, frozen=True)
class RankedDebt:
    """A debt and its 1-indexed position under a payoff strategy."""

    rank: int
    debt: Any


@dataclass(slots=True, frozen=True)
class DebtSummary:
    total_balance: Decimal
    total_original_balance: Decimal
    total_minimum_payment: Decimal
    total_interest_paid: Decimal
    debt_count: int
    highest_rate_debt: Optional[Any]


@dataclass(slots=True, frozen=True)
class CategoryProgress:
    category: str
    label: str
    color: str
    current_balance: Decimal
    original_balance: Decimal
    progress: int


@dataclass(slots=True, frozen=True)
class UpcomingPayment:
    debt: Any
    due_on: date
    days_until: int


@dataclass(slots=True)
class DebtAccount:
    """Represents a liability input for multi-debt payoff projections."""

    id: int
    balance: Decimal
    interest_rate: Decimal
    minimum_payment: Decimal
    due_day: int = 1

    @classmethod
    def from_debt(cls, debt: Any) -> "DebtAccount":
        terms = terms_of(debt)
        return cls(
            id=debt.id,
            balance=terms.current_balance,
            interest_rate=terms.interest_rate,
            minimum_payment=terms.minimum_payment,
            due_day=getattr(debt, "due_date", 1) or 1,
        )


class AmortizationWriter(Protocol):
    """Persists payoff projections for later retrieval."""

    def write_schedule(
        self, *, debt_id: int, rows: list[dict]
    ) -> None:  # pragma: no cover - interface
        ...


def _value(field: Any) -> Any:
    """Unwrap enum members so rows and plain strings compare alike."""

    return getattr(field, "value", field)


def _sort_for_strategy(debts: Iterable[Any], strategy: str) -> list[Any]:
    if strategy == AVALANCHE:
        # Highest rate first
        return sorted(debts, key=lambda d: to_decimal(d.interest_rate), reverse=True)
    if strategy == SNOWBALL:
        # Smallest balance first
        return sorted(debts, key=lambda d: to_decimal(d.current_balance))
    raise ValueError("Invalid debt payoff strategy.")


def rank_debts(
    debts: Iterable[Any],
    strategy: str = AVALANCHE,
    *,
    status: DebtStatus | str | None = DebtStatus.ACTIVE,
) -> list[RankedDebt]:
    """Order debts for a payoff strategy and number them from 1.

    Only debts in *status* are ranked; pass ``None`` to rank everything.
    """

    wanted = _value(status)
    pool = [d for d in debts if wanted is None or _value(d.status) == wanted]
    ordered = _sort_for_strategy(pool, strategy)
    return [RankedDebt(rank=index, debt=debt) for index, debt in enumerate(ordered, start=1)]


def priority_debt(debts: Iterable[Any], strategy: str = AVALANCHE) -> Optional[Any]:
    """Return the debt to attack first, or ``None`` when nothing is active."""

    ranked = rank_debts(debts, strategy)
    return ranked[0].debt if ranked else None


def search_debts(debts: Iterable[Any], query: str | None = None) -> list[Any]:
    """Filter by name or category substring and order highest rate first."""

    items = list(debts)
    if query and query.strip():
        needle = query.strip().lower()
        items = [
            d
            for d in items
            if needle in d.name.lower() or needle in str(_value(d.category)).lower()
        ]
    return _sort_for_strategy(items, AVALANCHE)


def summarize_debts(debts: Iterable[Any], payments: Iterable[Any] = ()) -> DebtSummary:
    """Aggregate balances across all debts; counts and minimums cover active ones."""

    items = list(debts)
    active = [d for d in items if _value(d.status) == DebtStatus.ACTIVE.value]
    highest = _sort_for_strategy(active, AVALANCHE)[0] if active else None
    return DebtSummary(
        total_balance=quantize_money(sum((to_decimal(d.current_balance) for d in items), ZERO)),
        total_original_balance=quantize_money(
            sum((to_decimal(d.original_balance) for d in items), ZERO)
        ),
        total_minimum_payment=quantize_money(
            sum((to_decimal(d.minimum_payment) for d in active), ZERO)
        ),
        total_interest_paid=quantize_money(
            sum((to_decimal(p.interest_paid) for p in payments), ZERO)
        ),
        debt_count=len(active),
        highest_rate_debt=highest,
    )


def category_progress(debts: Iterable[Any]) -> list[CategoryProgress]:
    """Group balances by category with whole-percent repayment progress."""

    totals: dict[str, list[Decimal]] = {}
    for debt in debts:
        key = str(_value(debt.category))
        current, original = totals.setdefault(key, [ZERO, ZERO])
        totals[key] = [
            current + to_decimal(debt.current_balance),
            original + to_decimal(debt.original_balance),
        ]

    rows: list[CategoryProgress] = []
    for key, (current, original) in totals.items():
        config = DEBT_CATEGORY_CONFIG.get(key, DEBT_CATEGORY_CONFIG["other"])
        progress = 0
        if original > 0:
            progress = int(
                ((original - current) / original * HUNDRED).quantize(
                    Decimal("1"), rounding=ROUND_HALF_UP
                )
            )
        rows.append(
            CategoryProgress(
                category=key,
                label=config["label"],
                color=config["color"],
                current_balance=quantize_money(current),
                original_balance=quantize_money(original),
                progress=progress,
            )
        )
    return sorted(rows, key=lambda row: row.original_balance, reverse=True)


def upcoming_payments(
    debts: Iterable[Any],
    *,
    today: date | None = None,
    window_days: int = 7,
    limit: int = 5,
) -> list[UpcomingPayment]:
    """Return active debts due within *window_days*, soonest first."""

    today = today or date.today()
    upcoming: list[UpcomingPayment] = []
    for debt in debts:
        if _value(debt.status) != DebtStatus.ACTIVE.value:
            continue
        due_on = next_due_date(today=today, due_day=int(debt.due_date or 1))
        days_until = (due_on - today).days
        if days_until <= window_days:
            upcoming.append(UpcomingPayment(debt=debt, due_on=due_on, days_until=days_until))
    upcoming.sort(key=lambda item: item.days_until)
    return upcoming[:limit]


def _calculate_schedule(
    *, debts: Iterable[DebtAccount], surplus: Number, start: date | None = None
) -> list[dict]:
    """Simulate month-by-month payments, rolling freed minimums into the target debt."""

    accounts: list[dict[str, Any]] = [
        {
            "id": d.id,
            "balance": max(to_decimal(d.balance), ZERO),
            "interest_rate": to_decimal(d.interest_rate),
            "minimum_payment": max(to_decimal(d.minimum_payment), ZERO),
        }
        for d in debts
    ]
    payoff_schedule: list[dict] = []
    current_date = (start or date.today()).replace(day=1)
    surplus_amount = max(to_decimal(surplus), ZERO)
    rolled_minimums = ZERO  # freed minimum payments from debts already cleared

    previous_total_balance = sum((a["balance"] for a in accounts), ZERO)
    stagnant_periods = 0  # used to detect non-decreasing balances

    while any(a["balance"] > 0 for a in accounts):
        if len(payoff_schedule) >= MAX_PAYOFF_MONTHS:
            raise ValueError("Payoff schedule did not converge; payments too low")

        extra_pool = surplus_amount + rolled_minimums
        row: dict[str, Any] = {"date": current_date.isoformat(), "payments": {}}

        for debt in accounts:
            if debt["balance"] <= 0:
                continue

            interest = quantize_money(debt["balance"] * monthly_rate(debt["interest_rate"]))

            # The first active debt in strategy order absorbs the extra pool
            payment = debt["minimum_payment"]
            if extra_pool > 0:
                payment += extra_pool
                extra_pool = ZERO

            owed = debt["balance"] + interest
            if payment >= owed:
                extra_pool += payment - owed
                payment = owed
                debt["balance"] = ZERO
                rolled_minimums += debt["minimum_payment"]
            else:
                debt["balance"] = owed - payment

            row["payments"][f"debt_{debt['id']}"] = {
                "payment_amount": quantize_money(payment),
                "interest_paid": interest,
                "remaining_balance": debt["balance"],
            }

        payoff_schedule.append(row)

        # Progress guard: balances must keep falling or the plan never ends
        total_balance = sum((a["balance"] for a in accounts if a["balance"] > 0), ZERO)
        if total_balance >= previous_total_balance - CENT:
            stagnant_periods += 1
        else:
            stagnant_periods = 0
        if stagnant_periods >= 3:
            raise ValueError("Payoff schedule did not converge; payments too low")
        previous_total_balance = total_balance
        current_date = add_months(current_date, 1)

    return payoff_schedule


def schedule_summary(schedule: list[dict]) -> tuple[str | None, Decimal, int]:
    """Return (payoff_date_iso, total_interest, months)."""

    if not schedule:
        return None, ZERO, 0
    payoff_date = schedule[-1].get("date")
    total_interest = ZERO
    for entry in schedule:
        for payment in entry.get("payments", {}).values():
            total_interest += to_decimal(payment.get("interest_paid"))
    return str(payoff_date) if payoff_date else None, quantize_money(total_interest), len(schedule)


def snowball_schedule(
    *, debts: Iterable[DebtAccount], surplus: Number, start: date | None = None
) -> list[dict]:
    """Return payoff schedule prioritizing smallest balances first."""
    sorted_debts = sorted(debts, key=lambda d: to_decimal(d.balance))
    return _calculate_schedule(debts=sorted_debts, surplus=surplus, start=start)


def avalanche_schedule(
    *, debts: Iterable[DebtAccount], surplus: Number, start: date | None = None
) -> list[dict]:
    """Return payoff schedule prioritizing highest interest rate first."""
    sorted_debts = sorted(debts, key=lambda d: to_decimal(d.interest_rate), reverse=True)
    return _calculate_schedule(debts=sorted_debts, surplus=surplus, start=start)


def build_plan(
    *, debts: Iterable[DebtAccount], strategy: str, surplus: Number, start: date | None = None
) -> list[dict]:
    """Dispatch to the schedule for *strategy*."""
    if strategy == SNOWBALL:
        return snowball_schedule(debts=debts, surplus=surplus, start=start)
    if strategy == AVALANCHE:
        return avalanche_schedule(debts=debts, surplus=surplus, start=start)
    raise ValueError("Invalid debt payoff strategy.")


def persist_projection(
    *,
    writer: AmortizationWriter,
    debts: Iterable[DebtAccount],
    strategy: str,
    surplus: Number,
    start: date | None = None,
) -> list[dict]:
    """Compute the plan for *strategy* and hand each debt's rows to the writer."""
    accounts = list(debts)
    schedule = build_plan(debts=accounts, strategy=strategy, surplus=surplus, start=start)

    for debt in accounts:
        key = f"debt_{debt.id}"
        rows = [
            {"date": entry["date"], **entry["payments"][key]}
            for entry in schedule
            if key in entry["payments"]
        ]
        writer.write_schedule(debt_id=debt.id, rows=rows)
    return schedule


__all__ = [
    "AVALANCHE",
    "AmortizationWriter",
    "CategoryProgress",
    "DebtAccount",
    "DebtSummary",
    "RankedDebt",
    "SNOWBALL",
    "STRATEGIES",
    "UpcomingPayment",
    "avalanche_schedule",
    "build_plan",
    "category_progress",
    "persist_projection",
    "priority_debt",
    "rank_debts",
    "schedule_summary",
    "search_debts",
    "snowball_schedule",
    "summarize_debts",
    "upcoming_payments",
]
