"""Command line interface for LifeLedger."""

from __future__ import annotations

import functools
import math
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path

import click

from .context import AppContext, create_app_context
from .models.debt import Debt, DebtCategory, DebtStatus
from .services import amortization, cycles, debts, payments, period_tracking
from .services.export_csv import (
    CsvScheduleWriter,
    export_payment_schedule_csv,
    export_payments_csv,
)
from .services.import_csv import import_period_log_file
from .services.money import HUNDRED, quantize_money


class DecimalParam(click.ParamType):
    """Click parameter that parses into ``Decimal``."""

    name = "decimal"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            parsed = Decimal(str(value).strip())
        except InvalidOperation:
            self.fail(f"{value!r} is not a valid number", param, ctx)
        if not parsed.is_finite():
            self.fail(f"{value!r} is not a finite number", param, ctx)
        return parsed


DECIMAL = DecimalParam()
DAY = click.DateTime(formats=["%Y-%m-%d"])


def _day(value) -> date | None:
    return value.date() if value is not None else None


def handle_domain_errors(func):
    """Report domain failures as clean CLI errors instead of tracebacks."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


def _money(app: AppContext, value: Decimal) -> str:
    if not value.is_finite():
        return "unbounded"
    return f"{app.config.CURRENCY} {value:,.2f}"


def _percent(rate: Decimal) -> str:
    return f"{(rate * HUNDRED).normalize():f}%"


def _months(months) -> str:
    if not math.isfinite(months):
        return "never"
    return f"{int(months)} ({amortization.format_duration(months)})"


def _require_debt(app: AppContext, debt_id: int) -> Debt:
    debt = app.debt_store.get(debt_id, user_id=app.user_id)
    if debt is None:
        raise click.ClickException(f"Debt {debt_id} not found")
    return debt


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Plan debt payoff and track cycles from the terminal."""

    if ctx.obj is None:
        ctx.obj = create_app_context()


# ---------------------------------------------------------------------------
# Debts
# ---------------------------------------------------------------------------


@cli.group("debts")
def debts_group() -> None:
    """Manage debts, payments and payoff plans."""


@debts_group.command("add")
@click.argument("name")
@click.option("--balance", type=DECIMAL, required=True, help="Current balance")
@click.option("--rate", type=DECIMAL, required=True, help="Annual interest rate in percent")
@click.option("--minimum", type=DECIMAL, required=True, help="Minimum monthly payment")
@click.option("--original", type=DECIMAL, default=None, help="Original balance (default: balance)")
@click.option(
    "--category",
    type=click.Choice([c.value for c in DebtCategory]),
    default=DebtCategory.OTHER.value,
    show_default=True,
)
@click.option("--due-day", type=click.IntRange(1, 31), default=1, show_default=True)
@click.pass_obj
@handle_domain_errors
def add_debt(app: AppContext, name, balance, rate, minimum, original, category, due_day) -> None:
    """Add a debt."""

    if rate < 0 or minimum < 0:
        raise click.BadParameter("rate and minimum payment cannot be negative")
    debt = Debt(
        user_id=app.user_id,
        name=name.strip(),
        category=DebtCategory(category),
        current_balance=balance,
        original_balance=original if original is not None else Decimal("0"),
        interest_rate=rate / HUNDRED,
        minimum_payment=quantize_money(minimum),
        due_date=due_day,
    )
    created = app.debt_store.create(debt, user_id=app.user_id)
    click.echo(f"Added debt #{created.id}: {created.name}")


@debts_group.command("list")
@click.option("--search", default=None, help="Filter by name or category")
@click.option("--strategy", type=click.Choice(debts.STRATEGIES), default=None)
@click.pass_obj
def list_debts(app: AppContext, search, strategy) -> None:
    """List debts, highest rate first, or ranked by a payoff strategy."""

    rows = app.debt_store.list(user_id=app.user_id, search=search)
    if strategy:
        rows = [ranked.debt for ranked in debts.rank_debts(rows, strategy, status=None)]
    if not rows:
        click.echo("No debts found.")
        return
    for debt in rows:
        status = getattr(debt.status, "value", debt.status)
        click.echo(
            f"#{debt.id} {debt.name} [{getattr(debt.category, 'value', debt.category)}] "
            f"{_money(app, debt.current_balance)} at {_percent(debt.interest_rate)} "
            f"min {_money(app, debt.minimum_payment)} ({status}, "
            f"{amortization.calculate_debt_progress(debt)}% repaid)"
        )


@debts_group.command("show")
@click.argument("debt_id", type=int)
@click.option("--months", type=click.IntRange(min=0), default=12, show_default=True)
@click.option("--export", "export_path", type=click.Path(path_type=Path), default=None)
@click.pass_obj
def show_debt(app: AppContext, debt_id, months, export_path) -> None:
    """Show progress, payoff horizon and the upcoming payment schedule."""

    debt = _require_debt(app, debt_id)
    terms = amortization.terms_of(debt)
    payoff_months = amortization.calculate_payoff_months(
        terms.current_balance, terms.interest_rate, terms.minimum_payment
    )
    payoff_date = amortization.calculate_payoff_date(payoff_months)
    total_interest = amortization.calculate_total_interest(
        terms.current_balance, terms.interest_rate, terms.minimum_payment
    )

    click.echo(f"{debt.name} (#{debt.id})")
    click.echo(f"  Balance:        {_money(app, terms.current_balance)}")
    click.echo(f"  Progress:       {amortization.calculate_debt_progress(debt)}%")
    click.echo(f"  Months to go:   {_months(payoff_months)}")
    click.echo(f"  Payoff date:    {payoff_date.isoformat() if payoff_date else 'never'}")
    click.echo(f"  Total interest: {_money(app, total_interest)}")

    schedule = amortization.calculate_payment_schedule(debt, max_months=months)
    for row in schedule:
        click.echo(
            f"  {row.month:>4}  principal {row.principal:>12,.2f}  "
            f"interest {row.interest:>10,.2f}  balance {row.balance:>12,.2f}"
        )
    if export_path is not None:
        export_payment_schedule_csv(rows=schedule, output_path=export_path)
        click.echo(f"Schedule written: {export_path}")


@debts_group.command("pay")
@click.argument("debt_id", type=int)
@click.argument("amount", type=DECIMAL)
@click.option("--date", "paid_on", type=DAY, default=None, help="Payment date (YYYY-MM-DD)")
@click.pass_obj
@handle_domain_errors
def pay_debt(app: AppContext, debt_id, amount, paid_on) -> None:
    """Record a payment against a debt."""

    result = payments.record_payment(
        debt_store=app.debt_store,
        payment_repo=app.payment_repo,
        debt_id=debt_id,
        amount=amount,
        user_id=app.user_id,
        paid_on=_day(paid_on),
    )
    click.echo(
        f"Paid {_money(app, result.payment.amount)}: principal "
        f"{_money(app, result.payment.principal_paid)}, interest "
        f"{_money(app, result.payment.interest_paid)}. "
        f"Remaining {_money(app, result.debt.current_balance)}"
    )
    if result.debt_paid_off:
        click.echo(f"{result.debt.name} is paid off!")


@debts_group.command("history")
@click.argument("debt_id", type=int, required=False)
@click.option("--export", "export_path", type=click.Path(path_type=Path), default=None)
@click.pass_obj
def payment_history(app: AppContext, debt_id, export_path) -> None:
    """List recorded payments, newest first."""

    if debt_id is None:
        rows = app.payment_repo.list_all(user_id=app.user_id)
    else:
        _require_debt(app, debt_id)
        rows = app.payment_repo.list_for_debt(debt_id, user_id=app.user_id)
    if not rows:
        click.echo("No payments recorded.")
    for payment in rows:
        click.echo(
            f"{payment.payment_date.isoformat()} debt #{payment.debt_id} "
            f"{_money(app, payment.amount)} (interest {_money(app, payment.interest_paid)})"
        )
    if export_path is not None:
        export_payments_csv(payments=rows, output_path=export_path)
        click.echo(f"Payments written: {export_path}")


@debts_group.command("what-if")
@click.argument("debt_id", type=int)
@click.option("--payment", type=DECIMAL, default=None, help="Monthly payment to try")
@click.option("--rate", type=DECIMAL, default=None, help="Refinance rate in percent")
@click.pass_obj
def what_if(app: AppContext, debt_id, payment, rate) -> None:
    """Compare paying more each month, or refinancing, against the current plan."""

    if payment is None and rate is None:
        raise click.UsageError("Pass --payment and/or --rate")
    debt = _require_debt(app, debt_id)

    if payment is not None:
        scenario = amortization.extra_payment_scenario(debt, payment)
        click.echo(f"Paying {_money(app, scenario.monthly_payment)} per month:")
        click.echo(f"  Months:          {_months(scenario.original_months)} -> "
                   f"{_months(scenario.new_months)}")
        click.echo(f"  Total interest:  {_money(app, scenario.original_total_interest)} -> "
                   f"{_money(app, scenario.new_total_interest)}")
        click.echo(f"  Interest saved:  {_money(app, scenario.total_interest_saved)}")
    if rate is not None:
        refinance = amortization.refinance_scenario(debt, rate / HUNDRED)
        click.echo(f"Refinancing at {_percent(refinance.new_rate)}:")
        click.echo(f"  Months:          {_months(refinance.new_months)}")
        click.echo(f"  Total interest:  {_money(app, refinance.original_total_interest)} -> "
                   f"{_money(app, refinance.new_total_interest)}")
        click.echo(f"  Interest saved:  {_money(app, refinance.total_interest_saved)}")


@debts_group.command("summary")
@click.option("--strategy", type=click.Choice(debts.STRATEGIES), default=debts.AVALANCHE)
@click.pass_obj
def summary(app: AppContext, strategy) -> None:
    """Show totals, category progress and payments due this week."""

    rows = app.debt_store.list(user_id=app.user_id)
    totals = debts.summarize_debts(rows, app.payment_repo.list_all(user_id=app.user_id))
    click.echo(f"Active debts:     {totals.debt_count}")
    click.echo(f"Total balance:    {_money(app, totals.total_balance)}")
    click.echo(f"Original balance: {_money(app, totals.total_original_balance)}")
    click.echo(f"Minimum payments: {_money(app, totals.total_minimum_payment)}")
    click.echo(f"Interest paid:    {_money(app, totals.total_interest_paid)}")
    target = debts.priority_debt(rows, strategy)
    if target is not None:
        click.echo(f"Focus ({strategy}): {target.name}")

    for group in debts.category_progress(rows):
        click.echo(f"  {group.label:<14} {_money(app, group.current_balance)} ({group.progress}%)")
    for item in debts.upcoming_payments(rows):
        when = "today" if item.days_until == 0 else f"in {item.days_until} days"
        click.echo(f"Due {when}: {item.debt.name} {_money(app, item.debt.minimum_payment)}")


@debts_group.command("delete")
@click.argument("debt_id", type=int)
@click.confirmation_option(prompt="Delete this debt and its payment history?")
@click.pass_obj
def delete_debt(app: AppContext, debt_id) -> None:
    """Delete a debt and its payments."""

    _require_debt(app, debt_id)
    app.debt_store.delete(debt_id, user_id=app.user_id)
    click.echo(f"Deleted debt #{debt_id}")


@debts_group.command("plan")
@click.option("--strategy", type=click.Choice(debts.STRATEGIES), default=debts.AVALANCHE)
@click.option("--surplus", type=DECIMAL, default=Decimal("0"), help="Extra paid each month")
@click.option("--export-dir", type=click.Path(file_okay=False, path_type=Path), default=None)
@click.pass_obj
@handle_domain_errors
def plan(app: AppContext, strategy, surplus, export_dir) -> None:
    """Project a snowball or avalanche payoff across all active debts."""

    active = app.debt_store.list(user_id=app.user_id, status=DebtStatus.ACTIVE)
    if not active:
        click.echo("No active debts.")
        return
    accounts = [debts.DebtAccount.from_debt(debt) for debt in active]
    if export_dir is not None:
        writer = CsvScheduleWriter(export_dir)
        schedule = debts.persist_projection(
            writer=writer, debts=accounts, strategy=strategy, surplus=surplus
        )
    else:
        schedule = debts.build_plan(debts=accounts, strategy=strategy, surplus=surplus)

    payoff_date, total_interest, months = debts.schedule_summary(schedule)
    click.echo(f"{strategy.title()} plan: {months} months, debt-free by {payoff_date}")
    click.echo(f"Total interest: {_money(app, total_interest)}")
    if export_dir is not None:
        click.echo(f"Plan written to {export_dir}")


# ---------------------------------------------------------------------------
# Cycle
# ---------------------------------------------------------------------------


@cli.group("cycle")
def cycle_group() -> None:
    """Log periods and see predictions."""


@cycle_group.command("start")
@click.option("--date", "day", type=DAY, default=None, help="Defaults to today")
@click.pass_obj
@handle_domain_errors
def cycle_start(app: AppContext, day) -> None:
    """Log the first day of a period."""

    log = period_tracking.log_period_start(
        session_factory=app.session_factory,
        user_id=app.user_id,
        day=_day(day) or date.today(),
    )
    click.echo(f"Period started {log.log_date.isoformat()}")


@cycle_group.command("end")
@click.option("--date", "day", type=DAY, default=None, help="Defaults to today")
@click.pass_obj
@handle_domain_errors
def cycle_end(app: AppContext, day) -> None:
    """Log the last day of the open period."""

    closed = period_tracking.log_period_end(
        session_factory=app.session_factory,
        user_id=app.user_id,
        day=_day(day) or date.today(),
    )
    length = (closed.end_date - closed.start_date).days + 1
    click.echo(
        f"Period {closed.start_date.isoformat()} to {closed.end_date.isoformat()} "
        f"({length} days)"
    )


@cycle_group.command("remove")
@click.argument("day", type=DAY)
@click.pass_obj
def cycle_remove(app: AppContext, day) -> None:
    """Remove the log for a day."""

    removed = period_tracking.remove_period_log(
        session_factory=app.session_factory, user_id=app.user_id, day=_day(day)
    )
    click.echo("Removed." if removed else "Nothing logged on that day.")


@cycle_group.command("log")
@click.argument("day", type=DAY)
@click.option("--mood", default=None)
@click.option("--energy", type=click.Choice(["low", "medium", "high"]), default=None)
@click.option("--severity", type=click.Choice(["mild", "moderate", "severe"]), default=None)
@click.option("--flow", type=click.Choice(["spotting", "light", "moderate", "heavy"]), default=None)
@click.option("--symptom", "symptoms", multiple=True, help="Repeat for several symptoms")
@click.option("--notes", default=None)
@click.pass_obj
@handle_domain_errors
def cycle_log(app: AppContext, day, mood, energy, severity, flow, symptoms, notes) -> None:
    """Record mood, energy and symptoms for a day."""

    log = period_tracking.log_daily_entry(
        session_factory=app.session_factory,
        user_id=app.user_id,
        day=_day(day),
        mood=mood,
        energy_level=energy,
        severity=severity,
        flow_intensity=flow,
        symptoms=symptoms or None,
        notes=notes,
    )
    click.echo(f"Logged {log.log_date.isoformat()}")


@cycle_group.command("status")
@click.option("--date", "day", type=DAY, default=None, help="Day to inspect (defaults to today)")
@click.pass_obj
def cycle_status(app: AppContext, day) -> None:
    """Show the phase, fertility band and next predicted period."""

    logs = app.period_log_repo.list_all(user_id=app.user_id)
    settings = period_tracking.get_cycle_settings(
        session_factory=app.session_factory, user_id=app.user_id
    )
    selected = _day(day) or date.today()
    overview = cycles.cycle_overview(logs, settings, selected, policy=app.cycle_policy)

    if not overview.cycles:
        click.echo("No periods logged yet.")
        return
    open_cycle = app.cycle_repo.get_open(user_id=app.user_id)
    if overview.ongoing and open_cycle is not None:
        click.echo(f"Period in progress since {open_cycle.start_date.isoformat()}.")
    if overview.phase is not None:
        click.echo(
            f"{selected.isoformat()}: day {overview.phase.day_in_cycle} of "
            f"{overview.phase.cycle_length}, {overview.phase.phase.value} phase"
        )
    chance = overview.pregnancy_chance
    click.echo(f"Pregnancy chance: {chance.level} ({chance.description})")
    if overview.insight is not None:
        click.echo(f"{overview.insight.title}: {overview.insight.message}")
    prediction = overview.prediction
    if prediction is not None:
        click.echo(
            f"Next period: {prediction.date.isoformat()} "
            f"({prediction.days_until} days, avg cycle {prediction.avg_cycle_length} days)"
        )


@cycle_group.command("settings")
@click.option("--cycle-length", type=int, default=None, help="Fallback cycle length in days")
@click.option("--period-length", type=int, default=None, help="Fallback period length in days")
@click.pass_obj
@handle_domain_errors
def cycle_settings(app: AppContext, cycle_length, period_length) -> None:
    """Show or change the fallback cycle and period lengths."""

    if cycle_length is None and period_length is None:
        settings = period_tracking.get_cycle_settings(
            session_factory=app.session_factory, user_id=app.user_id
        )
    else:
        settings = period_tracking.update_cycle_settings(
            session_factory=app.session_factory,
            user_id=app.user_id,
            cycle_length=cycle_length,
            period_length=period_length,
        )
    last = settings.last_period_date.isoformat() if settings.last_period_date else "never"
    click.echo(f"Cycle length: {settings.cycle_length} days")
    click.echo(f"Period length: {settings.period_length} days")
    click.echo(f"Last period: {last}")


@cycle_group.command("import")
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
@handle_domain_errors
def cycle_import(app: AppContext, csv_path) -> None:
    """Import period logs from a CSV export."""

    count = import_period_log_file(
        csv_path=csv_path, session_factory=app.session_factory, user_id=app.user_id
    )
    click.echo(f"Imported {count} logs")


def main() -> None:  # pragma: no cover - console entry point
    cli(prog_name="lifeledger")


__all__ = ["cli", "main"]
