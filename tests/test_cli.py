"""Command line smoke and workflow tests."""

from __future__ import annotations

import csv
from datetime import date

import pytest
from click.testing import CliRunner

from lifeledger.cli import cli
from lifeledger.config import TestConfig
from lifeledger.context import create_app_context
from lifeledger.models import DebtStatus, EnergyLevel


@pytest.fixture
def app():
    return create_app_context(TestConfig(), configure_logging=False)


@pytest.fixture
def run(app):
    runner = CliRunner()

    def _run(*args):
        return runner.invoke(cli, list(args), obj=app)

    return _run


@pytest.fixture
def visa(run):
    result = run(
        "debts", "add", "Visa",
        "--balance", "1000", "--rate", "12", "--minimum", "100",
        "--category", "credit_card", "--due-day", "15",
    )
    assert result.exit_code == 0, result.output
    return 1


class TestDebtCommands:
    def test_add_and_list(self, run, visa):
        result = run("debts", "list")

        assert result.exit_code == 0
        assert "#1 Visa [credit_card]" in result.output
        assert "USD 1,000.00 at 12%" in result.output

    def test_add_rejects_zero_minimum(self, run, app):
        result = run(
            "debts", "add", "Zero min", "--balance", "500", "--rate", "10", "--minimum", "0"
        )

        assert result.exit_code == 1
        assert "Minimum payment must be greater than zero" in result.output
        assert app.debt_store.list(user_id=app.user_id) == []

    def test_add_with_nothing_owed_is_paid_off(self, run, app):
        result = run(
            "debts", "add", "Empty", "--balance", "0", "--rate", "5", "--minimum", "25"
        )

        assert result.exit_code == 0, result.output
        (debt,) = app.debt_store.list(user_id=app.user_id)
        assert debt.status == DebtStatus.PAID_OFF
        assert debt.minimum_payment == 0

    def test_list_empty(self, run):
        result = run("debts", "list")
        assert result.output.strip() == "No debts found."

    def test_show_reports_payoff(self, run, visa, tmp_path):
        export = tmp_path / "schedule.csv"
        result = run("debts", "show", "1", "--months", "2", "--export", str(export))

        assert result.exit_code == 0, result.output
        assert "Months to go:   11" in result.output
        assert "Total interest: USD 58.98" in result.output
        assert "910.00" in result.output
        with export.open(newline="", encoding="utf-8") as fh:
            assert len(list(csv.DictReader(fh))) == 2

    def test_show_unknown_debt(self, run):
        result = run("debts", "show", "7")
        assert result.exit_code == 1
        assert "Debt 7 not found" in result.output

    def test_pay_and_history(self, run, visa, app, tmp_path):
        result = run("debts", "pay", "1", "100", "--date", "2024-01-15")

        assert result.exit_code == 0, result.output
        assert "principal USD 90.00, interest USD 10.00" in result.output
        assert "Remaining USD 910.00" in result.output

        export = tmp_path / "payments.csv"
        history = run("debts", "history", "1", "--export", str(export))
        assert "2024-01-15 debt #1 USD 100.00" in history.output
        assert export.exists()

    def test_pay_off_in_full(self, run, visa, app):
        result = run("debts", "pay", "1", "5000", "--date", "2024-01-15")

        assert "Visa is paid off!" in result.output
        debt = app.debt_store.get(1, user_id=app.user_id)
        assert debt.status == DebtStatus.PAID_OFF

    @pytest.mark.parametrize(
        "args, message",
        [
            (("99", "10"), "Debt 99 not found"),
            (("1", "0"), "greater than zero"),
        ],
    )
    def test_pay_errors_are_reported(self, run, visa, args, message):
        result = run("debts", "pay", *args)

        assert result.exit_code == 1
        assert message in result.output
        assert "Traceback" not in result.output

    def test_invalid_amount(self, run, visa):
        result = run("debts", "pay", "1", "lots")
        assert result.exit_code == 2
        assert "not a valid number" in result.output

    def test_what_if(self, run, visa):
        result = run("debts", "what-if", "1", "--payment", "200", "--rate", "6")

        assert result.exit_code == 0, result.output
        assert "Interest saved:  USD 27.86" in result.output
        assert "Refinancing at 6%" in result.output

    def test_what_if_needs_an_option(self, run, visa):
        assert run("debts", "what-if", "1").exit_code == 2

    def test_summary(self, run, visa):
        result = run("debts", "summary")

        assert "Active debts:     1" in result.output
        assert "Total balance:    USD 1,000.00" in result.output
        assert "Focus (avalanche): Visa" in result.output

    def test_plan_exports_per_debt(self, run, visa, tmp_path):
        result = run(
            "debts", "plan", "--strategy", "snowball", "--export-dir", str(tmp_path / "plan")
        )

        assert result.exit_code == 0, result.output
        assert "Snowball plan: 11 months" in result.output
        assert "Total interest: USD 58.98" in result.output
        assert (tmp_path / "plan" / "debt_1_plan.csv").exists()

    def test_delete(self, run, visa):
        result = run("debts", "delete", "1", "--yes")

        assert "Deleted debt #1" in result.output
        assert run("debts", "list").output.strip() == "No debts found."


class TestCycleCommands:
    def test_start_end_and_status(self, run):
        assert run("cycle", "start", "--date", "2024-03-01").output.strip() == (
            "Period started 2024-03-01"
        )
        ended = run("cycle", "end", "--date", "2024-03-05")
        assert "2024-03-01 to 2024-03-05 (5 days)" in ended.output

        status = run("cycle", "status", "--date", "2024-03-10")

        assert status.exit_code == 0, status.output
        assert "day 10 of 28, follicular phase" in status.output
        assert "Pregnancy chance: Medium" in status.output
        assert "Next period: 2024-03-29 (19 days, avg cycle 28 days)" in status.output

    def test_end_without_start(self, run):
        result = run("cycle", "end", "--date", "2024-03-05")

        assert result.exit_code == 1
        assert "No open period" in result.output

    def test_status_shows_open_period(self, run):
        today = date.today().isoformat()
        run("cycle", "start", "--date", today)

        status = run("cycle", "status", "--date", today)

        assert f"Period in progress since {today}." in status.output
        assert "day 1 of 28, menstrual phase" in status.output

    def test_settings_show_and_update(self, run):
        shown = run("cycle", "settings")
        assert "Cycle length: 28 days" in shown.output
        assert "Last period: never" in shown.output

        updated = run("cycle", "settings", "--cycle-length", "32")

        assert updated.exit_code == 0, updated.output
        assert "Cycle length: 32 days" in updated.output
        assert "Period length: 5 days" in updated.output
        assert "Cycle length: 32 days" in run("cycle", "settings").output

    def test_settings_reject_zero_length(self, run):
        result = run("cycle", "settings", "--period-length", "0")

        assert result.exit_code == 1
        assert "positive" in result.output

    def test_status_without_logs(self, run):
        assert run("cycle", "status").output.strip() == "No periods logged yet."

    def test_daily_log(self, run, app):
        result = run(
            "cycle", "log", "2024-03-02",
            "--energy", "high", "--symptom", "cramps", "--symptom", "bloating",
        )

        assert result.exit_code == 0, result.output
        log = app.period_log_repo.get(date(2024, 3, 2), user_id=app.user_id)
        assert log.energy_level == EnergyLevel.HIGH
        assert log.symptoms == ["bloating", "cramps"]

    def test_import_then_remove(self, run, app, tmp_path):
        csv_path = tmp_path / "logs.csv"
        csv_path.write_text(
            "date,is_start_day,notes\n2024-01-01,true,\n2024-01-05,false,Period ended\n",
            encoding="utf-8",
        )

        assert run("cycle", "import", str(csv_path)).output.strip() == "Imported 2 logs"
        assert run("cycle", "remove", "2024-01-05").output.strip() == "Removed."
        assert run("cycle", "remove", "2024-01-05").output.strip() == "Nothing logged on that day."
        assert app.cycle_repo.get_open(user_id=app.user_id).start_date == date(2024, 1, 1)
