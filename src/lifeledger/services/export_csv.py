"""CSV export helpers for LifeLedger."""

from __future__ import annotations

import csv
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable

SCHEDULE_HEADERS = ["month", "principal", "interest", "balance"]
PLAN_HEADERS = ["date", "payment_amount", "interest_paid", "remaining_balance"]
PAYMENT_HEADERS = [
    "id",
    "debt_id",
    "payment_date",
    "amount",
    "principal_paid",
    "interest_paid",
]


def _serialize_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f") if value.is_finite() else str(value)
    return str(value)


def _field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _write_rows(output_path: Path, headers: list[str], records: Iterable[Any]) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Use newline='' for csv on Windows
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(
            fh, fieldnames=headers, extrasaction="ignore", quoting=csv.QUOTE_MINIMAL
        )
        writer.writeheader()
        for record in records:
            writer.writerow({name: _serialize_value(_field(record, name)) for name in headers})
    return output_path


def export_payment_schedule_csv(*, rows: Iterable[Any], output_path: Path) -> Path:
    """Write single-debt ``ScheduleRow`` objects to CSV.

    Columns: month, principal, interest, balance. Returns the path written.
    """

    return _write_rows(output_path, SCHEDULE_HEADERS, rows)


def export_payments_csv(*, payments: Iterable[Any], output_path: Path) -> Path:
    """Write recorded payments to CSV, one row per payment."""

    return _write_rows(output_path, PAYMENT_HEADERS, payments)


class CsvScheduleWriter:
    """Writes each debt's share of a payoff plan to ``debt_<id>_plan.csv``."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.written: list[Path] = []

    def write_schedule(self, *, debt_id: int, rows: list[dict]) -> None:
        path = self.output_dir / f"debt_{debt_id}_plan.csv"
        self.written.append(_write_rows(path, PLAN_HEADERS, rows))


__all__ = [
    "CsvScheduleWriter",
    "export_payment_schedule_csv",
    "export_payments_csv",
]
