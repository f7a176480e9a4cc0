"""Service module exports."""

from . import (
    amortization,
    cycles,
    debts,
    export_csv,
    import_csv,
    money,
    payments,
    period_tracking,
)

__all__ = [
    "amortization",
    "cycles",
    "debts",
    "export_csv",
    "import_csv",
    "money",
    "payments",
    "period_tracking",
]
