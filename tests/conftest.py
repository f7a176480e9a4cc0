"""Pytest configuration and shared fixtures for LifeLedger tests.

This module provides database fixtures, test data factories, and helper utilities
for testing the engines, repositories, and services without touching the real app database.
"""

from __future__ import annotations

import logging
import tempfile
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from lifeledger.models import Debt, DebtCategory, DebtStatus, PeriodLog
from lifeledger.infra.repositories import (
    SQLModelCycleSettingsRepository,
    SQLModelDebtStore,
    SQLModelPaymentRepository,
    SQLModelPeriodCycleRepository,
    SQLModelPeriodLogRepository,
)

USER_ID = 1


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep config writes and log handlers inside the test's temp directory."""

    monkeypatch.setenv("LIFELEDGER_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("LIFELEDGER_DATABASE_URL", raising=False)
    yield
    app_logger = logging.getLogger("lifeledger")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Create a session factory for repositories that expect Callable[[], Session]."""

    def factory():
        """Create a new Session with expire_on_commit disabled."""
        return Session(db_engine, expire_on_commit=False)

    return factory


@pytest.fixture
def debt_store(session_factory) -> SQLModelDebtStore:
    return SQLModelDebtStore(session_factory)


@pytest.fixture
def payment_repo(session_factory) -> SQLModelPaymentRepository:
    return SQLModelPaymentRepository(session_factory)


@pytest.fixture
def period_log_repo(session_factory) -> SQLModelPeriodLogRepository:
    return SQLModelPeriodLogRepository(session_factory)


@pytest.fixture
def cycle_repo(session_factory) -> SQLModelPeriodCycleRepository:
    return SQLModelPeriodCycleRepository(session_factory)


@pytest.fixture
def settings_repo(session_factory) -> SQLModelCycleSettingsRepository:
    return SQLModelCycleSettingsRepository(session_factory)


# =============================================================================
# Test Data Factories
# =============================================================================


def make_debt(
    name: str = "Test Debt",
    balance: str | Decimal = "1000.00",
    rate: str | Decimal = "0.12",
    minimum_payment: str | Decimal = "100.00",
    original_balance: str | Decimal | None = None,
    category: DebtCategory = DebtCategory.CREDIT_CARD,
    status: DebtStatus = DebtStatus.ACTIVE,
    due_date: int = 15,
    debt_id: int | None = None,
) -> Debt:
    """Build an unsaved debt with Decimal fields."""

    current = Decimal(str(balance))
    return Debt(
        id=debt_id,
        user_id=USER_ID,
        name=name,
        category=category,
        status=status,
        current_balance=current,
        original_balance=Decimal(str(original_balance)) if original_balance is not None else current,
        interest_rate=Decimal(str(rate)),
        minimum_payment=Decimal(str(minimum_payment)),
        due_date=due_date,
    )


@pytest.fixture
def debt_factory(debt_store):
    """Factory for creating persisted debts.

    Returns:
        Callable: Function that creates and persists Debt instances
    """

    def _create_debt(**kwargs) -> Debt:
        return debt_store.create(make_debt(**kwargs), user_id=USER_ID)

    return _create_debt


@pytest.fixture
def period_log_factory(period_log_repo):
    """Factory for creating persisted period logs."""

    def _create_log(
        log_date: date,
        *,
        is_start_day: bool = False,
        is_end_day: bool = False,
        **fields,
    ) -> PeriodLog:
        log = PeriodLog(
            user_id=USER_ID,
            log_date=log_date,
            is_start_day=is_start_day,
            is_end_day=is_end_day,
            **fields,
        )
        return period_log_repo.upsert(log, user_id=USER_ID)

    return _create_log


# =============================================================================
# Helper Utilities
# =============================================================================


def assert_money_equal(actual, expected) -> None:
    """Assert two money values match to the cent."""

    assert Decimal(str(actual)).quantize(Decimal("0.01")) == Decimal(str(expected)).quantize(
        Decimal("0.01")
    ), f"{actual} != {expected}"
