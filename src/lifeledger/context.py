"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine

from .config import BaseConfig
from .infra.database import SessionFactory, create_db_engine, create_session_factory, init_database
from .infra.repositories import (
    SQLModelCycleSettingsRepository,
    SQLModelDebtStore,
    SQLModelPaymentRepository,
    SQLModelPeriodCycleRepository,
    SQLModelPeriodLogRepository,
)
from .logging_config import setup_logging
from .services.cycles import CyclePolicy


@dataclass
class AppContext:
    """Centralized application context with services and state."""

    # Configuration
    config: BaseConfig
    engine: Engine

    # Session factory
    session_factory: SessionFactory

    # Repositories
    debt_store: SQLModelDebtStore
    payment_repo: SQLModelPaymentRepository
    period_log_repo: SQLModelPeriodLogRepository
    cycle_repo: SQLModelPeriodCycleRepository
    cycle_settings_repo: SQLModelCycleSettingsRepository

    cycle_policy: CyclePolicy
    user_id: int = 1
    dev_mode: bool = False


def create_app_context(
    config: Optional[BaseConfig] = None, *, configure_logging: bool = True
) -> AppContext:
    """Create and initialize the application context."""

    if config is None:
        config = BaseConfig()
    if configure_logging:
        setup_logging(config)

    # Create database engine and schema
    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        debt_store=SQLModelDebtStore(session_factory),
        payment_repo=SQLModelPaymentRepository(session_factory),
        period_log_repo=SQLModelPeriodLogRepository(session_factory),
        cycle_repo=SQLModelPeriodCycleRepository(session_factory),
        cycle_settings_repo=SQLModelCycleSettingsRepository(session_factory),
        cycle_policy=CyclePolicy.from_config(config),
        user_id=config.USER_ID,
        dev_mode=config.DEV_MODE,
    )


__all__ = ["AppContext", "create_app_context"]
