"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back on bad input."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "LifeLedger"
    DB_FILENAME = "lifeledger.db"
    SQLITE_PRAGMAS = {"foreign_keys": "on"}

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("LIFELEDGER_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("LIFELEDGER_DATABASE_URL", self._build_sqlite_url())
        self.USER_ID = _env_int("LIFELEDGER_USER_ID", 1)
        self.CURRENCY = os.getenv("LIFELEDGER_CURRENCY", "USD").strip().upper()[:3] or "USD"

        # Cycle prediction policy; product constants, overridable per deployment.
        self.ONGOING_PERIOD_MAX_DAYS = _env_int("LIFELEDGER_ONGOING_PERIOD_MAX_DAYS", 10)
        self.MIN_CYCLE_DAYS = _env_int("LIFELEDGER_MIN_CYCLE_DAYS", 21)
        self.MAX_CYCLE_DAYS = _env_int("LIFELEDGER_MAX_CYCLE_DAYS", 35)
        self.PREDICTION_WINDOW = _env_int("LIFELEDGER_PREDICTION_WINDOW", 5)
        self.FOLLICULAR_END_DAY = _env_int("LIFELEDGER_FOLLICULAR_END_DAY", 13)
        self.OVULATORY_END_DAY = _env_int("LIFELEDGER_OVULATORY_END_DAY", 16)

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("LIFELEDGER_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {}
        if self.DATABASE_URL.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        return {"connect_args": connect_args}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration for the test-suite: in-memory SQLite, no dev console noise."""

    __test__ = False
    DEBUG = False
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.DATABASE_URL = "sqlite://"
        self.DEV_MODE = False

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        from sqlalchemy.pool import StaticPool

        # A single shared connection keeps the in-memory database alive.
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}


__all__ = ["BaseConfig", "DevConfig", "TestConfig"]
