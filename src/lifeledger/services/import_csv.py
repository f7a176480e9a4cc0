"""CSV ingestion for period logs exported by older app versions.

Older exports encoded the end day and a few daily fields inside the free-text
notes, e.g. ``"Period ended | Energy: high | Severity: mild | tired"``. Those
markers are converted here, once, into typed fields.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterable, Mapping

import pandas as pd

from ..infra.database import SessionFactory
from ..infra.repositories.period_log import SQLModelPeriodLogRepository
from ..logging_config import get_logger
from ..models.cycle import EnergyLevel, FlowIntensity, PeriodLog, SymptomSeverity
from .cycles import parse_day
from .period_tracking import sync_cycles

logger = get_logger("import_csv")

END_MARKER = "Period ended"
NOTE_SEPARATOR = " | "
_ENERGY_RE = re.compile(r"Energy:\s*(high|medium|low)", re.IGNORECASE)
_SEVERITY_RE = re.compile(r"Severity:\s*(mild|moderate|severe)", re.IGNORECASE)
_TRUE_VALUES = {"1", "true", "yes", "y", "on"}


def load_period_log_frame(path: Path, *, encoding: str = "utf-8") -> pd.DataFrame:
    """Load a CSV file into a DataFrame with lowercase, trimmed headers."""

    frame = pd.read_csv(path, encoding=encoding, dtype=str, keep_default_na=False)
    frame.columns = [c.strip().lower() for c in frame.columns]
    return frame


def _text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str) and pd.isna(value):
        return ""
    return str(value).strip()


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return _text(value).lower() in _TRUE_VALUES


def _choice(enum_cls, value: Any):
    raw = _text(value).lower()
    if not raw:
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        return None


def _symptoms(value: Any) -> list[str]:
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = re.split(r"[;,]", _text(value))
    return sorted({item.strip() for item in items if item and item.strip()})


def split_legacy_notes(notes: str) -> dict[str, Any]:
    """Pull end marker, energy and severity out of a legacy note.

    Returns ``is_end_day``, ``energy_level``, ``severity`` and the remaining
    ``notes`` text.
    """

    is_end_day = False
    energy = None
    severity = None
    kept: list[str] = []
    for segment in (notes or "").split(NOTE_SEPARATOR):
        part = segment.strip()
        if not part:
            continue
        if END_MARKER.lower() in part.lower():
            is_end_day = True
            continue
        energy_match = _ENERGY_RE.search(part)
        if energy_match:
            energy = EnergyLevel(energy_match.group(1).lower())
            continue
        severity_match = _SEVERITY_RE.search(part)
        if severity_match:
            severity = SymptomSeverity(severity_match.group(1).lower())
            continue
        kept.append(part)
    return {
        "is_end_day": is_end_day,
        "energy_level": energy,
        "severity": severity,
        "notes": NOTE_SEPARATOR.join(kept),
    }


def parse_period_log_rows(rows: Iterable[Mapping]) -> list[dict]:
    """Convert CSV rows into plain dicts keyed like ``PeriodLog`` fields.

    Rows without a readable ``log_date``/``date`` are skipped. Typed columns win
    over markers found in the notes.
    """

    parsed: list[dict] = []
    for row in rows:
        day = parse_day(_text(row.get("log_date")) or _text(row.get("date")))
        if day is None:
            continue

        legacy = split_legacy_notes(_text(row.get("notes")))
        parsed.append(
            {
                "log_date": day,
                "is_start_day": _flag(row.get("is_start_day")),
                "is_end_day": _flag(row.get("is_end_day")) or legacy["is_end_day"],
                "flow_intensity": _choice(FlowIntensity, row.get("flow_intensity")),
                "symptoms": _symptoms(row.get("symptoms")),
                "mood": _text(row.get("mood")) or None,
                "energy_level": _choice(EnergyLevel, row.get("energy_level"))
                or legacy["energy_level"],
                "severity": _choice(SymptomSeverity, row.get("severity")) or legacy["severity"],
                "notes": legacy["notes"],
            }
        )
    return parsed


def import_period_logs(
    *, session_factory: SessionFactory, user_id: int, rows: Iterable[Mapping]
) -> int:
    """Upsert parsed rows for *user_id* and rebuild their cycles; returns rows written."""

    entries = parse_period_log_rows(rows)
    with session_factory() as session:
        logs = SQLModelPeriodLogRepository.in_session(session)
        for entry in entries:
            day = entry["log_date"]
            log = logs.get(day, user_id=user_id) or PeriodLog(user_id=user_id, log_date=day)
            for key, value in entry.items():
                setattr(log, key, value)
            # A day is never both start and end.
            if log.is_start_day:
                log.is_end_day = False
            logs.upsert(log, user_id=user_id)
        sync_cycles(session, user_id=user_id)
        session.commit()

    logger.info("period logs imported", extra={"user_id": user_id, "rows": len(entries)})
    return len(entries)


def import_period_log_file(
    *, csv_path: Path, session_factory: SessionFactory, user_id: int
) -> int:
    """Read *csv_path* and import its rows."""

    frame = load_period_log_frame(csv_path)
    rows = [{c: r[c] for c in frame.columns} for _, r in frame.iterrows()]
    return import_period_logs(session_factory=session_factory, user_id=user_id, rows=rows)


__all__ = [
    "END_MARKER",
    "import_period_log_file",
    "import_period_logs",
    "load_period_log_frame",
    "parse_period_log_rows",
    "split_legacy_notes",
]
