"""Cycle prediction: pair period days, predict the next start and place a date in its phase.

All functions are pure. Logs can be ``PeriodLog`` rows or plain mappings with
``log_date`` (or ``date``), ``is_start_day`` and ``is_end_day`` keys. Dates may
be ``date`` objects or ``YYYY-MM-DD`` strings; anything unparseable is skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from ..constants import cycle as defaults


class Phase(str, Enum):
    MENSTRUAL = "menstrual"
    FOLLICULAR = "follicular"
    OVULATORY = "ovulatory"
    LUTEAL = "luteal"


@dataclass(slots=True, frozen=True)
class CyclePolicy:
    """Product thresholds used by the prediction engine."""

    ongoing_max_days: int = defaults.ONGOING_PERIOD_MAX_DAYS
    min_cycle_days: int = defaults.MIN_CYCLE_DAYS
    max_cycle_days: int = defaults.MAX_CYCLE_DAYS
    prediction_window: int = defaults.PREDICTION_WINDOW
    follicular_end_day: int = defaults.FOLLICULAR_END_DAY
    ovulatory_end_day: int = defaults.OVULATORY_END_DAY

    @classmethod
    def from_config(cls, config: Any) -> "CyclePolicy":
        return cls(
            ongoing_max_days=config.ONGOING_PERIOD_MAX_DAYS,
            min_cycle_days=config.MIN_CYCLE_DAYS,
            max_cycle_days=config.MAX_CYCLE_DAYS,
            prediction_window=max(1, config.PREDICTION_WINDOW),
            follicular_end_day=config.FOLLICULAR_END_DAY,
            ovulatory_end_day=config.OVULATORY_END_DAY,
        )


DEFAULT_POLICY = CyclePolicy()


@dataclass(slots=True, frozen=True)
class Cycle:
    """A period start paired with its end day; ``end`` is ``None`` while open."""

    start: date
    end: Optional[date] = None

    @property
    def is_open(self) -> bool:
        return self.end is None


@dataclass(slots=True, frozen=True)
class PeriodPrediction:
    date: date
    days_until: int
    avg_cycle_length: int
    cycles_used: int
    predicted_period_dates: list[date] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class CyclePhase:
    phase: Phase
    day_in_cycle: int
    cycle_length: int


@dataclass(slots=True, frozen=True)
class PregnancyChance:
    level: str
    color: str
    description: str


@dataclass(slots=True, frozen=True)
class PhaseInsight:
    phase: str
    title: str
    message: str
    icon: str


@dataclass(slots=True, frozen=True)
class CycleOverview:
    """Everything the cycle screen renders for one selected date."""

    cycles: list[Cycle]
    period_days: list[date]
    ongoing: bool
    prediction: Optional[PeriodPrediction]
    phase: Optional[CyclePhase]
    pregnancy_chance: PregnancyChance
    insight: Optional[PhaseInsight]


def parse_day(value: Any) -> Optional[date]:
    """Return a calendar day for *value*, or ``None`` if it cannot be read as one."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return None
    return None


def _get(record: Any, name: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def _log_day(record: Any) -> Optional[date]:
    raw = _get(record, "log_date")
    if raw is None:
        raw = _get(record, "date")
    return parse_day(raw)


def _setting(settings: Any, name: str, fallback: int) -> int:
    value = _get(settings, name) if settings is not None else None
    try:
        value = int(value)
    except (TypeError, ValueError):
        return fallback
    return value if value > 0 else fallback


def _start_days(logs: Iterable[Any]) -> list[date]:
    days = {_log_day(log) for log in logs if _get(log, "is_start_day", False)}
    return sorted(day for day in days if day is not None)


def _end_days(logs: Iterable[Any]) -> list[date]:
    days = {
        _log_day(log)
        for log in logs
        if _get(log, "is_end_day", False) and not _get(log, "is_start_day", False)
    }
    return sorted(day for day in days if day is not None)


def get_period_cycles(logs: Iterable[Any]) -> list[Cycle]:
    """Pair every start day with the first end day strictly after it."""

    items = list(logs)
    ends = _end_days(items)
    cycles: list[Cycle] = []
    for start in _start_days(items):
        end = next((day for day in ends if day > start), None)
        cycles.append(Cycle(start=start, end=end))
    return cycles


def get_all_period_days(cycles: Iterable[Cycle]) -> list[date]:
    """Expand cycles into their calendar days; open cycles contribute only the start."""

    days: set[date] = set()
    for cycle in cycles:
        if cycle.end is None:
            days.add(cycle.start)
            continue
        cursor = cycle.start
        while cursor <= cycle.end:
            days.add(cursor)
            cursor += timedelta(days=1)
    return sorted(days)


def get_last_period_start(logs: Iterable[Any]) -> Optional[date]:
    starts = _start_days(logs)
    return starts[-1] if starts else None


def has_ongoing_period(
    logs: Iterable[Any], today: date | None = None, policy: CyclePolicy = DEFAULT_POLICY
) -> bool:
    """True when the latest start has no end yet and is recent enough to still be running."""

    items = list(logs)
    last_start = get_last_period_start(items)
    if last_start is None:
        return False
    if any(day >= last_start for day in _end_days(items)):
        return False
    days_since_start = ((today or date.today()) - last_start).days
    return days_since_start <= policy.ongoing_max_days


def get_next_period_prediction(
    cycles: Iterable[Cycle],
    settings: Any = None,
    reference_date: date | str | None = None,
    policy: CyclePolicy = DEFAULT_POLICY,
) -> Optional[PeriodPrediction]:
    """Predict the next period start from recent start-to-start gaps.

    Gaps are only trusted once at least one cycle has been completed. Gaps
    outside the policy's valid range are ignored; without any usable gap the
    configured cycle length is used. ``days_until`` is measured from
    *reference_date* (usually the selected calendar day), not necessarily today.
    """

    cycles = list(cycles)
    starts = sorted({cycle.start for cycle in cycles})
    if not starts:
        return None

    reference = parse_day(reference_date) or date.today()
    avg_cycle_length = _setting(settings, "cycle_length", defaults.DEFAULT_CYCLE_LENGTH)
    period_length = _setting(settings, "period_length", defaults.DEFAULT_PERIOD_LENGTH)

    recent: list[int] = []
    if any(not cycle.is_open for cycle in cycles):
        gaps = [(current - previous).days for previous, current in zip(starts, starts[1:])]
        valid = [gap for gap in gaps if policy.min_cycle_days <= gap <= policy.max_cycle_days]
        recent = valid[-policy.prediction_window:]
    if recent:
        average = Decimal(sum(recent)) / Decimal(len(recent))
        avg_cycle_length = int(average.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    next_date = starts[-1] + timedelta(days=avg_cycle_length)
    return PeriodPrediction(
        date=next_date,
        days_until=(next_date - reference).days,
        avg_cycle_length=avg_cycle_length,
        cycles_used=len(recent),
        predicted_period_dates=[next_date + timedelta(days=i) for i in range(period_length)],
    )


def _phase_for_day(day_in_cycle: int, period_length: int, policy: CyclePolicy) -> Phase:
    if day_in_cycle <= period_length:
        return Phase.MENSTRUAL
    if day_in_cycle <= policy.follicular_end_day:
        return Phase.FOLLICULAR
    if day_in_cycle <= policy.ovulatory_end_day:
        return Phase.OVULATORY
    return Phase.LUTEAL


def get_cycle_phase_for_date(
    target: date | str,
    logs: Iterable[Any],
    settings: Any = None,
    policy: CyclePolicy = DEFAULT_POLICY,
) -> Optional[CyclePhase]:
    """Place *target* within the cycle that began at the latest logged start.

    Returns ``None`` before that start, and beyond one cycle length after it
    unless *target* is itself a logged period day.
    """

    day = parse_day(target)
    if day is None:
        return None
    items = list(logs)
    last_start = get_last_period_start(items)
    if last_start is None:
        return None

    cycle_length = _setting(settings, "cycle_length", defaults.DEFAULT_CYCLE_LENGTH)
    period_length = _setting(settings, "period_length", defaults.DEFAULT_PERIOD_LENGTH)

    days_since_start = (day - last_start).days + 1
    if days_since_start <= 0:
        return None
    if days_since_start > cycle_length:
        if day not in set(get_all_period_days(get_period_cycles(items))):
            return None

    day_in_cycle = ((days_since_start - 1) % cycle_length) + 1
    return CyclePhase(
        phase=_phase_for_day(day_in_cycle, period_length, policy),
        day_in_cycle=day_in_cycle,
        cycle_length=cycle_length,
    )


_LOW_COLOR = "#10B981"
_MEDIUM_COLOR = "#F59E0B"
_HIGH_COLOR = "#EF4444"

# (last day of band, level, color, description)
_PREGNANCY_BANDS = (
    (5, "Very Low", _LOW_COLOR, "Menstrual phase - very low fertility"),
    (9, "Low", _LOW_COLOR, "Early follicular phase - low fertility"),
    (11, "Medium", _MEDIUM_COLOR, "Late follicular phase - fertility increasing"),
    (16, "High", _HIGH_COLOR, "Ovulatory phase - peak fertility window"),
    (21, "Medium", _MEDIUM_COLOR, "Early luteal phase - moderate fertility"),
)
_LATE_LUTEAL = PregnancyChance("Low", _LOW_COLOR, "Late luteal phase - low fertility")
_UNKNOWN_CHANCE = PregnancyChance("Unknown", "#6B7280", "No cycle data")


def get_pregnancy_chances(day_in_cycle: int | None) -> PregnancyChance:
    """Classify a cycle day into a fixed display band (not a medical probability)."""

    if day_in_cycle is None or day_in_cycle < 1:
        return _UNKNOWN_CHANCE
    for last_day, level, color, description in _PREGNANCY_BANDS:
        if day_in_cycle <= last_day:
            return PregnancyChance(level, color, description)
    return _LATE_LUTEAL


_PERIOD_DAY_INSIGHTS = {
    1: "Your period just started. Take it easy today - rest, stay hydrated, and use heat "
    "therapy for cramps. Iron-rich foods can help replenish what you're losing.",
    2: "Usually the heaviest flow day. Be gentle with yourself, stay warm, and consider light "
    "stretching or yoga. Magnesium can help with muscle tension.",
    3: "Flow is moderating. You might start feeling a bit more energetic. Gentle walks and warm "
    "baths can be soothing. Keep eating nourishing foods.",
    4: "Energy is slowly returning. Light exercise like walking or gentle yoga can help with "
    "mood and circulation. You're almost through the hardest part!",
    5: "Final period day for most people. You might feel relief and renewed energy. Perfect "
    "time to plan ahead for the productive follicular phase coming up.",
}

# (last day of band, phase, title, message, icon)
_PHASE_INSIGHTS = (
    (
        8,
        "Follicular",
        "Early Follicular",
        "Post-period recovery time. Your energy is building back up. Great time to start "
        "planning new projects and gradually increase activity levels.",
        "leaf",
    ),
    (
        11,
        "Follicular",
        "Growing Phase",
        "Energy rising daily! Perfect time for challenging workouts, learning new skills, and "
        "tackling ambitious goals. Your brain is sharp and focused.",
        "leaf",
    ),
    (
        12,
        "Ovulatory",
        "Pre-Ovulation",
        "Approaching your peak! Energy and confidence are high. Great for social activities, "
        "presentations, and important conversations.",
        "flower",
    ),
    (
        14,
        "Ovulatory",
        "Peak Fertility",
        "Your most fertile days with peak energy! Perfect for high-intensity workouts, public "
        "speaking, and making important decisions.",
        "flower",
    ),
    (
        15,
        "Ovulatory",
        "Post-Ovulation",
        "Energy is still high but starting to shift. Good time to wrap up big projects before "
        "the more introspective luteal phase begins.",
        "flower",
    ),
    (
        21,
        "Luteal",
        "Early Luteal",
        "Energy is settling into a calmer rhythm. Perfect for detailed work, organization, and "
        "completing projects.",
        "heart",
    ),
    (
        25,
        "Luteal",
        "Mid Luteal",
        "You might notice mood changes and food cravings. Listen to your body - it needs more "
        "rest and comfort foods.",
        "heart",
    ),
)
_LATE_LUTEAL_INSIGHT = PhaseInsight(
    "Luteal",
    "Late Luteal (PMS)",
    "PMS symptoms may be present. Be extra kind to yourself. Focus on gentle movement, stress "
    "management, and preparing for your upcoming period.",
    "heart",
)


def get_phase_insight(day_in_cycle: int | None) -> Optional[PhaseInsight]:
    """Return the day's guidance card copy."""

    if day_in_cycle is None or day_in_cycle < 1:
        return None
    if day_in_cycle in _PERIOD_DAY_INSIGHTS:
        return PhaseInsight(
            "Menstrual",
            f"Period Day {day_in_cycle}",
            _PERIOD_DAY_INSIGHTS[day_in_cycle],
            "droplets",
        )
    for last_day, phase, title, message, icon in _PHASE_INSIGHTS:
        if day_in_cycle <= last_day:
            return PhaseInsight(phase, title, message, icon)
    return _LATE_LUTEAL_INSIGHT


def cycle_overview(
    logs: Iterable[Any],
    settings: Any = None,
    selected_date: date | str | None = None,
    *,
    today: date | None = None,
    policy: CyclePolicy = DEFAULT_POLICY,
) -> CycleOverview:
    """Bundle the cycle engine's outputs for a selected date."""

    items = list(logs)
    today = today or date.today()
    selected = parse_day(selected_date) or today
    cycles = get_period_cycles(items)
    phase = get_cycle_phase_for_date(selected, items, settings, policy)
    day_in_cycle = phase.day_in_cycle if phase else None
    return CycleOverview(
        cycles=cycles,
        period_days=get_all_period_days(cycles),
        ongoing=has_ongoing_period(items, today=today, policy=policy),
        prediction=get_next_period_prediction(cycles, settings, selected, policy),
        phase=phase,
        pregnancy_chance=get_pregnancy_chances(day_in_cycle),
        insight=get_phase_insight(day_in_cycle),
    )


__all__ = [
    "Cycle",
    "CycleOverview",
    "CyclePhase",
    "CyclePolicy",
    "DEFAULT_POLICY",
    "Phase",
    "PeriodPrediction",
    "PhaseInsight",
    "PregnancyChance",
    "cycle_overview",
    "get_all_period_days",
    "get_cycle_phase_for_date",
    "get_last_period_start",
    "get_next_period_prediction",
    "get_period_cycles",
    "get_phase_insight",
    "get_pregnancy_chances",
    "has_ongoing_period",
    "parse_day",
]
