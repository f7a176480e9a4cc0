"""Period tracking workflow tests."""

from __future__ import annotations

from datetime import date

import pytest

from lifeledger.errors import CycleError, FutureLogError, NoOpenPeriodError
from lifeledger.models import CycleStatus, EnergyLevel, FlowIntensity, SymptomSeverity
from lifeledger.services import period_tracking
from lifeledger.services.cycles import get_period_cycles
from tests.conftest import USER_ID

TODAY = date(2024, 3, 20)


@pytest.fixture
def tracker(session_factory):
    """Bind the workflows to the test database and a fixed 'today'."""

    class Tracker:
        def start(self, day):
            return period_tracking.log_period_start(
                session_factory=session_factory, user_id=USER_ID, day=day, today=TODAY
            )

        def end(self, day):
            return period_tracking.log_period_end(
                session_factory=session_factory, user_id=USER_ID, day=day, today=TODAY
            )

        def remove(self, day):
            return period_tracking.remove_period_log(
                session_factory=session_factory, user_id=USER_ID, day=day
            )

        def settings(self):
            return period_tracking.get_cycle_settings(
                session_factory=session_factory, user_id=USER_ID
            )

    return Tracker()


def _assert_cycles_match_logs(period_log_repo, cycle_repo):
    derived = get_period_cycles(period_log_repo.list_all(user_id=USER_ID))
    stored = cycle_repo.list_all(user_id=USER_ID)
    assert [(c.start, c.end) for c in derived] == [(c.start_date, c.end_date) for c in stored]
    for row in stored:
        expected = CycleStatus.OPEN if row.end_date is None else CycleStatus.CLOSED
        assert row.status == expected


class TestLogPeriodStart:
    def test_opens_a_cycle(self, tracker, period_log_repo, cycle_repo):
        log = tracker.start(date(2024, 3, 1))

        assert log.is_start_day is True
        assert log.flow_intensity == FlowIntensity.MODERATE
        open_cycle = cycle_repo.get_open(user_id=USER_ID)
        assert open_cycle.start_date == date(2024, 3, 1)
        assert open_cycle.status == CycleStatus.OPEN
        assert tracker.settings().last_period_date == date(2024, 3, 1)
        _assert_cycles_match_logs(period_log_repo, cycle_repo)

    def test_future_day_is_rejected(self, tracker, period_log_repo):
        with pytest.raises(FutureLogError):
            tracker.start(date(2024, 3, 21))
        assert period_log_repo.list_all(user_id=USER_ID) == []

    def test_keeps_existing_entry_details(self, tracker, session_factory):
        period_tracking.log_daily_entry(
            session_factory=session_factory,
            user_id=USER_ID,
            day=date(2024, 3, 1),
            mood="tired",
            flow_intensity="heavy",
            today=TODAY,
        )
        log = tracker.start(date(2024, 3, 1))
        assert log.mood == "tired"
        assert log.flow_intensity == FlowIntensity.HEAVY


class TestLogPeriodEnd:
    def test_closes_cycle_and_updates_settings(self, tracker, period_log_repo, cycle_repo):
        tracker.start(date(2024, 3, 1))

        closed = tracker.end(date(2024, 3, 5))

        assert closed.start_date == date(2024, 3, 1)
        assert closed.end_date == date(2024, 3, 5)
        assert closed.status == CycleStatus.CLOSED
        assert cycle_repo.get_open(user_id=USER_ID) is None
        end_log = period_log_repo.get(date(2024, 3, 5), user_id=USER_ID)
        assert end_log.is_end_day is True
        assert end_log.flow_intensity == FlowIntensity.LIGHT

        settings = tracker.settings()
        assert settings.period_length == 5
        assert settings.last_period_date == date(2024, 3, 1)
        _assert_cycles_match_logs(period_log_repo, cycle_repo)

    def test_requires_open_period(self, tracker):
        with pytest.raises(NoOpenPeriodError):
            tracker.end(date(2024, 3, 5))

    def test_end_must_follow_start(self, tracker):
        tracker.start(date(2024, 3, 10))
        with pytest.raises(NoOpenPeriodError):
            tracker.end(date(2024, 3, 10))
        with pytest.raises(NoOpenPeriodError):
            tracker.end(date(2024, 3, 8))

    def test_closed_period_cannot_be_closed_again(self, tracker):
        tracker.start(date(2024, 3, 1))
        tracker.end(date(2024, 3, 4))
        with pytest.raises(NoOpenPeriodError):
            tracker.end(date(2024, 3, 6))

    def test_future_end_is_rejected(self, tracker):
        tracker.start(date(2024, 3, 18))
        with pytest.raises(FutureLogError):
            tracker.end(date(2024, 3, 22))

    def test_failed_end_changes_nothing(self, tracker, period_log_repo):
        tracker.start(date(2024, 3, 1))
        tracker.start(date(2024, 3, 3))
        with pytest.raises(CycleError):
            tracker.end(date(2024, 3, 3))
        assert period_log_repo.get(date(2024, 3, 3), user_id=USER_ID).is_start_day is True


class TestRemovePeriodLog:
    def test_removing_end_reopens_cycle(self, tracker, period_log_repo, cycle_repo):
        tracker.start(date(2024, 3, 1))
        tracker.end(date(2024, 3, 5))

        assert tracker.remove(date(2024, 3, 5)) is True

        reopened = cycle_repo.get_open(user_id=USER_ID)
        assert reopened.start_date == date(2024, 3, 1)
        assert reopened.end_date is None
        _assert_cycles_match_logs(period_log_repo, cycle_repo)

    def test_removing_start_deletes_cycle(self, tracker, period_log_repo, cycle_repo):
        tracker.start(date(2024, 2, 1))
        tracker.end(date(2024, 2, 5))
        tracker.start(date(2024, 3, 1))

        tracker.remove(date(2024, 3, 1))

        assert [c.start_date for c in cycle_repo.list_all(user_id=USER_ID)] == [date(2024, 2, 1)]
        assert tracker.settings().last_period_date == date(2024, 2, 1)
        _assert_cycles_match_logs(period_log_repo, cycle_repo)

    def test_nothing_to_remove(self, tracker):
        assert tracker.remove(date(2024, 3, 1)) is False


class TestDailyEntry:
    def test_records_typed_fields(self, session_factory, period_log_repo):
        log = period_tracking.log_daily_entry(
            session_factory=session_factory,
            user_id=USER_ID,
            day=date(2024, 3, 2),
            mood=" happy ",
            energy_level="high",
            severity=SymptomSeverity.MILD,
            symptoms=["cramps", " bloating", "cramps", ""],
            notes="long walk",
            today=TODAY,
        )

        assert log.mood == "happy"
        assert log.energy_level == EnergyLevel.HIGH
        assert log.severity == SymptomSeverity.MILD
        assert log.symptoms == ["bloating", "cramps"]
        assert log.notes == "long walk"
        assert log.is_start_day is False

        period_tracking.log_daily_entry(
            session_factory=session_factory,
            user_id=USER_ID,
            day=date(2024, 3, 2),
            energy_level="low",
            today=TODAY,
        )
        stored = period_log_repo.get(date(2024, 3, 2), user_id=USER_ID)
        assert stored.energy_level == EnergyLevel.LOW
        assert stored.mood == "happy"

    def test_invalid_choice(self, session_factory):
        with pytest.raises(ValueError):
            period_tracking.log_daily_entry(
                session_factory=session_factory,
                user_id=USER_ID,
                day=date(2024, 3, 2),
                energy_level="extreme",
                today=TODAY,
            )

    def test_future_entry(self, session_factory):
        with pytest.raises(FutureLogError):
            period_tracking.log_daily_entry(
                session_factory=session_factory,
                user_id=USER_ID,
                day=date(2024, 4, 1),
                mood="ok",
                today=TODAY,
            )


class TestCycleSettings:
    def test_defaults_without_stored_row(self, tracker, settings_repo):
        settings = tracker.settings()
        assert (settings.cycle_length, settings.period_length) == (28, 5)
        assert settings.last_period_date is None
        assert settings_repo.get(user_id=USER_ID) is None

    def test_update_changes_only_given_values(self, tracker, session_factory, settings_repo):
        tracker.start(date(2024, 3, 1))

        period_tracking.update_cycle_settings(
            session_factory=session_factory, user_id=USER_ID, cycle_length=31
        )

        stored = settings_repo.get(user_id=USER_ID)
        assert (stored.cycle_length, stored.period_length) == (31, 5)
        assert stored.last_period_date == date(2024, 3, 1)

    @pytest.mark.parametrize("field", ["cycle_length", "period_length"])
    def test_update_rejects_non_positive_lengths(self, session_factory, settings_repo, field):
        with pytest.raises(CycleError, match="positive"):
            period_tracking.update_cycle_settings(
                session_factory=session_factory, user_id=USER_ID, **{field: 0}
            )
        assert settings_repo.get(user_id=USER_ID) is None
