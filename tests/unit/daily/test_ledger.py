"""Tests for day records, month aggregates and level assignment."""

import random
from datetime import date, datetime, timezone

import pytest

from daily.calendar_utils import day_key
from daily.clock import FixedClock
from daily.errors import (
    CompletedDayError,
    LedgerBusyError,
    ProgressStoreError,
    UnknownGameModeError,
    UnplayedDayError,
)
from daily.ledger import DailyLedger
from daily.models import CalendarDay, DayState, DayStatus, PlayerProgress
from levels.catalog import LevelCatalog
from levels.models import GameMode, LevelPreset
from lobby.store import MemoryProgressStore

NOW = datetime(2026, 4, 15, 10, 0, tzinfo=timezone.utc)  # April has 30 days


class RecordingStarter:
    def __init__(self):
        self.calls = []

    def start_level(self, game_mode, origin):
        self.calls.append((game_mode, origin))


def _catalog(size: int = 5) -> LevelCatalog:
    return LevelCatalog([
        LevelPreset(level_id=100 + i, mode="docku" if i % 2 else "puzzle", name=f"L{i}")
        for i in range(1, size + 1)
    ])


def _progress(**days: DayState) -> PlayerProgress:
    progress = PlayerProgress(registration_ts=day_key(date(2026, 4, 1)))
    for name, state in days.items():
        d = date.fromisoformat(name.lstrip("d").replace("_", "-"))
        progress.days[day_key(d)] = CalendarDay(level_id=101, state=state)
    return progress


def _complete(progress: PlayerProgress, first: date, last: date) -> None:
    for day in range(first.day, last.day + 1):
        progress.days[day_key(first.replace(day=day))] = CalendarDay(level_id=101, state=DayState.COMPLETED)


def _ledger(progress: PlayerProgress | None = None, catalog=None, now=NOW, seed=7):
    store = MemoryProgressStore(progress or _progress())
    starter = RecordingStarter()
    ledger = DailyLedger(
        store,
        catalog or _catalog(),
        starter,
        clock=FixedClock(now),
        rng=random.Random(seed),
    )
    return ledger, store, starter


class TestQueries:
    def test_state_of_is_completed_only_for_completed_records(self):
        ledger, _, _ = _ledger(_progress(d2026_04_03=DayState.COMPLETED, d2026_04_04=DayState.ACTIVE))
        assert ledger.state_of(date(2026, 4, 3)) == DayState.COMPLETED
        assert ledger.state_of(date(2026, 4, 4)) == DayState.ACTIVE
        assert ledger.state_of(date(2026, 4, 5)) == DayState.ACTIVE

    def test_status_of_separates_unplayed_from_active(self):
        ledger, _, _ = _ledger(_progress(d2026_04_03=DayState.COMPLETED, d2026_04_04=DayState.ACTIVE))
        assert ledger.status_of(date(2026, 4, 3)) == DayStatus.COMPLETED
        assert ledger.status_of(date(2026, 4, 4)) == DayStatus.ACTIVE
        assert ledger.status_of(date(2026, 4, 5)) == DayStatus.UNPLAYED

    def test_state_lookup_ignores_time_of_day(self):
        ledger, _, _ = _ledger(_progress(d2026_04_03=DayState.COMPLETED))
        evening = datetime(2026, 4, 3, 23, 30, tzinfo=timezone.utc)
        assert ledger.state_of(evening) == DayState.COMPLETED

    def test_fresh_month_is_available_up_to_today(self):
        ledger, _, _ = _ledger()
        assert ledger.last_available_day_in_month(date(2026, 4, 1)) == 15
        assert ledger.month_progress(date(2026, 4, 1)) == 0

    def test_last_available_skips_completed_days(self):
        progress = _progress()
        _complete(progress, date(2026, 4, 4), date(2026, 4, 15))
        ledger, _, _ = _ledger(progress)
        assert ledger.last_available_day_in_month(date(2026, 4, 20)) == 3

    def test_last_available_counts_active_records(self):
        progress = _progress()
        _complete(progress, date(2026, 4, 1), date(2026, 4, 15))
        progress.days[day_key(date(2026, 4, 9))].state = DayState.ACTIVE
        ledger, _, _ = _ledger(progress)
        assert ledger.last_available_day_in_month(date(2026, 4, 1)) == 9

    def test_last_available_is_zero_when_visible_days_are_done(self):
        progress = _progress()
        _complete(progress, date(2026, 4, 1), date(2026, 4, 15))
        ledger, _, _ = _ledger(progress)
        assert ledger.last_available_day_in_month(date(2026, 4, 1)) == 0
        # later days of the month are not visible yet
        assert not ledger.all_days_completed_in_month(date(2026, 4, 1))

    def test_past_month_shows_every_day(self):
        ledger, _, _ = _ledger()
        assert ledger.visible_day_count(date(2026, 3, 1)) == 31
        assert ledger.last_available_day_in_month(date(2026, 3, 1)) == 31

    def test_month_progress_weights_each_day(self):
        progress = _progress()
        _complete(progress, date(2026, 4, 1), date(2026, 4, 3))
        ledger, _, _ = _ledger(progress)
        assert ledger.month_progress(date(2026, 4, 1)) == pytest.approx(3 / 30)
        assert ledger.month_progress(date(2026, 4, 1), previous_step=True) == pytest.approx(2 / 30)

    def test_previous_step_never_goes_below_zero(self):
        ledger, _, _ = _ledger()
        assert ledger.month_progress(date(2026, 4, 1), previous_step=True) == 0

    def test_month_progress_is_monotonic_and_bounded(self):
        progress = _progress()
        ledger, store, _ = _ledger(progress)
        seen = [ledger.month_progress(date(2026, 3, 1))]
        for day in range(1, 32):
            progress.days[day_key(date(2026, 3, day))] = CalendarDay(level_id=101, state=DayState.COMPLETED)
            ledger, _, _ = _ledger(progress)
            seen.append(ledger.month_progress(date(2026, 3, 1)))
        assert seen == sorted(seen)
        assert all(0.0 <= value <= 1.0 for value in seen)
        assert seen[-1] == 1.0

    @pytest.mark.parametrize("first, last", [
        (date(2026, 2, 1), date(2026, 2, 28)),
        (date(2026, 4, 1), date(2026, 4, 30)),
        (date(2026, 3, 1), date(2026, 3, 31)),
    ])
    def test_full_month_is_exactly_one(self, first, last):
        progress = _progress()
        _complete(progress, first, last)
        ledger, _, _ = _ledger(progress)

        assert ledger.all_days_completed_in_month(first)
        assert ledger.month_progress(first) == 1.0
        assert ledger.month_progress(first, previous_step=True) == (last.day - 1) / last.day

    def test_all_days_completed_requires_every_record(self):
        progress = _progress()
        _complete(progress, date(2026, 3, 1), date(2026, 3, 31))
        ledger, _, _ = _ledger(progress)
        assert ledger.all_days_completed_in_month(date(2026, 3, 10))
        assert ledger.last_available_day_in_month(date(2026, 3, 10)) == 0

    def test_all_days_completed_fails_on_missing_or_active_day(self):
        missing = _progress()
        _complete(missing, date(2026, 3, 1), date(2026, 3, 30))
        ledger, _, _ = _ledger(missing)
        assert not ledger.all_days_completed_in_month(date(2026, 3, 1))

        active = _progress()
        _complete(active, date(2026, 3, 1), date(2026, 3, 31))
        active.days[day_key(date(2026, 3, 17))].state = DayState.ACTIVE
        ledger, _, _ = _ledger(active)
        assert not ledger.all_days_completed_in_month(date(2026, 3, 1))
        assert ledger.last_available_day_in_month(date(2026, 3, 1)) == 17


class TestCreateOrResume:
    def test_first_play_assigns_first_preset_and_sets_marker(self):
        ledger, store, starter = _ledger()
        launch = ledger.create_or_resume_level(date(2026, 4, 15))

        assert launch.level_id == 101
        assert launch.resumed is False
        assert launch.day == date(2026, 4, 15)
        assert ledger.days_played == 1
        assert ledger.last_played_ts == day_key(date(2026, 4, 15))
        assert ledger.status_of(date(2026, 4, 15)) == DayStatus.ACTIVE
        assert starter.calls == [(GameMode.DOCKU, "daily")]
        assert store.load().days[day_key(date(2026, 4, 15))].level_id == 101

    def test_second_call_resumes_same_level_without_counting(self):
        ledger, _, starter = _ledger()
        first = ledger.create_or_resume_level(date(2026, 4, 15))
        second = ledger.create_or_resume_level(datetime(2026, 4, 15, 22, 0, tzinfo=timezone.utc))

        assert second.level_id == first.level_id
        assert second.resumed is True
        assert ledger.days_played == 1
        assert len(starter.calls) == 2

    def test_presets_are_assigned_in_order_then_drawn_from_pool(self):
        ledger, _, _ = _ledger(catalog=_catalog(5))
        assigned = [ledger.create_or_resume_level(date(2026, 4, day)).level_id for day in range(1, 6)]
        assert assigned == [101, 102, 103, 104, 105]

        extra = [ledger.create_or_resume_level(date(2026, 4, day)).level_id for day in range(6, 16)]
        assert set(extra) <= {101, 102, 103, 104, 105}
        assert ledger.days_played == 15

    def test_pool_draw_uses_injected_randomness(self):
        def draws(seed):
            ledger, _, _ = _ledger(catalog=_catalog(2), seed=seed)
            return [ledger.create_or_resume_level(date(2026, 4, day)).level_id for day in range(1, 13)]

        assert draws(42) == draws(42)
        assert draws(42)[:2] == [101, 102]

    def test_resuming_completed_day_changes_nothing(self):
        ledger, store, starter = _ledger(_progress(d2026_04_10=DayState.COMPLETED))
        before = ledger.snapshot()
        saves = store.saves

        with pytest.raises(CompletedDayError) as exc_info:
            ledger.create_or_resume_level(date(2026, 4, 10))

        assert exc_info.value.day_key == day_key(date(2026, 4, 10))
        assert ledger.snapshot() == before
        assert store.saves == saves
        assert starter.calls == []

    def test_unknown_game_mode_is_fatal_and_writes_nothing(self):
        catalog = LevelCatalog([LevelPreset(level_id=1, mode="racing")])
        ledger, store, starter = _ledger(catalog=catalog)
        before = ledger.snapshot()

        with pytest.raises(UnknownGameModeError):
            ledger.create_or_resume_level(date(2026, 4, 15))

        assert ledger.snapshot() == before
        assert store.saves == 0
        assert starter.calls == []

    def test_failed_save_rolls_back(self):
        class FailingStore(MemoryProgressStore):
            def save(self, progress):
                raise ProgressStoreError("disk full")

        store = FailingStore(_progress())
        starter = RecordingStarter()
        ledger = DailyLedger(store, _catalog(), starter, clock=FixedClock(NOW))

        with pytest.raises(ProgressStoreError):
            ledger.create_or_resume_level(date(2026, 4, 15))

        assert ledger.snapshot() == _progress()
        assert starter.calls == []


class TestMarkCompleted:
    def test_marks_active_day_completed(self):
        ledger, store, _ = _ledger()
        ledger.create_or_resume_level(date(2026, 4, 15))
        record = ledger.mark_completed(date(2026, 4, 15))

        assert record.state == DayState.COMPLETED
        assert store.load().days[day_key(date(2026, 4, 15))].completed

    def test_unplayed_day_cannot_be_completed(self):
        ledger, _, _ = _ledger()
        with pytest.raises(UnplayedDayError):
            ledger.mark_completed(date(2026, 4, 15))

    def test_completed_day_cannot_be_completed_twice(self):
        ledger, _, _ = _ledger(_progress(d2026_04_10=DayState.COMPLETED))
        with pytest.raises(CompletedDayError):
            ledger.mark_completed(date(2026, 4, 10))


class TestMarker:
    def test_consume_last_played_reads_once(self):
        ledger, store, _ = _ledger()
        ledger.create_or_resume_level(date(2026, 4, 12))

        assert ledger.consume_last_played() == date(2026, 4, 12)
        assert ledger.consume_last_played() is None
        assert store.load().last_played_ts == 0


class TestOwnership:
    def test_store_has_a_single_ledger(self):
        ledger, store, _ = _ledger()
        with pytest.raises(LedgerBusyError):
            DailyLedger(store, _catalog(), RecordingStarter(), clock=FixedClock(NOW))

        ledger.close()
        with DailyLedger(store, _catalog(), RecordingStarter(), clock=FixedClock(NOW)) as other:
            assert store.owner is other
        assert store.owner is None

    def test_reentrant_mutation_is_rejected(self):
        class ReentrantStore(MemoryProgressStore):
            ledger = None

            def save(self, progress):
                self.ledger.mark_completed(date(2026, 4, 15))

        store = ReentrantStore(_progress())
        ledger = DailyLedger(store, _catalog(), RecordingStarter(), clock=FixedClock(NOW))
        store.ledger = ledger

        with pytest.raises(LedgerBusyError):
            ledger.create_or_resume_level(date(2026, 4, 15))
        assert ledger.status_of(date(2026, 4, 15)) == DayStatus.UNPLAYED
