"""Tests for progress persistence."""

import json
from datetime import date, datetime, timezone

import pytest

from daily.calendar_utils import day_key
from daily.clock import FixedClock
from daily.errors import LedgerBusyError, ProgressStoreError
from daily.models import CalendarDay, DayState, PlayerProgress
from lobby.store import JsonProgressStore, MemoryProgressStore, ProgressStore


def test_first_load_registers_today(tmp_path):
    clock = FixedClock(datetime(2026, 7, 4, 15, 30, tzinfo=timezone.utc))
    store = JsonProgressStore(tmp_path / "data" / "progress.json", clock=clock)

    progress = store.load()

    assert progress.registration_ts == day_key(date(2026, 7, 4))
    assert progress.days == {}
    assert store.path.exists()


def test_round_trip_keeps_ledger_keys_as_ints(tmp_path):
    store = JsonProgressStore(tmp_path / "progress.json")
    key = day_key(date(2026, 7, 2))
    progress = PlayerProgress(
        registration_ts=day_key(date(2026, 7, 1)),
        last_played_ts=key,
        days_played=1,
        days={key: CalendarDay(level_id=4, state=DayState.COMPLETED)},
    )

    store.save(progress)
    raw = json.loads(store.path.read_text(encoding="utf-8"))
    loaded = store.load()

    assert raw["days"][str(key)] == {"level_id": 4, "state": 1}
    assert loaded == progress


def test_corrupt_file_raises_store_error(tmp_path):
    path = tmp_path / "progress.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ProgressStoreError):
        JsonProgressStore(path).load()


def test_unwritable_location_raises_store_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = JsonProgressStore(blocker / "progress.json")
    with pytest.raises(ProgressStoreError):
        store.save(PlayerProgress())


def test_memory_store_hands_out_copies():
    store = MemoryProgressStore(PlayerProgress(days_played=2))
    loaded = store.load()
    loaded.days_played = 9
    assert store.load().days_played == 2


def test_claim_allows_one_owner():
    store = MemoryProgressStore()
    first, second = object(), object()
    store.claim(first)
    store.claim(first)
    with pytest.raises(LedgerBusyError):
        store.claim(second)
    store.release(second)
    assert store.owner is first
    store.release(first)
    store.claim(second)
    assert store.owner is second


def test_store_without_save_cannot_be_built():
    class LoadOnly(ProgressStore):
        def load(self) -> PlayerProgress:
            return PlayerProgress()

    with pytest.raises(TypeError):
        ProgressStore()
    with pytest.raises(TypeError):
        LoadOnly()
