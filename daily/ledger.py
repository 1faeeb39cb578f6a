"""Daily ledger: per-day level assignment, completion and monthly aggregates.

The ledger is the only writer of player progress. It claims its store on
construction and runs every mutation under a non-blocking lock, so two
resumes can never interleave between the existence check and the insert.
"""

from __future__ import annotations

import copy
import logging
import random
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from .calendar_utils import (
    date_from_key,
    day_key,
    days_in_month,
    month_days,
    same_year_month,
)
from .clock import Clock, SystemClock
from .errors import CompletedDayError, LedgerBusyError, UnplayedDayError
from .models import CalendarDay, DayState, DayStatus, LevelLaunch, PlayerProgress

if TYPE_CHECKING:
    from levels.catalog import LevelCatalog
    from lobby.starter import LevelStarter
    from lobby.store import ProgressStore

logger = logging.getLogger(__name__)

DEFAULT_ORIGIN = "daily"


class DailyLedger:
    """Owns the persisted day records of one player."""

    def __init__(
        self,
        store: ProgressStore,
        catalog: LevelCatalog,
        starter: LevelStarter,
        clock: Clock | None = None,
        rng: random.Random | None = None,
        origin: str = DEFAULT_ORIGIN,
    ):
        self._store = store
        self._catalog = catalog
        self._starter = starter
        self._clock = clock or SystemClock()
        self._rng = rng or random.Random()
        self._origin = origin
        self._lock = threading.Lock()

        self._store.claim(self)
        try:
            self._progress = self._store.load()
        except Exception:
            self._store.release(self)
            raise

    def close(self) -> None:
        self._store.release(self)

    def __enter__(self) -> DailyLedger:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ── Accessors ───────────────────────────────────────────────

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def registration_date(self) -> date:
        return date_from_key(self._progress.registration_ts)

    @property
    def last_played_ts(self) -> int:
        return self._progress.last_played_ts

    @property
    def days_played(self) -> int:
        return self._progress.days_played

    def snapshot(self) -> PlayerProgress:
        """Deep copy of the current progress, for comparisons and debugging."""
        return copy.deepcopy(self._progress)

    def record_for(self, value: date | datetime) -> CalendarDay | None:
        return self._progress.days.get(day_key(value))

    # ── Queries ─────────────────────────────────────────────────

    def state_of(self, value: date | datetime) -> DayState:
        """COMPLETED only for a completed record; unplayed days read as ACTIVE."""
        record = self.record_for(value)
        if record is not None and record.completed:
            return DayState.COMPLETED
        return DayState.ACTIVE

    def status_of(self, value: date | datetime) -> DayStatus:
        record = self.record_for(value)
        if record is None:
            return DayStatus.UNPLAYED
        if record.completed:
            return DayStatus.COMPLETED
        return DayStatus.ACTIVE

    def visible_day_count(self, reference: date | datetime) -> int:
        now = self._clock.now()
        if same_year_month(reference, now):
            return now.day
        return days_in_month(reference)

    def last_available_day_in_month(self, reference: date | datetime) -> int:
        """Latest visible day that is unplayed or active; 0 if all are completed."""
        available = 0
        for key in month_days(reference, self.visible_day_count(reference)):
            record = self._progress.days.get(key)
            if record is None or record.state == DayState.ACTIVE:
                available = key

        if available == 0:
            return 0
        return date_from_key(available).day

    def month_progress(self, reference: date | datetime, previous_step: bool = False) -> float:
        """Share of the month's days completed.

        ``previous_step`` drops the most recent day's weight, which gives the
        value to animate from after a completion.
        """
        completed = 0
        for key in month_days(reference):
            record = self._progress.days.get(key)
            if record is not None and record.completed:
                completed += 1

        if previous_step and completed > 0:
            completed -= 1

        # Divide once so a full month is exactly 1.0.
        return min(1.0, completed / days_in_month(reference))

    def all_days_completed_in_month(self, reference: date | datetime) -> bool:
        for key in month_days(reference):
            record = self._progress.days.get(key)
            if record is None or not record.completed:
                return False
        return True

    # ── Mutations ───────────────────────────────────────────────

    @contextmanager
    def _exclusive(self) -> Iterator[PlayerProgress]:
        """Hold the ledger lock; restore progress if the store write fails."""
        if not self._lock.acquire(blocking=False):
            raise LedgerBusyError("Daily ledger is already being modified")
        try:
            before = copy.deepcopy(self._progress)
            try:
                yield self._progress
                self._store.save(self._progress)
            except BaseException:
                self._progress = before
                raise
        finally:
            self._lock.release()

    def _assign_level_id(self, progress: PlayerProgress) -> int:
        if progress.days_played < len(self._catalog):
            position = progress.days_played + 1
        else:
            position = self._rng.randint(1, len(self._catalog))
        return self._catalog.at(position).level_id

    def create_or_resume_level(self, current_date: date | datetime) -> LevelLaunch:
        """Start the level for ``current_date``, assigning one on first play.

        Raises CompletedDayError for a finished day without touching progress.
        """
        key = day_key(current_date)

        with self._exclusive() as progress:
            record = progress.days.get(key)
            if record is not None:
                if record.completed:
                    raise CompletedDayError(key, f"Daily level for {date_from_key(key)} was passed, it cannot be started")
                level_id = record.level_id
                resumed = True
            else:
                level_id = self._assign_level_id(progress)
                resumed = False

            # Resolve the mode first so a bad preset aborts before any write.
            game_mode = self._catalog.get(level_id).game_mode

            if not resumed:
                progress.days_played += 1
                progress.days[key] = CalendarDay(level_id=level_id, state=DayState.ACTIVE)
            progress.last_played_ts = key

        logger.info(
            "%s daily level %d (%s) for %s",
            "Resuming" if resumed else "Assigned",
            level_id,
            game_mode.value,
            date_from_key(key),
        )
        self._starter.start_level(game_mode, self._origin)
        return LevelLaunch(
            day_key=key,
            level_id=level_id,
            game_mode=game_mode,
            origin=self._origin,
            resumed=resumed,
        )

    def mark_completed(self, value: date | datetime) -> CalendarDay:
        key = day_key(value)
        with self._exclusive() as progress:
            record = progress.days.get(key)
            if record is None:
                raise UnplayedDayError(key)
            if record.completed:
                raise CompletedDayError(key)
            record.state = DayState.COMPLETED

        logger.info("Daily level %d completed for %s", record.level_id, date_from_key(key))
        return record

    def consume_last_played(self) -> date | None:
        """Return the last-played day and clear the marker (read once)."""
        if self._progress.last_played_ts == 0:
            return None
        with self._exclusive() as progress:
            key = progress.last_played_ts
            progress.last_played_ts = 0
        return date_from_key(key)
