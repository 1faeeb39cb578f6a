"""Daily lobby presenter.

Turns cursor and ledger state into a month view model and handles the
player's actions (navigate, select a day, play). Drawing the view is left
to whoever consumes ``MonthView``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from daily.calendar_utils import days_in_month, same_year_month
from daily.cursor import DateCursor
from daily.errors import CompletedDayError
from daily.ledger import DailyLedger
from daily.models import DayState, DayStatus, LevelLaunch

from .countdown import NextDayCountdown

logger = logging.getLogger(__name__)


class TileState(str, Enum):
    LOCKED = "locked"  # not reached yet
    AVAILABLE = "available"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


_TILE_FOR_STATUS = {
    DayStatus.UNPLAYED: TileState.AVAILABLE,
    DayStatus.ACTIVE: TileState.IN_PROGRESS,
    DayStatus.COMPLETED: TileState.COMPLETED,
}


@dataclass
class DayTile:
    day: int
    state: TileState
    is_today: bool = False


@dataclass
class MonthView:
    viewed: date
    visible_days: int
    tiles: list[DayTile] = field(default_factory=list)
    progress: float = 0.0
    scroll_target: int = 0
    # Set when returning from a level that got completed: animate the tile,
    # fill progress from previous_progress, then scroll to follow_up_target.
    completed_day: int = 0
    previous_progress: float | None = None
    follow_up_target: int = 0
    can_go_previous: bool = False
    can_go_next: bool = False
    countdown_running: bool = False

    @property
    def days_in_month(self) -> int:
        return days_in_month(self.viewed)


@dataclass
class DaySelection:
    day: date
    status: DayStatus
    is_today: bool = False
    playable: bool = False


class PlayResult(str, Enum):
    STARTED = "started"
    COMPLETED = "completed"  # the day was already finished
    RETURN_TO_JOURNEY = "return_to_journey"  # nothing left to play


@dataclass
class PlayOutcome:
    result: PlayResult
    launch: LevelLaunch | None = None
    day: date | None = None


class DailyLobby:
    """Controller-side logic of the daily calendar screen."""

    def __init__(
        self,
        ledger: DailyLedger,
        cursor: DateCursor | None = None,
        countdown_factory: Callable[[DailyLobby], NextDayCountdown] | None = None,
    ):
        self._ledger = ledger
        self._cursor = cursor or DateCursor(ledger)
        self._clock = ledger.clock
        self._countdown = countdown_factory(self) if countdown_factory else None
        self.view: MonthView | None = None

    @property
    def cursor(self) -> DateCursor:
        return self._cursor

    @property
    def countdown(self) -> NextDayCountdown | None:
        return self._countdown

    # ── View ────────────────────────────────────────────────────

    def show(self) -> MonthView:
        self._cursor.initialize()
        return self.refresh()

    def refresh(self) -> MonthView:
        viewed = self._cursor.viewed
        today = self._clock.today()
        visible = self._cursor.visible_day_count()

        view = MonthView(viewed=viewed, visible_days=visible)
        for day in range(1, days_in_month(viewed) + 1):
            current = viewed.replace(day=day)
            if day > visible:
                state = TileState.LOCKED
            else:
                state = _TILE_FOR_STATUS[self._ledger.status_of(current)]
            view.tiles.append(DayTile(day=day, state=state, is_today=current == today))

        last_available = self._ledger.last_available_day_in_month(viewed)
        view.progress = self._ledger.month_progress(viewed)

        marker = self._ledger.consume_last_played()
        if marker is not None and same_year_month(marker, viewed):
            view.scroll_target = marker.day
            if self._ledger.state_of(marker) == DayState.COMPLETED:
                view.completed_day = marker.day
                view.previous_progress = self._ledger.month_progress(viewed, previous_step=True)
                view.follow_up_target = last_available
        else:
            view.scroll_target = last_available or visible

        view.can_go_previous = self._cursor.can_go_to_previous_month()
        view.can_go_next = self._cursor.can_go_to_next_month()

        if self._countdown is not None:
            if self._cursor.is_viewing_current_month():
                self._countdown.restart()
            else:
                self._countdown.cancel()
            view.countdown_running = self._countdown.running

        self.view = view
        return view

    def on_day_rollover(self) -> None:
        self.refresh()

    # ── Navigation ──────────────────────────────────────────────

    def previous_month(self) -> MonthView:
        if self._cursor.can_go_to_previous_month():
            self._cursor.previous_month()
        else:
            logger.debug("Already at the earliest month: %s", self._cursor.viewed)
        return self.refresh()

    def next_month(self) -> MonthView:
        if self._cursor.can_go_to_next_month():
            self._cursor.next_month()
        else:
            logger.debug("Already at the current month: %s", self._cursor.viewed)
        return self.refresh()

    def select_day(self, day: int) -> DaySelection:
        selected = self._cursor.set_viewed_day(day)
        return DaySelection(
            day=selected,
            status=self._ledger.status_of(selected),
            is_today=selected == self._clock.today(),
            playable=self._is_playable(selected),
        )

    # ── Play ────────────────────────────────────────────────────

    def _is_playable(self, value: date) -> bool:
        return value <= self._clock.today() and self._ledger.state_of(value) == DayState.ACTIVE

    def _start(self, value: date) -> PlayOutcome:
        try:
            launch = self._ledger.create_or_resume_level(value)
        except CompletedDayError as e:
            logger.warning("Daily level not started: %s", e)
            return PlayOutcome(result=PlayResult.COMPLETED, day=value)
        return PlayOutcome(result=PlayResult.STARTED, launch=launch, day=value)

    def play(self) -> PlayOutcome:
        """Start the selected day, or the nearest day that can be played."""
        viewed = self._cursor.viewed
        last_available = self._ledger.last_available_day_in_month(viewed)

        if last_available:
            if self._is_playable(viewed):
                return self._start(viewed)
            return self._start(self._cursor.set_viewed_day(last_available))

        # Whole visible month is done; look for another month to play.
        self._cursor.initialize()
        if same_year_month(viewed, self._cursor.viewed):
            logger.info("No daily level left to play, returning to journey mode")
            return PlayOutcome(result=PlayResult.RETURN_TO_JOURNEY)

        self.refresh()
        day = self._ledger.last_available_day_in_month(self._cursor.viewed)
        if not day:
            return PlayOutcome(result=PlayResult.RETURN_TO_JOURNEY)
        return self._start(self._cursor.set_viewed_day(day))
