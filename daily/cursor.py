"""Viewed-month cursor for the daily calendar."""

from __future__ import annotations

import logging
from datetime import date

from .calendar_utils import (
    add_days,
    add_months,
    date_from_key,
    is_after_by_year_month,
    is_before_by_year_month,
    same_year_month,
)
from .ledger import DailyLedger

logger = logging.getLogger(__name__)


class DateCursor:
    """Tracks which month and day the player is looking at."""

    def __init__(self, ledger: DailyLedger):
        self._ledger = ledger
        self._clock = ledger.clock
        self._viewed: date = self._clock.today()

    @property
    def viewed(self) -> date:
        return self._viewed

    def initialize(self) -> date:
        """Pick the starting view: last played day, else today, else the
        most recent month that still has something to play."""
        marker = self._ledger.last_played_ts
        if marker:
            self._viewed = date_from_key(marker)
            logger.debug("Cursor resumes last played day %s", self._viewed)
            return self._viewed

        now = self._clock.today()
        self._viewed = now

        if not is_after_by_year_month(now, self._ledger.registration_date) and not (
            self._ledger.all_days_completed_in_month(now)
        ):
            return self._viewed

        while self._ledger.last_available_day_in_month(self._viewed) == 0:
            self._viewed = add_months(self._viewed, -1)

        if not same_year_month(self._viewed, now):
            logger.debug("Cursor fell back to %s: later months are complete", self._viewed)
        return self._viewed

    def set_viewed_day(self, day: int) -> date:
        self._viewed = add_days(self._viewed, day - self._viewed.day)
        return self._viewed

    def step_month(self, delta: int) -> date:
        if delta not in (1, -1):
            raise ValueError(f"Month step must be +1 or -1, got {delta}")
        self._viewed = add_months(self._viewed, delta)
        return self._viewed

    def next_month(self) -> date:
        return self.step_month(1)

    def previous_month(self) -> date:
        return self.step_month(-1)

    def can_go_to_previous_month(self) -> bool:
        return is_after_by_year_month(
            self._viewed, self._ledger.registration_date
        ) or self._ledger.all_days_completed_in_month(self._viewed)

    def can_go_to_next_month(self) -> bool:
        return is_before_by_year_month(self._viewed, self._clock.today())

    def is_viewing_current_month(self) -> bool:
        return same_year_month(self._viewed, self._clock.today())

    def visible_day_count(self) -> int:
        return self._ledger.visible_day_count(self._viewed)
