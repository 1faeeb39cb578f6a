"""Daily calendar engine: day records, month progress, viewed-month cursor."""

from .clock import Clock, FixedClock, SystemClock
from .cursor import DateCursor
from .errors import (
    CatalogError,
    CompletedDayError,
    DailyError,
    LedgerBusyError,
    ProgressStoreError,
    UnknownGameModeError,
    UnplayedDayError,
)
from .ledger import DailyLedger
from .models import CalendarDay, DayState, DayStatus, LevelLaunch, PlayerProgress

__all__ = [
    "CalendarDay",
    "CatalogError",
    "Clock",
    "CompletedDayError",
    "DailyError",
    "DailyLedger",
    "DateCursor",
    "DayState",
    "DayStatus",
    "FixedClock",
    "LedgerBusyError",
    "LevelLaunch",
    "PlayerProgress",
    "ProgressStoreError",
    "SystemClock",
    "UnknownGameModeError",
    "UnplayedDayError",
]
