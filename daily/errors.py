"""Exceptions raised by the daily progression engine."""

from __future__ import annotations


class DailyError(Exception):
    """Base class for daily calendar errors."""


class CompletedDayError(DailyError):
    """Raised when a completed day is resumed or completed again."""

    def __init__(self, day_key: int, message: str = ""):
        self.day_key = day_key
        super().__init__(message or f"Day {day_key} is already completed")


class UnplayedDayError(DailyError):
    """Raised when completing a day that was never started."""

    def __init__(self, day_key: int):
        self.day_key = day_key
        super().__init__(f"Day {day_key} has no level record")


class LedgerBusyError(DailyError):
    """Raised when a ledger is mutated concurrently or owned twice."""


class UnknownGameModeError(DailyError):
    """Raised when a preset declares a game mode nobody can start."""

    def __init__(self, mode: object):
        self.mode = mode
        super().__init__(f"Game mode not implemented: {mode!r}")


class CatalogError(DailyError):
    """Raised when the level catalog is missing, empty, or lacks a preset."""


class ProgressStoreError(DailyError):
    """Raised when player progress cannot be read or written."""
