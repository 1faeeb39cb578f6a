"""Data models for daily calendar progress."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any

from .calendar_utils import date_from_key

if TYPE_CHECKING:
    from levels.models import GameMode


class DayState(IntEnum):
    """Persisted state of a played day. Only moves ACTIVE -> COMPLETED."""

    ACTIVE = 0
    COMPLETED = 1


class DayStatus(str, Enum):
    """Three-way view of a day, separating never-played from in-progress."""

    UNPLAYED = "unplayed"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass
class CalendarDay:
    level_id: int
    state: DayState = DayState.ACTIVE

    @property
    def completed(self) -> bool:
        return self.state == DayState.COMPLETED

    def to_dict(self) -> dict[str, int]:
        return {"level_id": self.level_id, "state": int(self.state)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CalendarDay:
        return cls(
            level_id=int(data.get("level_id", 0)),
            state=DayState(int(data.get("state", DayState.ACTIVE))),
        )


@dataclass
class PlayerProgress:
    """Everything the daily calendar persists for one player."""

    registration_ts: int = 0
    last_played_ts: int = 0  # 0 = no marker
    days_played: int = 0  # distinct days ever played
    days: dict[int, CalendarDay] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "registration_ts": self.registration_ts,
            "last_played_ts": self.last_played_ts,
            "days_played": self.days_played,
            # JSON object keys must be strings
            "days": {str(key): day.to_dict() for key, day in sorted(self.days.items())},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlayerProgress:
        raw_days = data.get("days") or {}
        return cls(
            registration_ts=int(data.get("registration_ts", 0)),
            last_played_ts=int(data.get("last_played_ts", 0)),
            days_played=int(data.get("days_played", 0)),
            days={int(key): CalendarDay.from_dict(value) for key, value in raw_days.items()},
        )


@dataclass
class LevelLaunch:
    """What ``create_or_resume_level`` started."""

    day_key: int
    level_id: int
    game_mode: GameMode
    origin: str
    resumed: bool = False

    @property
    def day(self) -> date:
        return date_from_key(self.day_key)
