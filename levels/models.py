"""Level preset models for the daily catalog."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from daily.errors import UnknownGameModeError


class GameMode(str, Enum):
    DOCKU = "docku"
    PUZZLE = "puzzle"


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


@dataclass
class LevelPreset:
    level_id: int
    mode: str = ""  # raw value from the catalog file
    name: str = ""

    @property
    def game_mode(self) -> GameMode:
        """The declared mode; anything unrecognized is a catalog defect."""
        try:
            return GameMode(self.mode.strip().lower())
        except ValueError:
            raise UnknownGameModeError(self.mode) from None

    @classmethod
    def from_config(cls, data: dict) -> LevelPreset:
        raw_id = data.get("id", data.get("preset", 0))
        try:
            level_id = int(raw_id)
        except (TypeError, ValueError):
            level_id = 0
        return cls(
            level_id=level_id,
            mode=_as_text(data.get("mode", "")),
            name=_as_text(data.get("name", "")),
        )
