"""Hand-off from the daily lobby to a game mode."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Protocol

from daily.errors import UnknownGameModeError
from levels.models import GameMode

logger = logging.getLogger(__name__)

# App state entered for each game mode.
GAME_MODE_STATES: dict[GameMode, str] = {
    GameMode.DOCKU: "docku_game",
    GameMode.PUZZLE: "puzzle_game",
}

StateHandler = Callable[[str, str], None]


class LevelStarter(Protocol):
    def start_level(self, game_mode: GameMode, origin: str) -> None: ...


def _log_transition(state: str, origin: str) -> None:
    logger.info("Going to state %s (lobby: %s)", state, origin)


class GameModeDispatcher:
    """Routes a game mode to its app state. Fire and forget."""

    def __init__(
        self,
        handler: StateHandler | None = None,
        states: Mapping[GameMode, str] | None = None,
    ):
        self._handler = handler or _log_transition
        self._states = dict(states if states is not None else GAME_MODE_STATES)

    def state_for(self, game_mode: GameMode) -> str:
        try:
            return self._states[game_mode]
        except KeyError:
            raise UnknownGameModeError(game_mode) from None

    def start_level(self, game_mode: GameMode, origin: str) -> None:
        self._handler(self.state_for(game_mode), origin)
