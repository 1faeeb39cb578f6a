"""Wires configuration, storage, catalog and engine into a daily lobby."""

from __future__ import annotations

import logging
import random
from typing import Any

from daily.clock import Clock, SystemClock, parse_fixed_now
from daily.cursor import DateCursor
from daily.ledger import DEFAULT_ORIGIN, DailyLedger
from levels.catalog import LevelCatalog, load_catalog

from .config import catalog_path, load_config, progress_path
from .countdown import NextDayCountdown
from .presenter import DailyLobby
from .starter import GameModeDispatcher, LevelStarter
from .store import JsonProgressStore, ProgressStore

logger = logging.getLogger(__name__)


def clock_from_config(cfg: dict) -> Clock:
    fixed = parse_fixed_now(cfg.get("_env", {}).get("fixed_now", ""))
    if fixed is not None:
        logger.info("Clock pinned to %s", fixed.now().isoformat())
        return fixed
    return SystemClock()


class DailyLobbyApp:
    """Owns one player's ledger for the lifetime of a session.

    Usage::

        with DailyLobbyApp(cfg) as app:
            view = app.lobby.show()
    """

    def __init__(
        self,
        config: dict | None = None,
        clock: Clock | None = None,
        store: ProgressStore | None = None,
        catalog: LevelCatalog | None = None,
        starter: LevelStarter | None = None,
        with_countdown: bool = False,
    ):
        self._cfg = config or load_config()
        daily_cfg = self._cfg.get("daily", {}) or {}

        self.clock = clock or clock_from_config(self._cfg)
        self.store = store or JsonProgressStore(progress_path(self._cfg), clock=self.clock)
        self.catalog = catalog or load_catalog(catalog_path(self._cfg))
        self.starter = starter or GameModeDispatcher()

        seed = daily_cfg.get("random_seed")
        self.ledger = DailyLedger(
            self.store,
            self.catalog,
            self.starter,
            clock=self.clock,
            rng=random.Random(seed),
            origin=daily_cfg.get("origin_tag", DEFAULT_ORIGIN),
        )

        tick = float(daily_cfg.get("countdown_tick_seconds", 1))
        factory = None
        if with_countdown:
            def factory(lobby: DailyLobby) -> NextDayCountdown:
                return NextDayCountdown(
                    self.clock,
                    on_tick=self._log_tick,
                    on_elapsed=lobby.on_day_rollover,
                    tick_seconds=tick,
                )
        self.lobby = DailyLobby(self.ledger, DateCursor(self.ledger), countdown_factory=factory)

    @staticmethod
    def _log_tick(remaining) -> None:
        logger.debug("Next daily level in %s", str(remaining).split(".")[0])

    def close(self) -> None:
        if self.lobby.countdown is not None:
            self.lobby.countdown.cancel()
        self.ledger.close()

    def __enter__(self) -> DailyLobbyApp:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
