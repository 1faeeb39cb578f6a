"""Persistence for player progress.

Progress = registration date, last-played marker, distinct-days counter and
the day ledger, kept in one JSON file between sessions.
"""

from __future__ import annotations

import copy
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from daily.calendar_utils import day_key
from daily.clock import Clock, SystemClock
from daily.errors import LedgerBusyError, ProgressStoreError
from daily.models import PlayerProgress

logger = logging.getLogger(__name__)


class ProgressStore(ABC):
    """Key-value style access to one player's progress, with a single owner."""

    def __init__(self) -> None:
        self._owner: object | None = None

    def claim(self, owner: object) -> None:
        if self._owner is not None and self._owner is not owner:
            raise LedgerBusyError("Progress store already has an owner")
        self._owner = owner

    def release(self, owner: object) -> None:
        if self._owner is owner:
            self._owner = None

    @property
    def owner(self) -> object | None:
        return self._owner

    @abstractmethod
    def load(self) -> PlayerProgress:
        """Return a copy of the stored progress."""

    @abstractmethod
    def save(self, progress: PlayerProgress) -> None:
        """Persist ``progress`` in full."""


class MemoryProgressStore(ProgressStore):
    """Keeps progress in memory. Saves store a copy, like a real backend."""

    def __init__(self, progress: PlayerProgress | None = None):
        super().__init__()
        self._progress = copy.deepcopy(progress) if progress else PlayerProgress()
        self.saves = 0

    def load(self) -> PlayerProgress:
        return copy.deepcopy(self._progress)

    def save(self, progress: PlayerProgress) -> None:
        self._progress = copy.deepcopy(progress)
        self.saves += 1


class JsonProgressStore(ProgressStore):
    """Load / save PlayerProgress to a JSON file."""

    def __init__(self, path: str | Path, clock: Clock | None = None):
        super().__init__()
        self._path = Path(path)
        self._clock = clock or SystemClock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> PlayerProgress:
        if self._path.exists():
            try:
                raw = json.loads(self._path.read_text(encoding="utf-8"))
                progress = PlayerProgress.from_dict(raw)
            except (OSError, ValueError, TypeError, AttributeError) as e:
                raise ProgressStoreError(f"Cannot read progress from {self._path}: {e}") from e
            logger.debug(
                "Loaded progress: %d days recorded, %d played",
                len(progress.days),
                progress.days_played,
            )
            return progress

        # First run: the account registers today
        progress = PlayerProgress(registration_ts=day_key(self._clock.now()))
        self.save(progress)
        logger.info("Created initial progress file at %s", self._path)
        return progress

    def save(self, progress: PlayerProgress) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(progress.to_dict(), indent=2), encoding="utf-8")
        except OSError as e:
            raise ProgressStoreError(f"Cannot write progress to {self._path}: {e}") from e
        logger.debug("Saved progress to %s", self._path)
