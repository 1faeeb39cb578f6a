"""Ordered catalog of daily level presets, loaded from YAML."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from daily.errors import CatalogError

from .models import LevelPreset

logger = logging.getLogger(__name__)


class LevelCatalog:
    """Presets in play order. Positions are 1-based."""

    def __init__(self, presets: list[LevelPreset]):
        if not presets:
            raise CatalogError("Daily level catalog is empty")
        self._presets = list(presets)
        self._by_id = {preset.level_id: preset for preset in self._presets}
        if len(self._by_id) != len(self._presets):
            raise CatalogError("Daily level catalog has duplicate level ids")

    def __len__(self) -> int:
        return len(self._presets)

    def __iter__(self):
        return iter(self._presets)

    def at(self, position: int) -> LevelPreset:
        if not 1 <= position <= len(self._presets):
            raise CatalogError(f"No preset at position {position} (catalog has {len(self._presets)})")
        return self._presets[position - 1]

    def get(self, level_id: int) -> LevelPreset:
        try:
            return self._by_id[level_id]
        except KeyError:
            raise CatalogError(f"Unknown daily level id {level_id}") from None

    @classmethod
    def from_config(cls, entries: list[dict]) -> LevelCatalog:
        presets = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            preset = LevelPreset.from_config(entry)
            if preset.level_id <= 0:
                logger.warning("Skipping catalog entry without a valid id: %r", entry)
                continue
            presets.append(preset)
        return cls(presets)


def load_catalog(path: str | Path) -> LevelCatalog:
    """Read the catalog YAML file (a list, or a mapping with a ``levels`` list)."""
    path = Path(path)
    if not path.exists():
        raise CatalogError(f"Daily level catalog not found: {path}")

    with open(path, encoding="utf-8") as f:
        payload = yaml.safe_load(f)

    if isinstance(payload, dict):
        payload = payload.get("levels")
    if not isinstance(payload, list):
        raise CatalogError(f"Daily level catalog has no level list: {path}")

    catalog = LevelCatalog.from_config(payload)
    logger.debug("Loaded %d daily presets from %s", len(catalog), path)
    return catalog
