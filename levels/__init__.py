"""Daily level presets and the catalog they are drawn from."""

from .catalog import LevelCatalog, load_catalog
from .models import GameMode, LevelPreset

__all__ = ["GameMode", "LevelCatalog", "LevelPreset", "load_catalog"]
