"""Configuration loading from settings.yaml and .env."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv


def load_config(
    config_dir: str | Path | None = None,
) -> dict:
    """Load settings.yaml and .env, return merged config dict."""
    if config_dir is None:
        config_dir = Path(__file__).resolve().parent.parent / "config"
    config_dir = Path(config_dir)

    # Load .env (silently skip if missing)
    env_path = config_dir / ".env"
    load_dotenv(env_path)

    settings_path = config_dir / "settings.yaml"
    if not settings_path.exists():
        raise FileNotFoundError(f"Config not found: {settings_path}")

    with open(settings_path, encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}

    cfg["_config_dir"] = str(config_dir)
    cfg["_env"] = {
        "progress_file": os.getenv("DAILY_PROGRESS_FILE", ""),
        "fixed_now": os.getenv("DAILY_FIXED_NOW", ""),
    }

    return cfg


def resolve_path(cfg: dict, raw: str | Path) -> Path:
    """Relative paths in settings are relative to the project root."""
    path = Path(raw).expanduser()
    if path.is_absolute():
        return path
    root = Path(cfg.get("_config_dir", "config")).resolve().parent
    return root / path


def progress_path(cfg: dict) -> Path:
    override = cfg.get("_env", {}).get("progress_file", "")
    raw = override or cfg.get("storage", {}).get("progress_file", "data/progress.json")
    return resolve_path(cfg, raw)


def catalog_path(cfg: dict) -> Path:
    raw = cfg.get("catalog", {}).get("levels_file", "config/levels_daily.yaml")
    return resolve_path(cfg, raw)
