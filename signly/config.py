"""Application settings and logging setup."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

SETTINGS_ENV = "SIGNLY_SETTINGS"
LOG_LEVEL_ENV = "SIGNLY_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True, slots=True)
class Settings:
    render_scale: float = 1.5          # main page surface
    thumbnail_scale: float = 0.25      # sidebar previews
    marker_size: int = 64              # on-screen field marker side, px
    remove_handle_size: int = 20       # px
    sample_full_name: str = "John Doe"
    date_format: str = "%d/%m/%Y"
    log_level: str = "INFO"


def default_settings_path() -> Path:
    override = os.environ.get(SETTINGS_ENV)
    if override:
        return Path(override)
    return Path.home() / ".signly" / "settings.json"


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from JSON, falling back to defaults for anything missing."""
    settings = Settings()
    settings_path = Path(path) if path is not None else default_settings_path()

    if settings_path.is_file():
        try:
            raw = json.loads(settings_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", settings_path, exc)
            raw = {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring settings file %s: expected a JSON object", settings_path)
            raw = {}
        settings = _apply(settings, raw)

    level = os.environ.get(LOG_LEVEL_ENV)
    if level:
        settings = replace(settings, log_level=level.upper())
    return settings


def _apply(settings: Settings, raw: dict) -> Settings:
    known = {item.name: item for item in fields(Settings)}
    changes = {}
    for key, value in raw.items():
        if key not in known:
            logger.warning("Unknown setting %r ignored", key)
            continue
        default = getattr(settings, key)
        try:
            converted = type(default)(value)
        except (TypeError, ValueError):
            logger.warning("Invalid value for setting %r: %r", key, value)
            continue
        if isinstance(converted, (int, float)) and converted <= 0:
            logger.warning("Setting %r must be positive, got %r", key, value)
            continue
        changes[key] = converted
    return replace(settings, **changes)


def configure_logging(level: str = "INFO") -> None:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
