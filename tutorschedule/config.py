"""
Settings for the scheduling engine.

Stored as a small JSON file:

    data/settings.json

    {
      "defaultSessionDuration": 60,
      "workingHoursStart": "08:00",
      "workingHoursEnd": "22:00",
      "closenessThresholdMinutes": 30
    }

Every field is optional. A missing or broken file never stops the tool;
defaults are used instead.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tutorschedule.model import DEFAULT_SESSION_DURATION

logger = logging.getLogger(__name__)

DEFAULT_WORKING_HOURS_START = "08:00"
DEFAULT_WORKING_HOURS_END = "22:00"
DEFAULT_CLOSENESS_THRESHOLD = 30


@dataclass(frozen=True)
class Settings:
    default_session_duration: int = DEFAULT_SESSION_DURATION
    working_hours_start: str = DEFAULT_WORKING_HOURS_START
    working_hours_end: str = DEFAULT_WORKING_HOURS_END
    # gaps strictly below this many minutes are flagged as "close"
    closeness_threshold: int = DEFAULT_CLOSENESS_THRESHOLD


def _default_settings_path() -> Path:
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "settings.json"


def _positive_int(value: Any, fallback: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return fallback
    return value


def _non_negative_int(value: Any, fallback: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return fallback
    return value


def _hhmm(value: Any, fallback: str) -> str:
    if not isinstance(value, str) or not value.strip():
        return fallback
    return value.strip()


def settings_from_dict(data: dict[str, Any]) -> Settings:
    """
    Build Settings from the camelCase JSON mapping, field by field.
    """
    defaults = Settings()
    return Settings(
        default_session_duration=_positive_int(
            data.get("defaultSessionDuration"), defaults.default_session_duration
        ),
        working_hours_start=_hhmm(data.get("workingHoursStart"), defaults.working_hours_start),
        working_hours_end=_hhmm(data.get("workingHoursEnd"), defaults.working_hours_end),
        closeness_threshold=_non_negative_int(
            data.get("closenessThresholdMinutes"), defaults.closeness_threshold
        ),
    )


def load_settings(path: str | Path | None = None) -> Settings:
    """
    Load settings from JSON. Returns defaults if the file is missing or invalid.
    """
    settings_path = Path(path) if path is not None else _default_settings_path()

    if not settings_path.exists():
        return Settings()

    try:
        data = json.loads(settings_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("Could not read settings from %s (%s); using defaults", settings_path, exc)
        return Settings()

    if not isinstance(data, dict):
        logger.warning("Settings file %s is not a JSON object; using defaults", settings_path)
        return Settings()

    return settings_from_dict(data)
