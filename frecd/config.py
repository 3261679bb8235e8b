"""Config directory resolution and optional JSON settings.

History lives next to ``config.json`` in the per-user config directory.
All settings access is defensive: malformed or missing config falls back to
the built-in frecency constants.
"""

from __future__ import annotations

import json
import logging
import math
import os
from pathlib import Path

from platformdirs import user_config_dir

from .frecency import DEFAULT_MODEL, FrecencyModel

APP_NAME = "frecd"
CONFIG_DIR_ENV = "FRECD_CONFIG_DIR"
CONFIG_FILENAME = "config.json"
DB_FILENAME = "frecd_dirs.msgpack"
SECONDS_PER_DAY = 24 * 60 * 60.0

logger = logging.getLogger(__name__)


def config_dir() -> Path:
    """Return the directory holding history and settings.

    ``FRECD_CONFIG_DIR`` wins over the platform default when set.
    """
    override = os.environ.get(CONFIG_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return Path(user_config_dir(APP_NAME, appauthor=False))


def database_path() -> Path:
    return config_dir() / DB_FILENAME


def config_path() -> Path:
    return config_dir() / CONFIG_FILENAME


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(config_path().read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def _number(value: object, *, allow_zero: bool = False) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return None
    if value < 0 or (value == 0 and not allow_zero):
        return None
    return float(value)


def load_frecency_model() -> FrecencyModel:
    """Build the frecency model from ``half_life_days`` and ``visit_increment``.

    Invalid values are ignored in favor of the defaults.
    """
    data = load_config()
    half_life = DEFAULT_MODEL.half_life
    visit_increment = DEFAULT_MODEL.visit_increment

    days = _number(data.get("half_life_days"))
    if days is not None and math.isfinite(days * SECONDS_PER_DAY):
        half_life = days * SECONDS_PER_DAY
    elif "half_life_days" in data:
        logger.warning("ignoring invalid half_life_days: %r", data["half_life_days"])

    increment = _number(data.get("visit_increment"), allow_zero=True)
    if increment is not None:
        visit_increment = increment
    elif "visit_increment" in data:
        logger.warning("ignoring invalid visit_increment: %r", data["visit_increment"])

    return FrecencyModel(
        half_life=half_life,
        decay_factor=DEFAULT_MODEL.decay_factor,
        visit_increment=visit_increment,
    )
