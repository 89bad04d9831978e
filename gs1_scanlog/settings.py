"""
Application settings persistence.

Settings come from DEFAULT_SETTINGS, overlaid by an optional JSON file and
then by ``GS1_SCANLOG_<KEY>`` environment variables.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union


logger = logging.getLogger(__name__)

ENV_PREFIX = "GS1_SCANLOG_"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "store_path": "data/scans.json",
    "rules_path": "",  # empty = packaged providers.json
    "export_dir": "exports",
    "export_columns": ["01", "10", "17", "21", "22"],
    "near_expiry_months": 6,
    "provider_override": "",  # empty = automatic classification
    "log_level": "INFO",
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _coerce(key: str, value: str) -> Any:
    """Convert an environment string to the type of the default."""
    default = DEFAULT_SETTINGS.get(key)
    if isinstance(default, bool):
        return value.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        try:
            return int(value)
        except ValueError as e:
            raise ValueError(f"{ENV_PREFIX}{key.upper()} must be an integer, got {value!r}") from e
    if isinstance(default, list):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


def load_settings(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Load settings.

    Raises:
        OSError: if ``path`` exists but cannot be read
        ValueError: on malformed JSON or environment values
    """
    settings = dict(DEFAULT_SETTINGS)

    if path:
        settings_path = Path(path)
        if settings_path.exists():
            with settings_path.open("r", encoding="utf-8") as f:
                payload = json.load(f)
            if not isinstance(payload, dict):
                raise ValueError(f"{settings_path}: expected a JSON object")
            settings.update(payload)

    environ = os.environ if environ is None else environ
    for key in DEFAULT_SETTINGS:
        value = environ.get(ENV_PREFIX + key.upper())
        if value is not None:
            settings[key] = _coerce(key, value)

    return settings


def save_settings(path: Union[str, Path], updates: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``updates`` into the settings file and return the stored values."""
    settings_path = Path(path)
    current: Dict[str, Any] = {}
    if settings_path.exists():
        with settings_path.open("r", encoding="utf-8") as f:
            current = json.load(f)
    current.update(updates)
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    with settings_path.open("w", encoding="utf-8") as f:
        json.dump(current, f, ensure_ascii=True, indent=2)
    logger.info("Saved settings to %s", settings_path)
    return current


def configure_logging(level: Union[str, int] = "INFO") -> None:
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
