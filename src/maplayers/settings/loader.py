"""Locate, read and validate the map settings file."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from jsonschema import ValidationError

from ..errors import SettingsLoadError, SettingsValidationError
from .schema import merge_with_defaults

_LOGGER = logging.getLogger(__name__)


def default_settings_path() -> Path:
    """Return the default settings.json location for the current platform."""

    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "maplayers" / "settings.json"
        return Path.home() / "AppData" / "Roaming" / "maplayers" / "settings.json"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "maplayers" / "settings.json"
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / "maplayers" / "settings.json"
    return Path.home() / ".config" / "maplayers" / "settings.json"


def load_settings(path: Path | str | None = None) -> dict[str, Any]:
    """Return validated settings, falling back to defaults when no file exists.

    An explicit ``path`` that does not exist is an error; the platform
    default location is optional.
    """

    explicit = path is not None
    settings_path = Path(path) if explicit else default_settings_path()

    payload: dict[str, Any] | None = None
    if settings_path.exists():
        try:
            payload = json.loads(settings_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise SettingsLoadError(f"Unable to read settings file '{settings_path}': {exc}") from exc
        if not isinstance(payload, dict):
            raise SettingsLoadError(f"Settings file '{settings_path}' must contain a JSON object")
        _LOGGER.debug("Loaded settings from %s", settings_path)
    elif explicit:
        raise SettingsLoadError(f"Settings file '{settings_path}' does not exist")

    try:
        return merge_with_defaults(payload)
    except ValidationError as exc:
        raise SettingsValidationError(f"Invalid settings in '{settings_path}': {exc.message}") from exc


__all__ = ["default_settings_path", "load_settings"]
