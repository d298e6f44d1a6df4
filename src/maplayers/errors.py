"""Custom exception hierarchy for maplayers."""

from __future__ import annotations


class MapLayersError(Exception):
    """Base class for all custom errors raised by maplayers."""


# --- Tile pipeline ---

class TileLoadingError(MapLayersError):
    """Base exception for recoverable tile loading problems."""


class TileFetchError(TileLoadingError):
    """Raised when the tile source cannot deliver the tile payload."""

    def __init__(self, message: str, *, status_code: int | None = None, url: str = "") -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class TileDecodeError(TileLoadingError):
    """Raised when a tile payload cannot be decoded."""


# --- Settings ---

class SettingsError(MapLayersError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""


# --- Rendering ---

class ViewError(MapLayersError):
    """Raised when camera or tile grid parameters contradict each other."""


class RenderError(MapLayersError):
    """Raised when a composed frame cannot be written out."""


# --- Static datasets ---

class HexDatasetError(MapLayersError):
    """Raised when the hexagon aggregation dataset cannot be read."""


__all__ = [
    "HexDatasetError",
    "MapLayersError",
    "RenderError",
    "SettingsError",
    "SettingsLoadError",
    "SettingsValidationError",
    "TileDecodeError",
    "TileFetchError",
    "TileLoadingError",
    "ViewError",
]
