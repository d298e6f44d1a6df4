"""Schema helpers for the map settings file."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator, ValidationError

from ..config import (
    CLASSIFY_ATTRIBUTE,
    DEFAULT_MAX_REQUESTS,
    DEFAULT_MAX_ZOOM,
    DEFAULT_MIN_ZOOM,
    DEFAULT_TILE_SIZE,
    FILTER_ATTRIBUTE,
    FILTER_RANGE,
    GROUNDMOUNT_PV_TILE_URL,
    HEXAGON_ELEVATION_SCALE,
    HEXAGON_FILL_COLOR,
    HEXAGON_ID_COLUMN,
    HEXAGON_VALUE_COLUMN,
    INITIAL_LATITUDE,
    INITIAL_LONGITUDE,
    INITIAL_ZOOM,
    OSM_TILE_URLS,
    VECTOR_TILE_SIZE,
    VIEW_HEIGHT,
    VIEW_MAX_PITCH,
    VIEW_MAX_ZOOM,
    VIEW_WIDTH,
)
from ..stylist import AGRI_GRADE_COLORS, AGRI_GRADE_DEFAULT

_COLOR = {
    "type": "array",
    "items": {"type": "integer", "minimum": 0, "maximum": 255},
    "minItems": 3,
    "maxItems": 4,
}
_ZOOM = {"type": "integer", "minimum": 0, "maximum": 30}

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "maplayers/settings.schema.json",
    "type": "object",
    "required": ["schema", "initial_view", "basemap", "vector", "hexagons"],
    "properties": {
        "schema": {"const": "maplayers/settings@1"},
        "initial_view": {
            "type": "object",
            "required": ["latitude", "longitude", "zoom"],
            "properties": {
                "latitude": {"type": "number", "minimum": -90, "maximum": 90},
                "longitude": {"type": "number", "minimum": -180, "maximum": 180},
                "zoom": {"type": "number", "minimum": 0},
                "bearing": {"type": "number"},
                "pitch": {"type": "number", "minimum": 0},
                "min_zoom": {"type": "number", "minimum": 0},
                "max_zoom": {"type": "number", "minimum": 0},
                "max_pitch": {"type": "number", "minimum": 0, "maximum": 90},
                "width": {"type": "integer", "minimum": 1},
                "height": {"type": "integer", "minimum": 1},
            },
            "additionalProperties": False,
        },
        "basemap": {
            "type": "object",
            "properties": {
                "urls": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                "tile_size": {"type": "integer", "minimum": 1},
                "min_zoom": _ZOOM,
                "max_zoom": _ZOOM,
                "max_requests": {"type": "integer", "minimum": 1},
                "show_outline": {"type": "boolean"},
            },
            "additionalProperties": True,
        },
        "vector": {
            "type": "object",
            "properties": {
                "url": {"type": ["string", "null"]},
                "tile_size": {"type": "integer", "minimum": 1},
                "min_zoom": _ZOOM,
                "max_zoom": {"oneOf": [_ZOOM, {"type": "null"}]},
                "max_requests": {"type": "integer", "minimum": 1},
                "classify_attribute": {"type": "string"},
                "classes": {"type": "object", "additionalProperties": _COLOR},
                "default_color": _COLOR,
                "filter_attribute": {"type": ["string", "null"]},
                "filter_range": {
                    "type": "array",
                    "items": {"type": "number"},
                    "minItems": 2,
                    "maxItems": 2,
                },
            },
            "additionalProperties": True,
        },
        "hexagons": {
            "type": "object",
            "properties": {
                "dataset": {"type": ["string", "null"]},
                "id_column": {"type": "string"},
                "value_column": {"type": "string"},
                "fill_color": _COLOR,
                "extruded": {"type": "boolean"},
                "elevation_scale": {"type": "number"},
            },
            "additionalProperties": True,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "maplayers/settings@1",
    "initial_view": {
        "latitude": INITIAL_LATITUDE,
        "longitude": INITIAL_LONGITUDE,
        "zoom": INITIAL_ZOOM,
        "bearing": 0.0,
        "pitch": 0.0,
        "max_zoom": VIEW_MAX_ZOOM,
        "max_pitch": VIEW_MAX_PITCH,
        "width": VIEW_WIDTH,
        "height": VIEW_HEIGHT,
    },
    "basemap": {
        "urls": list(OSM_TILE_URLS),
        "tile_size": DEFAULT_TILE_SIZE,
        "min_zoom": DEFAULT_MIN_ZOOM,
        "max_zoom": DEFAULT_MAX_ZOOM,
        "max_requests": DEFAULT_MAX_REQUESTS,
        "show_outline": False,
    },
    "vector": {
        "url": GROUNDMOUNT_PV_TILE_URL,
        "tile_size": VECTOR_TILE_SIZE,
        "min_zoom": DEFAULT_MIN_ZOOM,
        "max_zoom": None,
        "max_requests": DEFAULT_MAX_REQUESTS,
        "classify_attribute": CLASSIFY_ATTRIBUTE,
        "classes": {label: list(color) for label, color in AGRI_GRADE_COLORS.items()},
        "default_color": list(AGRI_GRADE_DEFAULT),
        "filter_attribute": FILTER_ATTRIBUTE,
        "filter_range": list(FILTER_RANGE),
    },
    "hexagons": {
        "dataset": None,
        "id_column": HEXAGON_ID_COLUMN,
        "value_column": HEXAGON_VALUE_COLUMN,
        "fill_color": list(HEXAGON_FILL_COLOR),
        "extruded": False,
        "elevation_scale": HEXAGON_ELEVATION_SCALE,
    },
}

_SECTIONS = ("initial_view", "basemap", "vector", "hexagons")

_validator = Draft202012Validator(SETTINGS_SCHEMA)


def _check_zoom_ranges(data: dict[str, Any]) -> None:
    """Reject sections whose ``min_zoom`` exceeds their ``max_zoom``.

    A vector ``max_zoom`` of ``null`` follows the camera limit.
    """

    view_max = (data.get("initial_view") or {}).get("max_zoom")
    for section in ("initial_view", "basemap", "vector"):
        values = data.get(section) or {}
        low = values.get("min_zoom")
        high = values.get("max_zoom")
        if section == "vector" and high is None and view_max is not None:
            high = int(view_max)
        if low is not None and high is not None and low > high:
            raise ValidationError(f"{section}.min_zoom {low} exceeds {section}.max_zoom {high}")


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result.

    Sections are merged key by key, except ``vector.classes`` which replaces
    the default classification wholesale so a custom palette does not
    inherit unrelated categories.
    """

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key in _SECTIONS and isinstance(value, dict):
                target = merged.setdefault(key, {})
                for sub_key, sub_value in value.items():
                    target[sub_key] = deepcopy(sub_value)
                continue
            merged[key] = deepcopy(value)
    _validator.validate(merged)
    _check_zoom_ranges(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)
    _check_zoom_ranges(data)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
