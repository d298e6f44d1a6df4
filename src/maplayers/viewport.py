"""Camera state and Web-Mercator helpers shared by the tile pipeline.

The viewport is an immutable value.  Every navigation gesture (pan, zoom,
rotation, tilt, resize) produces a fresh :class:`ViewportState` through one of
the update helpers below, which also re-apply the zoom, pitch and bounds
constraints.  Query code such as :func:`maplayers.tile_index.resolve_tiles`
therefore never has to worry about a camera that changes underneath it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Any, NamedTuple

from .config import (
    DEFAULT_TILE_SIZE,
    MERCATOR_LAT_BOUND,
    VIEW_HEIGHT,
    VIEW_MAX_PITCH,
    VIEW_MAX_ZOOM,
    VIEW_WIDTH,
)


class TileCoordinate(NamedTuple):
    """Address of a single tile in the XYZ quadtree."""

    x: int
    y: int
    z: int


class TileBounds(NamedTuple):
    """Geographic bounding box expressed in degrees."""

    west: float
    south: float
    east: float
    north: float


@dataclass(frozen=True)
class ViewportState:
    """Describe the camera used for the current frame."""

    latitude: float
    longitude: float
    zoom: float
    bearing: float = 0.0
    pitch: float = 0.0
    width: int = VIEW_WIDTH
    height: int = VIEW_HEIGHT
    min_zoom: float = 0.0
    max_zoom: float = VIEW_MAX_ZOOM
    max_pitch: float = VIEW_MAX_PITCH
    max_bounds: TileBounds | None = None

    def __post_init__(self) -> None:
        if self.min_zoom > self.max_zoom:
            raise ValueError(f"min_zoom {self.min_zoom} exceeds max_zoom {self.max_zoom}")
        if not self.min_zoom <= self.zoom <= self.max_zoom:
            raise ValueError(
                f"zoom {self.zoom} outside [{self.min_zoom}, {self.max_zoom}]"
            )
        if not 0.0 <= self.pitch <= self.max_pitch:
            raise ValueError(f"pitch {self.pitch} outside [0, {self.max_pitch}]")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"viewport size must be positive, got {self.width}x{self.height}")

    # ------------------------------------------------------------------
    def world_size(self, tile_size: int = DEFAULT_TILE_SIZE) -> float:
        """Return the width of the Mercator world in pixels at the current zoom."""

        return tile_size * (2 ** self.zoom)

    # ------------------------------------------------------------------
    def center_world(self, tile_size: int = DEFAULT_TILE_SIZE) -> tuple[float, float]:
        """Return the camera center in world pixels."""

        return lonlat_to_world(self.longitude, self.latitude, self.world_size(tile_size))


# ---------------------------------------------------------------------------
# Projection helpers
# ---------------------------------------------------------------------------

def clamp_latitude(lat: float) -> float:
    return max(min(float(lat), MERCATOR_LAT_BOUND), -MERCATOR_LAT_BOUND)


def wrap_longitude(lon: float) -> float:
    """Wrap ``lon`` into ``[-180, 180)``."""

    return ((float(lon) + 180.0) % 360.0) - 180.0


def lonlat_to_world(lon: float, lat: float, world_size: float) -> tuple[float, float]:
    """Convert geographic coordinates to Mercator world coordinates."""

    lat_value = clamp_latitude(lat)
    x = (float(lon) + 180.0) / 360.0 * world_size
    sin_lat = math.sin(math.radians(lat_value))
    y = (0.5 - math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi)) * world_size
    return x, y


def world_to_lonlat(x: float, y: float, world_size: float) -> tuple[float, float]:
    """Inverse of :func:`lonlat_to_world`."""

    lon = x / world_size * 360.0 - 180.0
    mercator_y = math.pi * (1.0 - 2.0 * y / world_size)
    lat = math.degrees(math.atan(math.sinh(mercator_y)))
    return lon, lat


def lonlat_to_tile(lon: float, lat: float, z: int) -> tuple[float, float]:
    """Return fractional tile indices of ``lon``/``lat`` at zoom ``z``."""

    return lonlat_to_world(lon, lat, float(1 << z))


def tile_bounds(coord: TileCoordinate) -> TileBounds:
    """Return the geographic extent covered by ``coord``."""

    n = float(1 << coord.z)
    west, north = world_to_lonlat(coord.x, coord.y, n)
    east, south = world_to_lonlat(coord.x + 1, coord.y + 1, n)
    return TileBounds(west=west, south=south, east=east, north=north)


def screen_offset_to_world(dx: float, dy: float, bearing: float) -> tuple[float, float]:
    """Rotate a screen-space offset into world space for the given bearing."""

    theta = math.radians(bearing)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    return dx * cos_t - dy * sin_t, dx * sin_t + dy * cos_t


# ---------------------------------------------------------------------------
# State transitions
# ---------------------------------------------------------------------------

def _normalise(values: dict[str, Any]) -> dict[str, Any]:
    """Apply the camera constraints to a raw field mapping."""

    min_zoom = float(values["min_zoom"])
    max_zoom = float(values["max_zoom"])
    values["zoom"] = max(min_zoom, min(max_zoom, float(values["zoom"])))
    values["pitch"] = max(0.0, min(float(values["max_pitch"]), float(values["pitch"])))

    bearing = float(values["bearing"]) % 360.0
    values["bearing"] = bearing - 360.0 if bearing > 180.0 else bearing

    latitude = clamp_latitude(values["latitude"])
    longitude = wrap_longitude(values["longitude"])
    bounds = values.get("max_bounds")
    if bounds is not None:
        bounds = TileBounds(*bounds)
        values["max_bounds"] = bounds
        latitude = max(bounds.south, min(bounds.north, latitude))
        longitude = max(bounds.west, min(bounds.east, longitude))
    values["latitude"] = latitude
    values["longitude"] = longitude
    return values


def create_viewport(latitude: float, longitude: float, zoom: float, **options: Any) -> ViewportState:
    """Build a viewport, clamping ``zoom``/``pitch`` instead of rejecting them."""

    values = {field.name: field.default for field in fields(ViewportState)}
    values.update(latitude=latitude, longitude=longitude, zoom=zoom, **options)
    return ViewportState(**_normalise(values))


def update_viewport(state: ViewportState, **changes: Any) -> ViewportState:
    """Return a copy of ``state`` with ``changes`` applied and constraints enforced."""

    values = {field.name: getattr(state, field.name) for field in fields(state)}
    unknown = set(changes) - set(values)
    if unknown:
        raise TypeError(f"Unknown viewport fields: {sorted(unknown)}")
    values.update(changes)
    return ViewportState(**_normalise(values))


def pan_by(
    state: ViewportState,
    dx: float,
    dy: float,
    *,
    tile_size: int = DEFAULT_TILE_SIZE,
) -> ViewportState:
    """Translate drag gestures from screen space to world space."""

    world_size = state.world_size(tile_size)
    center_x, center_y = state.center_world(tile_size)
    world_dx, world_dy = screen_offset_to_world(dx, dy, state.bearing)
    lon, lat = world_to_lonlat(center_x - world_dx, center_y - world_dy, world_size)
    return update_viewport(state, longitude=lon, latitude=lat)


def zoom_by(
    state: ViewportState,
    delta: float,
    *,
    anchor: tuple[float, float] | None = None,
    tile_size: int = DEFAULT_TILE_SIZE,
) -> ViewportState:
    """Zoom by ``delta`` levels, keeping the screen point ``anchor`` fixed."""

    new_zoom = max(state.min_zoom, min(state.max_zoom, state.zoom + delta))
    if new_zoom == state.zoom:
        return state
    if anchor is None:
        return update_viewport(state, zoom=new_zoom)

    world_size = state.world_size(tile_size)
    center_x, center_y = state.center_world(tile_size)
    offset_x, offset_y = screen_offset_to_world(
        anchor[0] - state.width / 2.0, anchor[1] - state.height / 2.0, state.bearing
    )
    anchor_x = (center_x + offset_x) / world_size
    anchor_y = (center_y + offset_y) / world_size

    new_world_size = tile_size * (2 ** new_zoom)
    new_center_x = anchor_x * new_world_size - offset_x
    new_center_y = anchor_y * new_world_size - offset_y
    lon, lat = world_to_lonlat(new_center_x, new_center_y, new_world_size)
    return update_viewport(state, zoom=new_zoom, longitude=lon, latitude=lat)


def rotate_to(state: ViewportState, bearing: float) -> ViewportState:
    return update_viewport(state, bearing=bearing)


def tilt_to(state: ViewportState, pitch: float) -> ViewportState:
    return update_viewport(state, pitch=pitch)


def resize(state: ViewportState, width: int, height: int) -> ViewportState:
    return update_viewport(state, width=width, height=height)


def reset_viewport(state: ViewportState, initial: ViewportState) -> ViewportState:
    """Return ``initial`` sized to the current drawing surface."""

    return update_viewport(initial, width=state.width, height=state.height)


__all__ = [
    "TileBounds",
    "TileCoordinate",
    "ViewportState",
    "clamp_latitude",
    "create_viewport",
    "lonlat_to_tile",
    "lonlat_to_world",
    "pan_by",
    "reset_viewport",
    "resize",
    "rotate_to",
    "screen_offset_to_world",
    "tile_bounds",
    "tilt_to",
    "update_viewport",
    "world_to_lonlat",
    "wrap_longitude",
    "zoom_by",
]
