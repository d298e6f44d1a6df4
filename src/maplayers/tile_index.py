"""Translate a camera into the set of tiles it needs."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .config import DEFAULT_MAX_ZOOM, DEFAULT_MIN_ZOOM, DEFAULT_TILE_SIZE
from .viewport import TileBounds, TileCoordinate, ViewportState, lonlat_to_tile, screen_offset_to_world

# A steep pitch pushes the horizon towards infinity; the far edge of the view
# is stretched by at most this factor when estimating the visible area.
MAX_PITCH_STRETCH = 4.0


@dataclass(frozen=True)
class TileGrid:
    """Geometry of a tile pyramid as seen by a single layer."""

    tile_size: int = DEFAULT_TILE_SIZE
    min_zoom: int = DEFAULT_MIN_ZOOM
    max_zoom: int = DEFAULT_MAX_ZOOM
    zoom_offset: int = 0

    def __post_init__(self) -> None:
        if self.tile_size <= 0:
            raise ValueError(f"tile_size must be positive, got {self.tile_size}")
        if self.min_zoom > self.max_zoom:
            raise ValueError(f"min_zoom {self.min_zoom} exceeds max_zoom {self.max_zoom}")


def zoom_offset_for(device_pixel_ratio: float) -> int:
    """Fetch one level coarser on standard-density displays."""

    return -1 if device_pixel_ratio == 1 else 0


def fetch_zoom(viewport: ViewportState, grid: TileGrid) -> int:
    """Return the tile zoom level used for ``viewport``.

    Views zoomed past ``grid.max_zoom`` keep using the deepest level and the
    renderer magnifies those tiles instead of requesting finer ones.
    """

    z = math.floor(viewport.zoom) + grid.zoom_offset
    return min(grid.max_zoom, max(grid.min_zoom, z))


def visible_world_rect(viewport: ViewportState, tile_size: int) -> tuple[float, float, float, float]:
    """Return ``(min_x, min_y, max_x, max_y)`` of the view in world pixels."""

    center_x, center_y = viewport.center_world(tile_size)
    half_w = viewport.width / 2.0
    half_h = viewport.height / 2.0
    stretch = min(1.0 / max(math.cos(math.radians(viewport.pitch)), 1e-9), MAX_PITCH_STRETCH)
    far_h = half_h * stretch

    corners = ((-half_w, -far_h), (half_w, -far_h), (half_w, half_h), (-half_w, half_h))
    xs: list[float] = []
    ys: list[float] = []
    for dx, dy in corners:
        wx, wy = screen_offset_to_world(dx, dy, viewport.bearing)
        xs.append(center_x + wx)
        ys.append(center_y + wy)
    return min(xs), min(ys), max(xs), max(ys)


def _tiles_in_rect(
    min_x: float,
    min_y: float,
    max_x: float,
    max_y: float,
    z: int,
    center: tuple[float, float],
) -> tuple[TileCoordinate, ...]:
    """Collect tiles intersecting a rectangle given in tile units at ``z``."""

    tiles_across = 1 << z
    start_x = math.floor(min_x)
    end_x = math.ceil(max_x)
    start_y = max(0, math.floor(min_y))
    end_y = min(tiles_across, math.ceil(max_y))
    if end_x == start_x:
        end_x += 1
    if end_y == start_y and end_y < tiles_across:
        end_y += 1

    ranked: list[tuple[float, int, int, TileCoordinate]] = []
    for tile_y in range(start_y, end_y):
        for tile_x in range(start_x, end_x):
            dist_sq = (tile_x + 0.5 - center[0]) ** 2 + (tile_y + 0.5 - center[1]) ** 2
            coord = TileCoordinate(x=tile_x % tiles_across, y=tile_y, z=z)
            ranked.append((dist_sq, tile_y, tile_x, coord))

    ranked.sort(key=lambda item: item[:3])
    ordered: dict[TileCoordinate, None] = {}
    for *_, coord in ranked:
        ordered.setdefault(coord, None)
    return tuple(ordered)


def resolve_tiles(viewport: ViewportState, grid: TileGrid) -> tuple[TileCoordinate, ...]:
    """Return the tiles covering ``viewport``, nearest to the center first."""

    z = fetch_zoom(viewport, grid)
    # Size of one fetched tile in world pixels at the view zoom.
    scaled_tile_size = grid.tile_size * (2 ** (viewport.zoom - z))
    min_x, min_y, max_x, max_y = visible_world_rect(viewport, grid.tile_size)
    center_x, center_y = viewport.center_world(grid.tile_size)
    return _tiles_in_rect(
        min_x / scaled_tile_size,
        min_y / scaled_tile_size,
        max_x / scaled_tile_size,
        max_y / scaled_tile_size,
        z,
        (center_x / scaled_tile_size, center_y / scaled_tile_size),
    )


def tiles_for_bounds(bounds: TileBounds, z: int) -> tuple[TileCoordinate, ...]:
    """Return the tiles at ``z`` intersecting a fixed geographic box."""

    min_x, min_y = lonlat_to_tile(bounds.west, bounds.north, z)
    max_x, max_y = lonlat_to_tile(bounds.east, bounds.south, z)
    center = ((min_x + max_x) / 2.0, (min_y + max_y) / 2.0)
    return _tiles_in_rect(min_x, min_y, max_x, max_y, z, center)


__all__ = [
    "TileGrid",
    "fetch_zoom",
    "resolve_tiles",
    "tiles_for_bounds",
    "visible_world_rect",
    "zoom_offset_for",
]
