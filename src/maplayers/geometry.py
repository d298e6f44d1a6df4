"""Projection of decoded vector tile geometry from tile units to lon/lat."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Tuple

from .viewport import TileCoordinate, world_to_lonlat

LonLat = Tuple[float, float]

# mapbox-vector-tile reports single and multi geometries with GeoJSON names.
_MULTI_TYPES = {"MultiPoint": "Point", "MultiLineString": "LineString", "MultiPolygon": "Polygon"}


def _is_position(value: Any) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) >= 2
        and all(isinstance(part, (int, float)) and not isinstance(part, bool) for part in value[:2])
    )


def _project(value: Any, transform: Callable[[float, float], LonLat]) -> Any:
    if _is_position(value):
        return transform(float(value[0]), float(value[1]))
    if isinstance(value, (list, tuple)):
        return [_project(item, transform) for item in value]
    return value


def tile_units_to_lonlat(x: float, y: float, extent: int, coord: TileCoordinate) -> LonLat:
    """Project tile-relative coordinates (y pointing down) to longitude/latitude."""

    n = float(1 << coord.z)
    return world_to_lonlat(coord.x + x / extent, coord.y + y / extent, n)


def geometry_to_lonlat(geometry: dict, extent: int, coord: TileCoordinate) -> dict:
    """Return ``geometry`` with every position converted to lon/lat."""

    coordinates = _project(
        geometry.get("coordinates", []),
        lambda x, y: tile_units_to_lonlat(x, y, extent, coord),
    )
    return {"type": geometry.get("type"), "coordinates": coordinates}


def geometry_parts(geom_type: str | None, coordinates: Any) -> tuple[str | None, list[Any]]:
    """Split a geometry into its single-part type and non-empty parts.

    ``MultiPolygon`` coordinates come back as ``("Polygon", [rings, ...])``
    and a lone ``Polygon`` as ``("Polygon", [rings])``.  Point parts are
    ``(lon, lat)`` tuples; malformed positions are dropped.
    """

    if not isinstance(coordinates, (list, tuple)):
        return geom_type, []
    if geom_type in _MULTI_TYPES:
        geom_type, parts = _MULTI_TYPES[geom_type], list(coordinates)
    else:
        parts = [coordinates]

    if geom_type == "Point":
        return geom_type, [(float(part[0]), float(part[1])) for part in parts if _is_position(part)]
    return geom_type, [part for part in parts if part]


__all__ = ["LonLat", "geometry_parts", "geometry_to_lonlat", "tile_units_to_lonlat"]
