"""Drawable primitives emitted by the layers for a single frame.

All positions are ``(longitude, latitude)`` pairs; projection to pixels is
left to the rasterization backend (see :mod:`maplayers.painter`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple, Union

from .geometry import LonLat
from .viewport import TileBounds

Color = Tuple[int, ...]


@dataclass(frozen=True)
class BitmapPrimitive:
    """An image stretched over a geographic bounding box."""

    id: str
    image: Any
    bounds: TileBounds


@dataclass(frozen=True)
class PathPrimitive:
    """A polyline drawn with a zoom independent stroke width."""

    id: str
    path: tuple[LonLat, ...]
    color: Color
    width_min_pixels: float = 1.0


@dataclass(frozen=True)
class PolygonPrimitive:
    """A filled polygon; the first ring is the exterior, the rest are holes."""

    id: str
    rings: tuple[tuple[LonLat, ...], ...]
    fill_color: Color
    line_color: Color | None = None
    line_width: float = 1.0
    elevation: float = 0.0


@dataclass(frozen=True)
class PointPrimitive:
    id: str
    position: LonLat
    color: Color
    radius_pixels: float = 3.0


Primitive = Union[BitmapPrimitive, PathPrimitive, PolygonPrimitive, PointPrimitive]


__all__ = [
    "BitmapPrimitive",
    "Color",
    "PathPrimitive",
    "PointPrimitive",
    "PolygonPrimitive",
    "Primitive",
]
