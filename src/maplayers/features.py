"""Read-only representation of vector features resident in memory."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class VectorFeature:
    """A single geometry + attribute record from a vector tile.

    ``geometry`` is GeoJSON-like (``{"type": ..., "coordinates": ...}``) with
    coordinates in longitude/latitude.  ``properties`` is wrapped in a
    read-only mapping so stylists and filters cannot alter it.
    """

    geometry: Mapping[str, Any]
    properties: Mapping[str, Any] = field(default_factory=dict)
    layer: str = ""
    id: int | str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "geometry", MappingProxyType(dict(self.geometry)))
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @property
    def geometry_type(self) -> str | None:
        return self.geometry.get("type")


VectorFeatureCollection = tuple[VectorFeature, ...]


__all__ = ["VectorFeature", "VectorFeatureCollection"]
