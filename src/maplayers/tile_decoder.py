"""Decode raw tile payloads into raster images or vector features."""

from __future__ import annotations

import gzip
import io
import zlib
from typing import Any, Protocol

import mapbox_vector_tile
from PIL import Image

from .errors import TileDecodeError
from .features import VectorFeature, VectorFeatureCollection
from .geometry import geometry_to_lonlat
from .viewport import TileCoordinate

_GZIP_MAGIC = b"\x1f\x8b"


class TileDecoder(Protocol):
    def decode(self, data: bytes, coord: TileCoordinate) -> Any:
        ...


class RasterTileDecoder:
    """Decode PNG/JPEG/WebP tiles into RGBA :class:`PIL.Image.Image` objects."""

    def decode(self, data: bytes, coord: TileCoordinate) -> Image.Image:
        try:
            with Image.open(io.BytesIO(data)) as image:
                return image.convert("RGBA")
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            raise TileDecodeError(f"Failed to decode raster tile {coord.z}/{coord.x}/{coord.y}") from exc


class VectorTileDecoder:
    """Decode Mapbox vector tiles into :class:`VectorFeature` tuples.

    Parameters
    ----------
    layers:
        Optional whitelist of source layer names.  ``None`` keeps every layer.
    """

    def __init__(self, layers: set[str] | None = None) -> None:
        self._layers = set(layers) if layers is not None else None

    def decode(self, data: bytes, coord: TileCoordinate) -> VectorFeatureCollection:
        if data.startswith(_GZIP_MAGIC):
            try:
                data = gzip.decompress(data)
            except (OSError, EOFError, zlib.error) as exc:
                raise TileDecodeError(f"Corrupt gzip payload for tile {coord.z}/{coord.x}/{coord.y}") from exc

        try:
            decoded = mapbox_vector_tile.decode(data, default_options={"y_coord_down": True})
        except Exception as exc:  # protobuf and geometry errors vary by backend
            raise TileDecodeError(f"Failed to decode tile {coord.z}/{coord.x}/{coord.y}") from exc

        features: list[VectorFeature] = []
        for layer_name, layer in decoded.items():
            if self._layers is not None and layer_name not in self._layers:
                continue
            extent = layer.get("extent", 4096)
            for raw in layer.get("features", []):
                geometry = raw.get("geometry")
                if not isinstance(geometry, dict):
                    continue
                features.append(
                    VectorFeature(
                        geometry=geometry_to_lonlat(geometry, extent, coord),
                        properties=raw.get("properties") or {},
                        layer=layer_name,
                        id=raw.get("id"),
                    )
                )
        return tuple(features)


__all__ = ["RasterTileDecoder", "TileDecoder", "VectorTileDecoder"]
