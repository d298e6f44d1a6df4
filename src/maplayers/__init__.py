"""Layered tile map rendering: raster basemap, styled vector tiles and H3 bins."""

from .compositor import render_tile, render_vector_tile
from .errors import MapLayersError, TileDecodeError, TileFetchError, TileLoadingError
from .features import VectorFeature
from .filters import FilterRange, RangeFilter, is_visible
from .hexagons import HexagonLayer, HexBin, load_hex_bins
from .layers import RasterTileLayer, VectorTileLayer
from .scene import MapScene, MapState, build_scene, update_state
from .stylist import AGRI_GRADE_STYLIST, FeatureStylist
from .tile_index import TileGrid, resolve_tiles, tiles_for_bounds, zoom_offset_for
from .tile_manager import TileManager, TileRecord, TileStatus
from .viewport import TileBounds, TileCoordinate, ViewportState, create_viewport, update_viewport

__version__ = "0.1.0"

__all__ = [
    "AGRI_GRADE_STYLIST",
    "FeatureStylist",
    "FilterRange",
    "HexBin",
    "HexagonLayer",
    "MapLayersError",
    "MapScene",
    "MapState",
    "RangeFilter",
    "RasterTileLayer",
    "TileBounds",
    "TileCoordinate",
    "TileDecodeError",
    "TileFetchError",
    "TileGrid",
    "TileLoadingError",
    "TileManager",
    "TileRecord",
    "TileStatus",
    "VectorFeature",
    "VectorTileLayer",
    "ViewportState",
    "build_scene",
    "create_viewport",
    "is_visible",
    "load_hex_bins",
    "render_tile",
    "render_vector_tile",
    "resolve_tiles",
    "tiles_for_bounds",
    "update_state",
    "update_viewport",
    "zoom_offset_for",
]
