"""Tiled layers that turn a :class:`~maplayers.scene.MapState` into primitives."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from .compositor import render_tile, render_vector_tile
from .config import DEFAULT_CACHE_LIMIT, DEFAULT_MAX_REQUESTS, FILTER_ATTRIBUTE
from .filters import RangeFilter
from .primitives import Primitive
from .stylist import AGRI_GRADE_STYLIST, FeatureStylist
from .tile_decoder import RasterTileDecoder, TileDecoder, VectorTileDecoder
from .tile_index import TileGrid, resolve_tiles
from .tile_manager import TileManager
from .tile_source import TileSource
from .viewport import TileCoordinate

if TYPE_CHECKING:
    from .scene import MapState

_LOGGER = logging.getLogger(__name__)


class Layer(Protocol):
    layer_id: str

    def update(self, state: MapState) -> None:
        ...

    def render(self, state: MapState) -> list[Primitive]:
        ...


class TiledLayer:
    """Shared viewport -> tile request plumbing for tile backed layers."""

    def __init__(
        self,
        layer_id: str,
        source: TileSource,
        decoder: TileDecoder,
        *,
        grid: TileGrid | None = None,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        cache_limit: int = DEFAULT_CACHE_LIMIT,
    ) -> None:
        self.layer_id = layer_id
        self.grid = grid or TileGrid()
        self.tile_manager = TileManager(source, decoder, max_requests=max_requests, cache_limit=cache_limit)

    # ------------------------------------------------------------------
    def update(self, state: MapState) -> tuple[TileCoordinate, ...]:
        """Resolve the tiles for ``state.viewport`` and request them."""

        coords = resolve_tiles(state.viewport, self.grid)
        _LOGGER.debug("%s needs %d tiles at z=%s", self.layer_id, len(coords), coords[0].z if coords else None)
        self.tile_manager.request_tiles(coords)
        return coords

    # ------------------------------------------------------------------
    def render(self, state: MapState) -> list[Primitive]:  # pragma: no cover - interface definition only
        raise NotImplementedError

    # ------------------------------------------------------------------
    async def wait_idle(self) -> None:
        await self.tile_manager.wait_idle()

    # ------------------------------------------------------------------
    async def close(self) -> None:
        await self.tile_manager.shutdown()


class RasterTileLayer(TiledLayer):
    """Basemap made of bitmap tiles with an optional debug outline per tile."""

    def __init__(self, layer_id: str, source: TileSource, **options) -> None:
        super().__init__(layer_id, source, RasterTileDecoder(), **options)

    def render(self, state: MapState) -> list[Primitive]:
        primitives: list[Primitive] = []
        for record in self.tile_manager.visible_records():
            primitives.extend(render_tile(record, show_outline=state.show_outline, layer_id=self.layer_id))
        return primitives


class VectorTileLayer(TiledLayer):
    """Vector tile overlay styled by a :class:`FeatureStylist` and range filtered."""

    def __init__(
        self,
        layer_id: str,
        source: TileSource,
        *,
        stylist: FeatureStylist = AGRI_GRADE_STYLIST,
        filter_attribute: str | None = FILTER_ATTRIBUTE,
        decoder: TileDecoder | None = None,
        **options,
    ) -> None:
        super().__init__(layer_id, source, decoder or VectorTileDecoder(), **options)
        self.stylist = stylist
        self.filter_attribute = filter_attribute

    def render(self, state: MapState) -> list[Primitive]:
        predicate = None
        if self.filter_attribute is not None:
            predicate = RangeFilter(state.filter_range, self.filter_attribute)

        primitives: list[Primitive] = []
        for record in self.tile_manager.visible_records():
            primitives.extend(
                render_vector_tile(record, stylist=self.stylist, predicate=predicate, layer_id=self.layer_id)
            )
        return primitives


__all__ = ["Layer", "RasterTileLayer", "TiledLayer", "VectorTileLayer"]
