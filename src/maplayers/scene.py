"""Layer composition for a complete map frame."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

import aiohttp

from .config import FILTER_RANGE
from .filters import FilterRange
from .hexagons import HexagonLayer, HexBin
from .layers import Layer, RasterTileLayer, VectorTileLayer
from .primitives import Primitive
from .stylist import FeatureStylist
from .tile_index import TileGrid, zoom_offset_for
from .tile_source import HttpTileSource
from .viewport import ViewportState, create_viewport

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class MapState:
    """Everything the layers read while building a frame."""

    viewport: ViewportState
    filter_range: FilterRange = field(default_factory=lambda: FilterRange(*FILTER_RANGE))
    show_outline: bool = False


def update_state(state: MapState, **changes: Any) -> MapState:
    return replace(state, **changes)


class MapScene:
    """Ordered stack of layers sharing one :class:`MapState`.

    Only viewport changes reach the tile managers.  Filter and outline
    changes are applied the next time :meth:`frame` runs, against data that is
    already in memory.
    """

    def __init__(self, layers: Sequence[Layer], state: MapState) -> None:
        self._layers = list(layers)
        self._state = state
        self._synced_viewport: ViewportState | None = None

    # ------------------------------------------------------------------
    @property
    def state(self) -> MapState:
        return self._state

    # ------------------------------------------------------------------
    @property
    def layers(self) -> list[Layer]:
        return list(self._layers)

    # ------------------------------------------------------------------
    def set_state(self, state: MapState) -> None:
        """Adopt ``state``, requesting tiles only when the camera moved."""

        self._state = state
        if state.viewport != self._synced_viewport:
            self._synced_viewport = state.viewport
            for layer in self._layers:
                layer.update(state)

    # ------------------------------------------------------------------
    def refresh(self) -> None:
        """Request the tiles of the current viewport."""

        self._synced_viewport = None
        self.set_state(self._state)

    # ------------------------------------------------------------------
    def frame(self) -> list[Primitive]:
        primitives: list[Primitive] = []
        for layer in self._layers:
            primitives.extend(layer.render(self._state))
        return primitives

    # ------------------------------------------------------------------
    async def wait_idle(self) -> None:
        for layer in self._layers:
            waiter = getattr(layer, "wait_idle", None)
            if waiter is not None:
                await waiter()

    # ------------------------------------------------------------------
    async def close(self) -> None:
        for layer in self._layers:
            closer = getattr(layer, "close", None)
            if closer is not None:
                await closer()


def initial_state(settings: dict[str, Any], **overrides: Any) -> MapState:
    """Build the starting :class:`MapState` described by ``settings``."""

    view = dict(settings["initial_view"])
    view.update({key: value for key, value in overrides.items() if value is not None})
    latitude = view.pop("latitude")
    longitude = view.pop("longitude")
    zoom = view.pop("zoom")
    vector = settings["vector"]
    return MapState(
        viewport=create_viewport(latitude, longitude, zoom, **view),
        filter_range=FilterRange(*vector["filter_range"]),
        show_outline=bool(settings["basemap"]["show_outline"]),
    )


def stylist_from_settings(vector: dict[str, Any]) -> FeatureStylist:
    classes = {label: tuple(color) for label, color in vector["classes"].items()}
    return FeatureStylist.from_categories(vector["classify_attribute"], classes, tuple(vector["default_color"]))


def build_scene(
    settings: dict[str, Any],
    *,
    session: aiohttp.ClientSession | None = None,
    device_pixel_ratio: float = 1.0,
    hex_bins: Iterable[HexBin] = (),
    stylist: FeatureStylist | None = None,
    state: MapState | None = None,
) -> MapScene:
    """Assemble basemap, vector overlay and hexagon overlay from ``settings``."""

    basemap = settings["basemap"]
    vector = settings["vector"]
    hexagons = settings["hexagons"]
    state = state or initial_state(settings)

    layers: list[Layer] = [
        RasterTileLayer(
            "tiles",
            HttpTileSource(basemap["urls"], session=session),
            grid=TileGrid(
                tile_size=basemap["tile_size"],
                min_zoom=basemap["min_zoom"],
                max_zoom=basemap["max_zoom"],
                zoom_offset=zoom_offset_for(device_pixel_ratio),
            ),
            max_requests=basemap["max_requests"],
        )
    ]
    if vector.get("url"):
        max_zoom = vector["max_zoom"]
        layers.append(
            VectorTileLayer(
                "mvt",
                HttpTileSource(vector["url"], session=session),
                stylist=stylist or stylist_from_settings(vector),
                filter_attribute=vector["filter_attribute"],
                grid=TileGrid(
                    tile_size=vector["tile_size"],
                    min_zoom=vector["min_zoom"],
                    max_zoom=int(state.viewport.max_zoom) if max_zoom is None else max_zoom,
                ),
                max_requests=vector["max_requests"],
            )
        )
    layers.append(
        HexagonLayer(
            data=hex_bins,
            fill_color=tuple(hexagons["fill_color"]),
            extruded=hexagons["extruded"],
            elevation_scale=hexagons["elevation_scale"],
        )
    )
    _LOGGER.debug("Built scene with layers: %s", [layer.layer_id for layer in layers])
    return MapScene(layers, state)


__all__ = ["MapScene", "MapState", "build_scene", "initial_state", "stylist_from_settings", "update_state"]
