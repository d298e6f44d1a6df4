"""Static H3 aggregation overlay."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

import h3
import pandas as pd

from .config import HEXAGON_ELEVATION_SCALE, HEXAGON_FILL_COLOR, HEXAGON_ID_COLUMN, HEXAGON_VALUE_COLUMN
from .errors import HexDatasetError
from .primitives import Color, PolygonPrimitive

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class HexBin:
    hexagon_id: str
    value: float


def load_hex_bins(
    path: Path | str,
    *,
    id_column: str = HEXAGON_ID_COLUMN,
    value_column: str = HEXAGON_VALUE_COLUMN,
) -> list[HexBin]:
    """Read ``(cell id, weight)`` pairs from a CSV file."""

    try:
        frame = pd.read_csv(path, dtype={id_column: str})
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise HexDatasetError(f"Unable to read hexagon dataset '{path}': {exc}") from exc

    missing = [column for column in (id_column, value_column) if column not in frame.columns]
    if missing:
        raise HexDatasetError(f"Hexagon dataset '{path}' lacks columns: {', '.join(missing)}")

    values = pd.to_numeric(frame[value_column], errors="coerce")
    return [
        HexBin(hexagon_id=str(cell), value=float(value))
        for cell, value in zip(frame[id_column], values)
        if isinstance(cell, str) and cell
    ]


def cell_ring(hexagon_id: str) -> tuple[tuple[float, float], ...]:
    """Return the closed ``(lon, lat)`` boundary of an H3 cell."""

    boundary = [(lng, lat) for lat, lng in h3.cell_to_boundary(hexagon_id)]
    boundary.append(boundary[0])
    return tuple(boundary)


class HexagonLayer:
    """Render precomputed hexagonal bins as filled cells.

    Cells share a constant fill color.  Extrusion by ``value`` is available
    but off unless ``extruded=True``.
    """

    def __init__(
        self,
        layer_id: str = "h3-hexagon-layer",
        *,
        data: Iterable[HexBin] = (),
        fill_color: Color = HEXAGON_FILL_COLOR,
        extruded: bool = False,
        elevation_scale: float = HEXAGON_ELEVATION_SCALE,
        get_elevation: Callable[[HexBin], float] | None = None,
    ) -> None:
        self.layer_id = layer_id
        self.data = list(data)
        self.fill_color = tuple(fill_color)
        self.extruded = extruded
        self.elevation_scale = elevation_scale
        self._get_elevation = get_elevation or (lambda hex_bin: hex_bin.value)

    # ------------------------------------------------------------------
    def render_bins(self, bins: Iterable[HexBin]) -> list[PolygonPrimitive]:
        primitives: list[PolygonPrimitive] = []
        for hex_bin in bins:
            if not h3.is_valid_cell(hex_bin.hexagon_id):
                _LOGGER.warning("Skipping invalid H3 cell %r", hex_bin.hexagon_id)
                continue
            elevation = self._get_elevation(hex_bin) * self.elevation_scale if self.extruded else 0.0
            primitives.append(
                PolygonPrimitive(
                    id=f"{self.layer_id}-{hex_bin.hexagon_id}",
                    rings=(cell_ring(hex_bin.hexagon_id),),
                    fill_color=self.fill_color,
                    elevation=elevation,
                )
            )
        return primitives

    # ------------------------------------------------------------------
    def update(self, state: object) -> None:
        """Static data: a viewport change requires no work."""

    # ------------------------------------------------------------------
    def render(self, state: object) -> list[PolygonPrimitive]:
        return self.render_bins(self.data)


__all__ = ["HexBin", "HexagonLayer", "cell_ring", "load_hex_bins"]
