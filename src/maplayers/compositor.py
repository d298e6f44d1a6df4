"""Turn resolved tile records into ordered lists of drawable primitives."""

from __future__ import annotations

from .config import OUTLINE_COLOR, OUTLINE_MIN_WIDTH_PIXELS, VECTOR_LINE_COLOR, VECTOR_LINE_WIDTH
from .features import VectorFeature
from .filters import FeaturePredicate
from .geometry import LonLat, geometry_parts
from .primitives import BitmapPrimitive, Color, PathPrimitive, PointPrimitive, PolygonPrimitive, Primitive
from .stylist import FeatureStylist
from .tile_manager import TileRecord, TileStatus
from .viewport import TileBounds


def tile_id(layer_id: str, record: TileRecord) -> str:
    coord = record.coord
    return f"{layer_id}-{coord.z}-{coord.x}-{coord.y}"


def outline_path(bbox: TileBounds) -> tuple[LonLat, ...]:
    """Trace the tile corners ``NW -> SW -> SE -> NE -> NW``."""

    west, south, east, north = bbox
    return (
        (west, north),
        (west, south),
        (east, south),
        (east, north),
        (west, north),
    )


def render_tile(record: TileRecord, *, show_outline: bool = False, layer_id: str = "tiles") -> list[Primitive]:
    """Compose the raster sub-layers of a single tile.

    The bitmap always comes first so the optional debug outline is drawn on
    top of it.  Tiles that are still pending or failed to load produce no
    primitives.
    """

    if record.status is not TileStatus.LOADED:
        return []

    base_id = tile_id(layer_id, record)
    primitives: list[Primitive] = [BitmapPrimitive(id=base_id, image=record.payload, bounds=record.bbox)]
    if show_outline:
        primitives.append(
            PathPrimitive(
                id=f"{base_id}-border",
                path=outline_path(record.bbox),
                color=OUTLINE_COLOR,
                width_min_pixels=OUTLINE_MIN_WIDTH_PIXELS,
            )
        )
    return primitives


def _ring(points: object) -> tuple[LonLat, ...]:
    return tuple((float(x), float(y)) for x, y, *_ in points)  # type: ignore[union-attr]


def render_feature(
    feature: VectorFeature,
    feature_id: str,
    *,
    fill_color: Color,
    line_color: Color = VECTOR_LINE_COLOR,
    line_width: float = VECTOR_LINE_WIDTH,
) -> list[Primitive]:
    """Convert one vector feature into polygons, paths or points."""

    geom_type, parts = geometry_parts(feature.geometry_type, feature.geometry.get("coordinates"))
    primitives: list[Primitive] = []
    for index, part in enumerate(parts):
        part_id = f"{feature_id}-{index}"
        if geom_type == "Polygon":
            primitives.append(
                PolygonPrimitive(
                    id=part_id,
                    rings=tuple(_ring(ring) for ring in part if ring),
                    fill_color=fill_color,
                    line_color=line_color,
                    line_width=line_width,
                )
            )
        elif geom_type == "LineString":
            primitives.append(PathPrimitive(id=part_id, path=_ring(part), color=line_color, width_min_pixels=line_width))
        elif geom_type == "Point":
            primitives.append(PointPrimitive(id=part_id, position=part, color=fill_color))
    return primitives


def render_vector_tile(
    record: TileRecord,
    *,
    stylist: FeatureStylist,
    predicate: FeaturePredicate | None = None,
    layer_id: str = "mvt",
) -> list[Primitive]:
    """Style and filter the resident features of a loaded vector tile."""

    if record.status is not TileStatus.LOADED:
        return []

    base_id = tile_id(layer_id, record)
    primitives: list[Primitive] = []
    for index, feature in enumerate(record.payload or ()):
        if predicate is not None and not predicate(feature):
            continue
        primitives.extend(
            render_feature(feature, f"{base_id}-{index}", fill_color=stylist.color_for(feature))
        )
    return primitives


__all__ = ["outline_path", "render_feature", "render_tile", "render_vector_tile", "tile_id"]
