"""Tests for viewport to tile coordinate resolution."""

from __future__ import annotations

import pytest

from maplayers.tile_index import (
    TileGrid,
    fetch_zoom,
    resolve_tiles,
    tiles_for_bounds,
    visible_world_rect,
    zoom_offset_for,
)
from maplayers.viewport import TileBounds, TileCoordinate, create_viewport


def _oxford(zoom: float = 10.5, **options):
    return create_viewport(51.753, -1.245, zoom, width=1024, height=768, **options)


def test_fractional_zoom_resolves_to_floor_level() -> None:
    coords = resolve_tiles(_oxford(), TileGrid(tile_size=256, min_zoom=0, max_zoom=19))

    assert len(coords) == 9
    assert set(coords) == {TileCoordinate(x, y, 10) for x in (507, 508, 509) for y in (338, 339, 340)}


def test_center_tile_comes_first() -> None:
    coords = resolve_tiles(_oxford(), TileGrid())
    assert coords[0] == TileCoordinate(508, 339, 10)


def test_resolution_is_deterministic() -> None:
    grid = TileGrid()
    assert resolve_tiles(_oxford(), grid) == resolve_tiles(_oxford(), grid)


def test_zoom_past_max_reuses_deepest_level() -> None:
    grid = TileGrid(max_zoom=14)
    coords = resolve_tiles(_oxford(zoom=17.2), grid)
    assert coords
    assert {coord.z for coord in coords} == {14}
    # Magnified tiles cover more than the viewport, so only a few are needed.
    assert len(coords) <= 4


def test_zoom_below_min_is_clamped() -> None:
    grid = TileGrid(min_zoom=3)
    assert fetch_zoom(_oxford(zoom=1.0), grid) == 3


@pytest.mark.parametrize(("ratio", "offset"), [(1.0, -1), (2.0, 0), (1.5, 0)])
def test_device_pixel_ratio_offset(ratio: float, offset: int) -> None:
    assert zoom_offset_for(ratio) == offset


def test_standard_density_fetches_one_level_coarser() -> None:
    grid = TileGrid(zoom_offset=zoom_offset_for(1.0))
    coords = resolve_tiles(_oxford(), grid)
    assert {coord.z for coord in coords} == {9}


def test_whole_world_at_zoom_zero() -> None:
    coords = resolve_tiles(create_viewport(0.0, 0.0, 0.0, width=256, height=256), TileGrid())
    assert coords == (TileCoordinate(0, 0, 0),)


def test_columns_wrap_across_antimeridian() -> None:
    viewport = create_viewport(0.0, 179.9, 3.0, width=512, height=256)
    coords = resolve_tiles(viewport, TileGrid())
    columns = {coord.x for coord in coords}
    assert 0 in columns
    assert 7 in columns
    assert all(0 <= coord.x < 8 for coord in coords)


def test_rows_are_clipped_at_the_poles() -> None:
    viewport = create_viewport(85.0, 0.0, 2.0, width=1024, height=1024)
    coords = resolve_tiles(viewport, TileGrid())
    assert all(0 <= coord.y < 4 for coord in coords)


def test_bearing_widens_the_footprint() -> None:
    flat = resolve_tiles(_oxford(), TileGrid())
    rotated = resolve_tiles(_oxford(bearing=45.0), TileGrid())
    assert len(rotated) > len(flat)


def test_pitch_stretches_the_far_edge() -> None:
    flat_rect = visible_world_rect(_oxford(), 256)
    tilted_rect = visible_world_rect(_oxford(pitch=60.0), 256)
    assert tilted_rect[1] < flat_rect[1]
    assert tilted_rect[3] == pytest.approx(flat_rect[3])


def test_tiles_for_fixed_bounding_box() -> None:
    bounds = TileBounds(west=-1.5, south=51.6, east=-1.0, north=51.9)
    coords = tiles_for_bounds(bounds, 10)
    assert len(coords) == 9
    assert set(coords) == {TileCoordinate(x, y, 10) for x in (507, 508, 509) for y in (338, 339, 340)}


def test_grid_validation() -> None:
    with pytest.raises(ValueError):
        TileGrid(min_zoom=5, max_zoom=2)
    with pytest.raises(ValueError):
        TileGrid(tile_size=0)
