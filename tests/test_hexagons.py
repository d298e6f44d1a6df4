"""Tests for the static H3 hexagon overlay."""

from __future__ import annotations

import logging

import h3
import pytest

from maplayers.errors import HexDatasetError
from maplayers.hexagons import HexagonLayer, HexBin, cell_ring, load_hex_bins

CELL = h3.latlng_to_cell(51.753, -1.245, 7)
NEIGHBOUR = next(cell for cell in h3.grid_disk(CELL, 1) if cell != CELL)


def test_cell_ring_is_closed_lonlat_boundary() -> None:
    ring = cell_ring(CELL)
    assert len(ring) == 7
    assert ring[0] == ring[-1]
    lon, lat = ring[0]
    assert -2.0 < lon < 0.0
    assert 51.0 < lat < 52.5


def test_render_uses_constant_fill_color() -> None:
    layer = HexagonLayer(data=[HexBin(CELL, 3.0), HexBin(NEIGHBOUR, 8.0)], fill_color=(255, 250, 0))
    primitives = layer.render(None)

    assert [primitive.id for primitive in primitives] == [
        f"h3-hexagon-layer-{CELL}",
        f"h3-hexagon-layer-{NEIGHBOUR}",
    ]
    assert {primitive.fill_color for primitive in primitives} == {(255, 250, 0)}
    assert all(primitive.elevation == 0.0 for primitive in primitives)


def test_extrusion_scales_value() -> None:
    layer = HexagonLayer(data=[HexBin(CELL, 3.0)], extruded=True, elevation_scale=20)
    (primitive,) = layer.render(None)
    assert primitive.elevation == pytest.approx(60.0)


def test_custom_elevation_accessor() -> None:
    layer = HexagonLayer(data=[HexBin(CELL, 3.0)], extruded=True, elevation_scale=2, get_elevation=lambda b: 10.0)
    (primitive,) = layer.render(None)
    assert primitive.elevation == pytest.approx(20.0)


def test_invalid_cells_are_skipped(caplog) -> None:
    layer = HexagonLayer(data=[HexBin("not-a-cell", 1.0), HexBin(CELL, 1.0)])
    with caplog.at_level(logging.WARNING, logger="maplayers.hexagons"):
        primitives = layer.render(None)
    assert len(primitives) == 1
    assert "not-a-cell" in caplog.text


def test_update_is_a_no_op() -> None:
    layer = HexagonLayer(data=[HexBin(CELL, 1.0)])
    layer.update(None)
    assert len(layer.render(None)) == 1


class TestLoadHexBins:
    def test_reads_configured_columns(self, tmp_path):
        path = tmp_path / "bins.csv"
        path.write_text(f"h3_polyfill,index\n{CELL},4\n{NEIGHBOUR},\n", encoding="utf-8")

        bins = load_hex_bins(path)

        assert [hex_bin.hexagon_id for hex_bin in bins] == [CELL, NEIGHBOUR]
        assert bins[0].value == 4.0

    def test_custom_column_names(self, tmp_path):
        path = tmp_path / "bins.csv"
        path.write_text(f"cell,weight\n{CELL},2.5\n", encoding="utf-8")
        assert load_hex_bins(path, id_column="cell", value_column="weight") == [HexBin(CELL, 2.5)]

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "bins.csv"
        path.write_text("cell,weight\nabc,1\n", encoding="utf-8")
        with pytest.raises(HexDatasetError, match="h3_polyfill"):
            load_hex_bins(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(HexDatasetError):
            load_hex_bins(tmp_path / "absent.csv")

    def test_numeric_looking_ids_stay_text(self, tmp_path):
        path = tmp_path / "bins.csv"
        path.write_text("h3_polyfill,index\n0123,1\n456,2\n", encoding="utf-8")
        assert [hex_bin.hexagon_id for hex_bin in load_hex_bins(path)] == ["0123", "456"]
