from __future__ import annotations

import pytest

from maplayers.geometry import geometry_parts, geometry_to_lonlat, tile_units_to_lonlat
from maplayers.viewport import TileCoordinate


def test_tile_corner_projection() -> None:
    coord = TileCoordinate(1, 1, 1)
    assert tile_units_to_lonlat(0, 0, 4096, coord) == pytest.approx((0.0, 0.0), abs=1e-9)
    lon, lat = tile_units_to_lonlat(4096, 4096, 4096, coord)
    assert lon == pytest.approx(180.0)
    assert lat == pytest.approx(-85.0511287798)


def test_geometry_to_lonlat_keeps_nesting() -> None:
    geometry = {"type": "Polygon", "coordinates": [[[0, 0], [4096, 0], [4096, 4096], [0, 0]]]}
    converted = geometry_to_lonlat(geometry, 4096, TileCoordinate(0, 0, 0))
    assert converted["type"] == "Polygon"
    ring = converted["coordinates"][0]
    assert len(ring) == 4
    assert ring[1][0] == pytest.approx(180.0)


def test_boolean_pairs_are_not_positions() -> None:
    converted = geometry_to_lonlat({"type": "Point", "coordinates": [True, 2]}, 4096, TileCoordinate(0, 0, 0))
    assert converted["coordinates"] == [True, 2]


class TestGeometryParts:
    ring = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 0.0)]

    def test_single_polygon(self):
        assert geometry_parts("Polygon", [self.ring]) == ("Polygon", [[self.ring]])

    def test_multi_polygon_drops_empty_parts(self):
        assert geometry_parts("MultiPolygon", [[self.ring], []]) == ("Polygon", [[self.ring]])

    def test_multi_line(self):
        assert geometry_parts("MultiLineString", [self.ring, []]) == ("LineString", [self.ring])

    def test_points(self):
        assert geometry_parts("Point", [5, 6]) == ("Point", [(5.0, 6.0)])
        assert geometry_parts("MultiPoint", [(1.0, 2.0, 3.0), (4.0,)]) == ("Point", [(1.0, 2.0)])

    def test_missing_coordinates(self):
        assert geometry_parts("Polygon", None) == ("Polygon", [])
