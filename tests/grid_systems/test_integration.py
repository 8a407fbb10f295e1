"""End-to-end properties of the BNG hexagon index."""

import random

import pytest
from shapely import union_all
from shapely.geometry import Point, box

from bnghex.grid_systems import HexCell, HexGrid, dimensions
from bnghex.grid_systems.identifier import decode
from bnghex.grid_systems.lattice import address_to_center, in_working_extent, point_to_address


@pytest.fixture
def random_points():
    rng = random.Random(27700)
    return [(rng.uniform(0, 750000), rng.uniform(0, 1350000)) for _ in range(200)]


class TestIndexProperties:
    """Properties that hold for every point and zoom."""

    @pytest.mark.parametrize("zoom", [4, 9, 12, 15])
    def test_address_idempotent(self, zoom, random_points):
        for point in random_points:
            center = address_to_center(*point_to_address(point, zoom), zoom)
            if not in_working_extent(center.x, center.y):
                continue
            again = address_to_center(*point_to_address(center, zoom), zoom)
            assert again.equals(center)

    @pytest.mark.parametrize("zoom", [2, 6, 12])
    def test_identifier_round_trip(self, zoom, random_points):
        """Test round trips, including edge cells centered outside the extent."""
        for point in random_points:
            cell = HexCell.from_bng(point, zoom)
            decoded = decode(cell.id)

            assert decoded.zoom == zoom
            assert (decoded.easting, decoded.northing) == (cell.easting, cell.northing)
            assert HexCell.from_hex_id(cell.id) == cell

    @pytest.mark.parametrize("zoom", [8, 12, 14])
    def test_polygon_contains_point(self, zoom, random_points):
        """Test that a point lies in the hexagon of its own cell."""
        for point in random_points:
            polygon = HexCell.from_bng(point, zoom).to_polygon()
            assert polygon.buffer(1e-6).contains(Point(point))

    def test_polygon_matches_dimensions(self):
        cell = HexCell.from_bng((383640.0, 398260.0), 12)
        assert cell.to_polygon().area == pytest.approx(dimensions.for_zoom(12).area)


class TestGridAgreesWithCells:
    """A grid holds exactly the cells single lookups produce."""

    def test_lookup_agrees(self):
        grid = HexGrid.from_bounds('manchester', 8)
        for x in range(376000, 400000, 3000):
            for y in range(386000, 410000, 3000):
                assert grid.get_cell_at((x, y)) == HexCell.from_bng((x, y), 8)

    def test_tiling_has_no_gaps(self):
        """Test that a grid's hexagons cover its extent without overlap."""
        extent = box(1000.0, 1000.0, 1500.0, 1400.0)
        polygons = HexGrid.from_extent(*extent.bounds, zoom=12).to_polygons()

        union = union_all([p.buffer(1e-6) for p in polygons])
        assert union.covers(extent)
        assert sum(p.area for p in polygons) == pytest.approx(union_all(polygons).area, rel=1e-6)
