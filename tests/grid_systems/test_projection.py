"""Tests for WGS84 to British National Grid reprojection."""

import math

import pytest
from shapely.geometry import LineString, Point, Polygon, box

from bnghex.grid_systems.exceptions import InvalidPoint, ProjectionError
from bnghex.grid_systems.projection import (
    BNG_CRS,
    WGS84_CRS,
    Crs,
    get_transformer,
    wgs84_geometry_to_bng,
    wgs84_to_bng,
)


class TestCrs:
    """Parsing CRS names and codes."""

    @pytest.mark.parametrize("value, expected", [
        ('bng', Crs.BNG),
        ('BNG', Crs.BNG),
        ('EPSG:27700', Crs.BNG),
        (' epsg:4326 ', Crs.WGS84),
        ('wgs84', Crs.WGS84),
        (Crs.WGS84, Crs.WGS84),
    ])
    def test_parse(self, value, expected):
        assert Crs.parse(value) is expected

    def test_unsupported(self):
        with pytest.raises(ValueError):
            Crs.parse('EPSG:3857')

    def test_values(self):
        assert Crs.BNG.value == BNG_CRS == 'EPSG:27700'
        assert Crs.WGS84.value == WGS84_CRS == 'EPSG:4326'


class TestPointProjection:
    """Projecting single points."""

    def test_transformer_is_shared(self):
        assert get_transformer() is get_transformer()

    def test_london(self):
        easting, northing = wgs84_to_bng((-0.1276, 51.5072))

        assert 529000 < easting < 531000
        assert 179000 < northing < 182000

    def test_accepts_shapely_point(self):
        assert wgs84_to_bng(Point(-0.1276, 51.5072)) == wgs84_to_bng((-0.1276, 51.5072))

    def test_true_origin(self):
        """Test the projection's true origin (49N, 2W)."""
        easting, northing = wgs84_to_bng((-2.0, 49.0))

        assert easting == pytest.approx(400000, abs=200)
        assert northing == pytest.approx(-100000, abs=200)

    def test_non_finite_input(self):
        with pytest.raises(InvalidPoint):
            wgs84_to_bng((math.nan, 51.0))

    def test_unprojectable(self):
        with pytest.raises(ProjectionError):
            wgs84_to_bng((0.0, 95.0))


class TestGeometryProjection:
    """Projecting whole geometries."""

    def test_line(self):
        line = wgs84_geometry_to_bng(LineString([(-0.13, 51.50), (-0.12, 51.50)]))

        assert isinstance(line, LineString)
        assert 600 < line.length < 800

    def test_polygon(self):
        polygon = wgs84_geometry_to_bng(box(-2.25, 53.47, -2.23, 53.49))

        assert isinstance(polygon, Polygon)
        assert polygon.is_valid
        assert polygon.area > 0

    def test_empty(self):
        assert wgs84_geometry_to_bng(Polygon()).is_empty
