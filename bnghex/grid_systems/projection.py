"""Reprojection of WGS84 (EPSG:4326) input onto British National Grid."""

import math
from enum import Enum
from functools import lru_cache
from typing import Any, Tuple

import pyproj
from shapely.geometry.base import BaseGeometry
from shapely.ops import transform

from .exceptions import ProjectionError
from .lattice import coordinate_xy

BNG_CRS = "EPSG:27700"
WGS84_CRS = "EPSG:4326"


class Crs(Enum):
    """Coordinate reference systems accepted as input."""
    BNG = BNG_CRS
    WGS84 = WGS84_CRS

    @classmethod
    def parse(cls, value: Any) -> "Crs":
        """Accept a Crs, an EPSG code string, or a name like 'bng'/'wgs84'."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().upper()
        for member in cls:
            if text in (member.name, member.value):
                return member
        raise ValueError(f"Unsupported CRS: {value!r}. Expected one of {[m.name for m in cls]}")


@lru_cache(maxsize=1)
def get_transformer() -> pyproj.Transformer:
    """Shared longitude/latitude -> easting/northing transformer."""
    return pyproj.Transformer.from_crs(WGS84_CRS, BNG_CRS, always_xy=True)


def wgs84_to_bng(point: Any) -> Tuple[float, float]:
    """
    Project a (longitude, latitude) point to (easting, northing).

    Raises:
        InvalidPoint: non-finite input
        ProjectionError: the projection produced non-finite output
    """
    lon, lat = coordinate_xy(point)
    x, y = get_transformer().transform(lon, lat)
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ProjectionError(f"Cannot project ({lon}, {lat}) to British National Grid")
    return x, y


def wgs84_geometry_to_bng(geometry: BaseGeometry) -> BaseGeometry:
    """Project every coordinate of a shapely geometry from WGS84 to BNG."""
    projected = transform(get_transformer().transform, geometry)
    if not projected.is_empty:
        minx, miny, maxx, maxy = projected.bounds
        if not all(math.isfinite(v) for v in (minx, miny, maxx, maxy)):
            raise ProjectionError(
                f"Cannot project {geometry.geom_type} to British National Grid"
            )
    return projected
