"""Parse WKT or GeoJSON geometry text into shapely geometries."""

import json
import logging

from shapely import wkt
from shapely.errors import ShapelyError
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from ..grid_systems.exceptions import GeometryParseError

logger = logging.getLogger(__name__)


def parse_geometry(text: str) -> BaseGeometry:
    """
    Parse geometry text from a CSV cell or the command line.

    Text starting with ``{`` is read as GeoJSON, either a bare geometry or a
    Feature; anything else is read as WKT.

    Raises:
        GeometryParseError: text is neither valid GeoJSON nor valid WKT
    """
    if not isinstance(text, str):
        raise GeometryParseError(f"Geometry text must be a string, got: {type(text).__name__}")

    stripped = text.strip()
    if not stripped:
        raise GeometryParseError("Geometry text is empty")

    if stripped.startswith('{'):
        return _parse_geojson(stripped)

    try:
        return wkt.loads(stripped)
    except (ShapelyError, ValueError) as e:
        raise GeometryParseError(f"Invalid WKT: {_preview(stripped)}", e)


def _parse_geojson(text: str) -> BaseGeometry:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise GeometryParseError(f"Invalid GeoJSON: {e.msg}", e)

    if not isinstance(data, dict):
        raise GeometryParseError("GeoJSON must be an object")

    geojson_type = data.get('type')
    if geojson_type == 'FeatureCollection':
        raise GeometryParseError("FeatureCollection is not supported, expected a single geometry or Feature")
    if geojson_type == 'Feature':
        data = data.get('geometry')
        if not data:
            raise GeometryParseError("GeoJSON Feature has no geometry")

    try:
        return shape(data)
    except (ShapelyError, ValueError, TypeError, KeyError, AttributeError) as e:
        raise GeometryParseError(f"Invalid GeoJSON geometry: {_preview(text)}", e)


def _preview(text: str, length: int = 60) -> str:
    return text if len(text) <= length else text[:length] + '...'
