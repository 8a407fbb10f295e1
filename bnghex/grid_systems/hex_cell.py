# bnghex/grid_systems/hex_cell.py
"""Hexagon cell value type and its construction paths."""

import math
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
from shapely.geometry import LineString, Point, Polygon
from shapely.geometry.base import BaseGeometry, BaseMultipartGeometry

from ..config import config
from . import dimensions
from .dimensions import HexagonDims
from .exceptions import GeometryParseError, InvalidDimension
from .geometry import create_hexagon, hexagon_vertices
from .identifier import decode_hex_identifier, generate_hex_identifier
from .lattice import address_to_center, coordinate_xy, point_to_address, snap_to_address, validate_zoom
from .projection import Crs, wgs84_geometry_to_bng, wgs84_to_bng

logger = logging.getLogger(__name__)

PathLike = Union[LineString, Sequence[Any]]

DEFAULT_LINE_STEP_FACTOR = 0.5


def resolve_step(zoom: int, step_factor: Optional[float] = None) -> float:
    """
    Sampling interval (metres) used when covering a path at a zoom level.

    The step is ``step_factor * circumradius``. It must stay positive and no
    coarser than the across-flats width, otherwise a path could skip a cell.
    """
    dims = dimensions.for_zoom(zoom)
    if step_factor is None:
        step_factor = config.get('grids.hexagonal.line_step_factor', DEFAULT_LINE_STEP_FACTOR)
    if isinstance(step_factor, bool) or not isinstance(step_factor, (int, float)):
        raise InvalidDimension(f"Line step factor must be a number, got: {step_factor!r}")

    step = float(step_factor) * dims.circumradius
    if not math.isfinite(step) or step <= 0.0:
        raise InvalidDimension(f"Line sampling step must be positive, got: {step}")
    if step > dims.across_flats:
        raise InvalidDimension(
            f"Line sampling step {step:.3f}m is coarser than the cell width "
            f"{dims.across_flats:.3f}m at zoom {zoom}"
        )
    return step


def _path_coordinates(path: PathLike) -> List[Tuple[float, float]]:
    if isinstance(path, LineString):
        return [(x, y) for x, y, *_ in path.coords]
    return [coordinate_xy(p) for p in path]


def _sample_path(coords: List[Tuple[float, float]], step: float) -> Iterable[Tuple[float, float]]:
    """Yield points along consecutive segments, at most ``step`` apart."""
    if not coords:
        return
    yield coords[0]
    for (x0, y0), (x1, y1) in zip(coords, coords[1:]):
        length = math.hypot(x1 - x0, y1 - y0)
        n = max(1, math.ceil(length / step))
        xs = np.linspace(x0, x1, n + 1)[1:]
        ys = np.linspace(y0, y1, n + 1)[1:]
        for x, y in zip(xs, ys):
            yield float(x), float(y)


@dataclass(frozen=True)
class HexCell:
    """
    One hexagon of the BNG grid at a fixed zoom level.

    Cells are immutable values: equal when identifier, center, zoom and
    address agree, and hashable so they can be collected in sets.
    """
    id: str
    center: Point
    zoom_level: int
    row: int
    col: int

    def __hash__(self) -> int:
        return hash((self.id, self.zoom_level, self.row, self.col))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HexCell):
            return NotImplemented
        return (self.id == other.id and self.zoom_level == other.zoom_level
                and self.row == other.row and self.col == other.col
                and self.center.equals(other.center))

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_address(cls, row: int, col: int, zoom: int) -> 'HexCell':
        """Create the cell at a lattice address."""
        center = address_to_center(row, col, zoom)
        hex_id = generate_hex_identifier(center.x, center.y, zoom)
        return cls(id=hex_id, center=center, zoom_level=int(zoom), row=int(row), col=int(col))

    @classmethod
    def from_bng(cls, point: Any, zoom: int) -> 'HexCell':
        """
        Create the cell containing a British National Grid coordinate.

        Args:
            point: shapely Point or (easting, northing) pair
            zoom: Zoom level (0-15)
        """
        row, col = point_to_address(point, zoom)
        return cls.from_address(row, col, zoom)

    @classmethod
    def from_hex_id(cls, hex_id: str) -> 'HexCell':
        """
        Rebuild a cell from its identifier.

        The decoded center is snapped to the lattice and the id re-encoded, so
        an identifier off a lattice center gives the same cell as ``from_bng``.
        """
        decoded = decode_hex_identifier(hex_id)
        zoom = validate_zoom(decoded.zoom)
        row, col = snap_to_address((decoded.easting, decoded.northing), zoom)
        return cls.from_address(row, col, zoom)

    @classmethod
    def from_wgs84(cls, point: Any, zoom: int) -> 'HexCell':
        """Create the cell containing a (longitude, latitude) point."""
        validate_zoom(zoom)
        return cls.from_bng(wgs84_to_bng(point), zoom)

    @classmethod
    def from_line_string_bng(cls, path: PathLike, zoom: int,
                             step_factor: Optional[float] = None) -> List['HexCell']:
        """
        Cells a BNG path passes through, in first-visit order.

        Each segment is sampled at ``step_factor * circumradius`` (see
        ``resolve_step``). This is a covering approximation, so a path that
        only clips the corner of a cell between two samples can miss it.
        """
        zoom = validate_zoom(zoom)
        step = resolve_step(zoom, step_factor)

        seen = set()
        cells = []
        for x, y in _sample_path(_path_coordinates(path), step):
            address = point_to_address((x, y), zoom)
            if address in seen:
                continue
            seen.add(address)
            cells.append(cls.from_address(address[0], address[1], zoom))

        logger.debug(f"Path covered by {len(cells)} cells at zoom {zoom} (step {step:.3f}m)")
        return cells

    @classmethod
    def from_line_string_wgs84(cls, path: PathLike, zoom: int,
                               step_factor: Optional[float] = None) -> List['HexCell']:
        """Cells a (longitude, latitude) path passes through."""
        validate_zoom(zoom)
        if not isinstance(path, LineString):
            path = [coordinate_xy(p) for p in path]
            if len(path) == 1:
                return [cls.from_wgs84(path[0], zoom)]
            if not path:
                return []
            path = LineString(path)
        return cls.from_line_string_bng(wgs84_geometry_to_bng(path), zoom, step_factor)

    @classmethod
    def from_geometry(cls, geometry: BaseGeometry, zoom: int,
                      crs: Union[Crs, str] = Crs.BNG) -> List['HexCell']:
        """
        Cells for an arbitrary shapely geometry.

        Points give their cell, line strings their path coverage and polygons
        the cell of their centroid. Multi-part geometries and collections
        concatenate the cells of their parts. Empty geometries give no cells.
        """
        zoom = validate_zoom(zoom)
        if Crs.parse(crs) is Crs.WGS84:
            geometry = wgs84_geometry_to_bng(geometry)
        return cls._cells_for_bng_geometry(geometry, zoom)

    @classmethod
    def _cells_for_bng_geometry(cls, geometry: BaseGeometry, zoom: int) -> List['HexCell']:
        if geometry.is_empty:
            return []
        if isinstance(geometry, Point):
            return [cls.from_bng(geometry, zoom)]
        if isinstance(geometry, LineString):
            return cls.from_line_string_bng(geometry, zoom)
        if isinstance(geometry, Polygon):
            return [cls.from_bng(geometry.centroid, zoom)]
        if isinstance(geometry, BaseMultipartGeometry):
            cells = []
            for part in geometry.geoms:
                cells.extend(cls._cells_for_bng_geometry(part, zoom))
            return cells
        raise GeometryParseError(f"Unsupported geometry type: {geometry.geom_type}")

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def easting(self) -> float:
        return self.center.x

    @property
    def northing(self) -> float:
        return self.center.y

    @property
    def address(self) -> Tuple[int, int]:
        return self.row, self.col

    @property
    def dims(self) -> HexagonDims:
        """Hexagon dimensions for this cell's zoom level."""
        return dimensions.for_zoom(self.zoom_level)

    def vertices(self) -> List[Tuple[float, float]]:
        """Closed ring of the cell's hexagon (7 points)."""
        return hexagon_vertices(self.center, self.dims)

    def to_polygon(self) -> Polygon:
        """Hexagon polygon of the cell in BNG coordinates."""
        return create_hexagon(self.center, self.dims)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for tabular export."""
        return {
            'id': self.id,
            'zoom_level': self.zoom_level,
            'row': self.row,
            'col': self.col,
            'easting': self.easting,
            'northing': self.northing,
            'geometry_wkt': self.to_polygon().wkt,
        }
