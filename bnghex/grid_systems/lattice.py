# bnghex/grid_systems/lattice.py
"""
Mapping between BNG coordinates and hexagon lattice addresses.

Cells are pointy-top hexagons laid out in rows. Row ``r`` sits at
``y = r * 1.5 * radius`` and odd rows are shifted right by half a cell
width, so an address ``(row, col)`` has exactly one center and every point
in the working extent belongs to exactly one address (the nearest center).
"""

import logging
import math
import numbers
import operator
from typing import Any, Tuple

from shapely.geometry import Point

from .constants import CELL_RADIUS, CELL_WIDTHS, GRID_EXTENTS, MAX_ZOOM_LEVEL
from .exceptions import InvalidPoint, InvalidZoom

logger = logging.getLogger(__name__)


def validate_zoom(zoom: Any) -> int:
    """Return ``zoom`` as an int, raising InvalidZoom unless it is in range."""
    if isinstance(zoom, bool) or not isinstance(zoom, numbers.Integral):
        raise InvalidZoom(zoom, f"Zoom level must be an integer, got: {zoom!r}")
    if not 0 <= zoom <= MAX_ZOOM_LEVEL:
        raise InvalidZoom(
            zoom, f"Zoom level must be between 0 and {MAX_ZOOM_LEVEL}, got: {zoom}"
        )
    return int(zoom)


def coordinate_xy(point: Any) -> Tuple[float, float]:
    """Extract finite (x, y) floats from a shapely Point or an (x, y) pair."""
    if isinstance(point, Point):
        if point.is_empty:
            raise InvalidPoint("Empty point has no coordinates")
        x, y = point.x, point.y
    else:
        try:
            x, y = point
            x, y = float(x), float(y)
        except (TypeError, ValueError) as e:
            raise InvalidPoint(f"Expected an (x, y) pair, got: {point!r}", e)

    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidPoint(f"Coordinates must be finite, got: ({x}, {y})")
    return x, y


def in_working_extent(x: float, y: float) -> bool:
    """Check if a coordinate lies inside the BNG working extent (inclusive)."""
    min_x, min_y, max_x, max_y = GRID_EXTENTS
    return min_x <= x <= max_x and min_y <= y <= max_y


def validate_point(point: Any) -> Tuple[float, float]:
    """Return (x, y) for a point that is finite and inside the working extent."""
    x, y = coordinate_xy(point)
    if not in_working_extent(x, y):
        raise InvalidPoint(
            f"Coordinate ({x}, {y}) outside BNG working extent {GRID_EXTENTS}"
        )
    return x, y


def cell_spacing(zoom: int) -> Tuple[float, float]:
    """Horizontal (across-flats) and vertical (1.5 x radius) spacing at a zoom."""
    z = validate_zoom(zoom)
    return CELL_WIDTHS[z], 1.5 * CELL_RADIUS[z]


def _center(row: int, col: int, width: float, row_height: float) -> Tuple[float, float]:
    # row % 2 is 0 or 1 for negative rows too
    offset = (row % 2) * (width / 2.0)
    x = GRID_EXTENTS[0] + col * width + offset
    y = GRID_EXTENTS[1] + row * row_height
    return x, y


def _nearest_address(x: float, y: float, width: float, row_height: float) -> Tuple[int, int]:
    base_row = math.floor((y - GRID_EXTENTS[1]) / row_height)
    best = None
    for row in (base_row, base_row + 1):
        offset = (row % 2) * (width / 2.0)
        base_col = math.floor((x - GRID_EXTENTS[0] - offset) / width)
        for col in (base_col, base_col + 1):
            cx, cy = _center(row, col, width, row_height)
            candidate = ((x - cx) ** 2 + (y - cy) ** 2, row, col)
            if best is None or candidate < best:
                best = candidate
    return best[1], best[2]


def point_to_address(point: Any, zoom: int) -> Tuple[int, int]:
    """
    Convert a BNG coordinate to the (row, col) of the cell containing it.

    The two rows bracketing ``y`` and, in each, the two columns bracketing
    ``x`` are the only candidates for the nearest center. The closest one
    wins; exact ties go to the smaller row, then the smaller column.

    Args:
        point: shapely Point or (easting, northing) pair
        zoom: Zoom level (0-15)

    Returns:
        Tuple of (row, col)

    Raises:
        InvalidZoom: zoom out of range
        InvalidPoint: non-finite or outside GRID_EXTENTS
    """
    width, row_height = cell_spacing(zoom)
    x, y = validate_point(point)
    return _nearest_address(x, y, width, row_height)


def snap_to_address(point: Any, zoom: int) -> Tuple[int, int]:
    """
    Address of the center nearest to a point, without the working-extent check.

    Cells along the edge of the extent have centers just outside it; this
    recovers their address from such a center.
    """
    width, row_height = cell_spacing(zoom)
    x, y = coordinate_xy(point)
    return _nearest_address(x, y, width, row_height)


def address_to_center(row: int, col: int, zoom: int) -> Point:
    """
    Convert a lattice address to the exact center of its cell.

    Args:
        row: Row index
        col: Column index
        zoom: Zoom level (0-15)

    Returns:
        shapely Point at the cell center
    """
    width, row_height = cell_spacing(zoom)
    x, y = _center(operator.index(row), operator.index(col), width, row_height)
    return Point(x, y)


def address_range(min_x: float, min_y: float, max_x: float, max_y: float,
                  zoom: int) -> Tuple[int, int, int, int]:
    """
    Inclusive (row_min, row_max, col_min, col_max) of cells touching an extent.

    Computed from the addresses of the four corners and widened by one row
    and one column on every side, which covers cells in rows of either parity.
    Corners are not required to lie inside the working extent.
    """
    width, row_height = cell_spacing(zoom)
    corners = ((min_x, min_y), (min_x, max_y), (max_x, min_y), (max_x, max_y))
    addresses = [_nearest_address(x, y, width, row_height) for x, y in corners]
    rows = [a[0] for a in addresses]
    cols = [a[1] for a in addresses]
    logger.debug(f"Corner addresses at zoom {zoom}: rows {min(rows)}..{max(rows)}, "
                 f"cols {min(cols)}..{max(cols)}")
    return min(rows) - 1, max(rows) + 1, min(cols) - 1, max(cols) + 1
