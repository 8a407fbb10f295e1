"""Hexagon polygon construction around a cell center."""

import math
from typing import Any, List, Tuple

from shapely.geometry import Polygon

from .dimensions import HexagonDims
from .lattice import coordinate_xy

# Pointy-top orientation: vertices at 30, 90, ... 330 degrees
_VERTEX_ANGLES = tuple(math.radians(30.0 + 60.0 * i) for i in range(6))


def hexagon_vertices(center: Any, dims: HexagonDims) -> List[Tuple[float, float]]:
    """
    Closed ring of a hexagon, counter-clockwise from the upper-right vertex.

    Args:
        center: shapely Point or (x, y) pair
        dims: Hexagon dimensions (circumradius is used)

    Returns:
        Seven (x, y) tuples; the last repeats the first
    """
    cx, cy = coordinate_xy(center)
    r = dims.circumradius
    ring = [(cx + r * math.cos(a), cy + r * math.sin(a)) for a in _VERTEX_ANGLES]
    ring.append(ring[0])
    return ring


def create_hexagon(center: Any, dims: HexagonDims) -> Polygon:
    """Create the hexagon polygon for a cell."""
    return Polygon(hexagon_vertices(center, dims))
