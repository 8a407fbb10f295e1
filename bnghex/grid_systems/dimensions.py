"""Regular hexagon measurements derived from any single dimension."""

import math
import numbers
from dataclasses import dataclass
from typing import Tuple

from .constants import CELL_RADIUS
from .exceptions import InvalidDimension
from .lattice import validate_zoom

SQRT3 = math.sqrt(3.0)


@dataclass(frozen=True)
class HexagonDims:
    """All linear measurements of one regular hexagon (metres, square metres)."""
    side: float
    circumradius: float
    apothem: float
    across_flats: float
    across_corners: float
    perimeter: float
    area: float


def _require_positive(value: float, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidDimension(f"{label} must be a real number, got: {value!r}")
    value = float(value)
    if not math.isfinite(value) or value <= 0.0:
        raise InvalidDimension(f"{label} must be positive and finite, got: {value}")
    return value


def from_side(side: float) -> HexagonDims:
    """
    Build hexagon dimensions from the side length.

    Every other constructor reduces to this one, so all of them agree on the
    derived values up to floating point rounding.
    """
    a = _require_positive(side, "Side length")
    apothem = (SQRT3 / 2.0) * a
    return HexagonDims(
        side=a,
        circumradius=a,
        apothem=apothem,
        across_flats=2.0 * apothem,
        across_corners=2.0 * a,
        perimeter=6.0 * a,
        area=(3.0 * SQRT3 / 2.0) * a * a,
    )


def from_circumradius(radius: float) -> HexagonDims:
    return from_side(_require_positive(radius, "Circumradius"))


def from_apothem(apothem: float) -> HexagonDims:
    r = _require_positive(apothem, "Apothem")
    return from_side(2.0 * r / SQRT3)


def from_across_flats(width: float) -> HexagonDims:
    df = _require_positive(width, "Across-flats width")
    return from_side(df / SQRT3)


def from_across_corners(width: float) -> HexagonDims:
    dc = _require_positive(width, "Across-corners width")
    return from_side(dc / 2.0)


def from_area(area: float) -> HexagonDims:
    s = _require_positive(area, "Area")
    return from_side(math.sqrt((2.0 * s) / (3.0 * SQRT3)))


def for_zoom(zoom: int) -> HexagonDims:
    """Dimensions of the cells at a zoom level, from the per-zoom radius table."""
    return from_circumradius(CELL_RADIUS[validate_zoom(zoom)])


def bounding_box(side: float) -> Tuple[float, float]:
    """(width, height) of the axis-aligned box around a pointy-top hexagon."""
    dims = from_side(side)
    return dims.across_flats, dims.across_corners
