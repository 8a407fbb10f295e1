"""Named and ad-hoc BNG extents for grid generation."""

from typing import Any, Tuple, Dict, List, Optional, Union, cast
from dataclasses import dataclass, replace
from shapely.geometry import Polygon, box
import math
import logging

from ..config import config
from .constants import GRID_EXTENTS
from .exceptions import InvalidExtent

logger = logging.getLogger(__name__)

BoundsTuple = Tuple[float, float, float, float]


def _as_bounds(values: Any) -> Optional[BoundsTuple]:
    """Four floats from a sequence, or None if it is not four numbers."""
    if isinstance(values, (str, bytes)):
        return None
    try:
        parsed = tuple(float(v) for v in values)
    except (TypeError, ValueError):
        return None
    return cast(BoundsTuple, parsed) if len(parsed) == 4 else None


@dataclass
class BoundsDefinition:
    """An extent in British National Grid metres, with a name and category."""
    name: str
    bounds: BoundsTuple  # minx, miny, maxx, maxy
    crs: str = "EPSG:27700"
    category: str = "custom"  # national, city, custom
    metadata: Optional[Dict] = None

    @property
    def polygon(self) -> Polygon:
        return box(*self.bounds)

    def is_valid(self) -> bool:
        """Finite bounds with min < max on both axes."""
        if not all(math.isfinite(v) for v in self.bounds):
            return False
        minx, miny, maxx, maxy = self.bounds
        return minx < maxx and miny < maxy

    def contains(self, x: float, y: float) -> bool:
        """Check if a point is within the bounds, edges included."""
        minx, miny, maxx, maxy = self.bounds
        return minx <= x <= maxx and miny <= y <= maxy

    def intersection(self, other_bounds: BoundsTuple) -> Optional[BoundsTuple]:
        """
        Overlap with another extent, or None when they are disjoint.

        Extents that only touch give a zero-width overlap along the shared edge.
        """
        overlap = self.polygon.intersection(box(*other_bounds))
        return None if overlap.is_empty else overlap.bounds


class BoundsManager:
    """Resolves region names, bounds strings and tuples to BoundsDefinitions.

    Predefined regions are approximate. Extra regions come from
    ``processing_bounds.custom`` in the config, either as a four-number list
    or as a mapping with ``bounds`` and optional ``category``/``metadata``.
    """

    REGIONS = {
        'bng': BoundsDefinition('bng', GRID_EXTENTS, category='national'),
        'great_britain': BoundsDefinition('great_britain', (0.0, 0.0, 700000.0, 1300000.0), category='national'),

        'london': BoundsDefinition('london', (503000.0, 155000.0, 562000.0, 201000.0), category='city'),
        'manchester': BoundsDefinition('manchester', (375000.0, 385000.0, 400000.0, 410000.0), category='city'),
        'edinburgh': BoundsDefinition('edinburgh', (315000.0, 660000.0, 335000.0, 680000.0), category='city'),
        'cardiff': BoundsDefinition('cardiff', (310000.0, 170000.0, 325000.0, 185000.0), category='city'),
    }

    def __init__(self):
        self.custom_regions: Dict[str, BoundsDefinition] = {}
        self._load_custom_regions()

    def _load_custom_regions(self):
        custom_bounds = config.get('processing_bounds.custom', {}) or {}

        for name, entry in custom_bounds.items():
            options = entry if isinstance(entry, dict) else {'bounds': entry}
            bounds = _as_bounds(options.get('bounds', ()))
            if bounds is None:
                logger.warning(f"Ignoring malformed custom bounds '{name}': {entry!r}")
                continue
            self.custom_regions[name] = BoundsDefinition(
                name=name,
                bounds=bounds,
                category=options.get('category', 'custom'),
                metadata=options.get('metadata'),
            )

    def get_bounds(self, name: str) -> BoundsDefinition:
        """
        Look up a region by name.

        Args:
            name: Predefined or custom region name, or a
                'minx,miny,maxx,maxy' string

        Raises:
            InvalidExtent: the name is unknown and not a bounds string
        """
        region = self.REGIONS.get(name) or self.custom_regions.get(name)
        if region is not None:
            return region

        bounds = _as_bounds(name.split(',')) if ',' in name else None
        if bounds is not None:
            return BoundsDefinition(name='custom_bounds', bounds=bounds)

        raise InvalidExtent(f"Unknown bounds: {name}. Available: {self.list_available()}")

    def resolve(self, bounds: Union[str, BoundsTuple, BoundsDefinition]) -> BoundsDefinition:
        """Turn a name, a 4-tuple or a BoundsDefinition into a BoundsDefinition."""
        if isinstance(bounds, BoundsDefinition):
            return bounds
        if isinstance(bounds, str):
            return self.get_bounds(bounds)
        parsed = _as_bounds(bounds)
        if parsed is None:
            raise InvalidExtent(f"Bounds must be 4 numbers (minx, miny, maxx, maxy), got: {bounds!r}")
        return BoundsDefinition('custom_bounds', parsed)

    def list_available(self) -> Dict[str, List[str]]:
        """Region names grouped by category; config regions are listed as 'custom'."""
        available: Dict[str, List[str]] = {}
        for name, region in self.REGIONS.items():
            available.setdefault(region.category, []).append(name)
        if self.custom_regions:
            available['custom'] = list(self.custom_regions)
        return available

    @staticmethod
    def clip_to_working_extent(bounds: BoundsDefinition) -> Optional[BoundsDefinition]:
        """Intersection of bounds with the BNG working extent, or None if disjoint."""
        clipped = bounds.intersection(GRID_EXTENTS)
        if clipped is None:
            return None
        return replace(bounds, bounds=cast(BoundsTuple, tuple(clipped)))
