# bnghex/grid_systems/grid_factory.py
"""Factory for creating BNG hexagon grids from validated specifications."""

from typing import Any, Dict, List, Optional, Union, Tuple
import logging
from dataclasses import dataclass, field

from shapely.geometry import MultiPolygon, Polygon

from ..config import config
from .bounds_manager import BoundsManager, BoundsDefinition
from .exceptions import InvalidExtent
from .hexagonal_grid import HexGrid
from .lattice import validate_zoom
from .projection import Crs

logger = logging.getLogger(__name__)


@dataclass
class GridSpecification:
    """
    Everything needed to build one grid, checked once at construction.

    ``bounds`` accepts a region name, a 'minx,miny,maxx,maxy' string, a
    4-tuple or a BoundsDefinition and is resolved to a BoundsDefinition.
    When ``polygon`` is given it restricts the grid to the cells whose
    centers it covers and ``bounds`` may be omitted.
    """
    zoom_level: int
    bounds: Optional[Union[str, Tuple[float, float, float, float], BoundsDefinition]] = None
    polygon: Optional[Union[Polygon, MultiPolygon]] = None
    crs: Union[Crs, str] = Crs.BNG
    name: Optional[str] = None
    max_workers: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.zoom_level = validate_zoom(self.zoom_level)
        try:
            self.crs = Crs.parse(self.crs)
        except ValueError as e:
            raise InvalidExtent(str(e), e)

        if self.polygon is not None:
            if not isinstance(self.polygon, (Polygon, MultiPolygon)):
                raise InvalidExtent(
                    f"Expected a Polygon or MultiPolygon, got: {type(self.polygon).__name__}"
                )
            if self.polygon.is_empty:
                raise InvalidExtent("Cannot build a grid from an empty polygon")
        elif self.bounds is None:
            raise InvalidExtent("A grid specification needs bounds or a polygon")

        if self.bounds is not None:
            self.bounds = BoundsManager().resolve(self.bounds)
            if not self.bounds.is_valid():
                raise InvalidExtent(f"Degenerate bounds for '{self.bounds.name}': {self.bounds.bounds}")

        if self.name is None:
            source = self.bounds.name if isinstance(self.bounds, BoundsDefinition) else 'polygon'
            self.name = f"{source}_z{self.zoom_level}"

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            'zoom_level': self.zoom_level,
            'bounds': self.bounds.bounds if isinstance(self.bounds, BoundsDefinition) else None,
            'polygon_wkt': self.polygon.wkt if self.polygon is not None else None,
            'crs': self.crs.value,
            'name': self.name,
            'max_workers': self.max_workers,
            'metadata': self.metadata
        }


class GridFactory:
    """
    Builds grids from specifications.

    Zoom levels are independent tilings, so multi-zoom sets are simply one
    grid per zoom over the same area.
    """

    def __init__(self):
        """Initialize grid factory."""
        self.bounds_manager = BoundsManager()

    def create_grid(self, spec: Union[GridSpecification, Dict]) -> HexGrid:
        """
        Create a grid from specification.

        Args:
            spec: Grid specification or a dict of its fields

        Returns:
            Created grid
        """
        if isinstance(spec, dict):
            spec = GridSpecification(**spec)

        logger.info(f"Creating grid '{spec.name}' at zoom {spec.zoom_level}")

        if spec.polygon is not None:
            if spec.crs is Crs.WGS84:
                grid = HexGrid.from_wgs84_polygon(spec.polygon, spec.zoom_level, spec.max_workers)
            else:
                grid = HexGrid.from_bng_polygon(spec.polygon, spec.zoom_level, spec.max_workers)
            if isinstance(spec.bounds, BoundsDefinition):
                extent = spec.bounds
                grid = grid.filter(lambda c: extent.contains(c.easting, c.northing))
        elif spec.crs is Crs.WGS84:
            minx, miny, maxx, maxy = spec.bounds.bounds
            grid = HexGrid.from_wgs84_extent((minx, miny), (maxx, maxy), spec.zoom_level, spec.max_workers)
        else:
            grid = HexGrid.from_bounds(spec.bounds, spec.zoom_level, spec.max_workers)

        logger.info(f"Grid '{spec.name}' has {len(grid)} cells")
        return grid

    def create_multi_zoom_grids(self,
                                zoom_levels: Optional[List[int]],
                                bounds: Union[str, Tuple[float, float, float, float], BoundsDefinition],
                                base_name: Optional[str] = None,
                                max_workers: Optional[int] = None) -> Dict[int, HexGrid]:
        """
        Create one grid per zoom level over the same bounds.

        Args:
            zoom_levels: Zoom levels; defaults to ``grids.hexagonal.zooms``
            bounds: Bounds specification
            base_name: Base name for grids
            max_workers: Worker processes per grid build

        Returns:
            Dictionary mapping zoom level to grid
        """
        if zoom_levels is None:
            zoom_levels = config.get('grids.hexagonal.zooms', [])
        bounds_def = self.bounds_manager.resolve(bounds)
        base_name = base_name or bounds_def.name

        specs = [
            GridSpecification(
                zoom_level=zoom,
                bounds=bounds_def,
                name=f"{base_name}_z{zoom}",
                max_workers=max_workers,
                metadata={'multi_zoom_set': base_name}
            )
            for zoom in sorted(set(zoom_levels))  # Coarse to fine
        ]

        grids = {spec.zoom_level: self.create_grid(spec) for spec in specs}

        logger.info(f"Created {len(grids)} grids for {base_name}")
        return grids
