# bnghex/grid_systems/hexagonal_grid.py
"""Collections of BNG hexagon cells covering an extent or a polygon."""

from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union
from concurrent.futures import ProcessPoolExecutor, as_completed
import logging
import math

from shapely.geometry import MultiPolygon, Polygon, box
from shapely.prepared import prep

from ..config import config
from .bounds_manager import BoundsDefinition, BoundsManager
from .constants import GRID_EXTENTS
from .exceptions import GridSystemError, InvalidExtent
from .hex_cell import HexCell
from .lattice import address_range, coordinate_xy, in_working_extent, point_to_address, validate_zoom
from .projection import wgs84_geometry_to_bng

logger = logging.getLogger(__name__)

Address = Tuple[int, int]
Area = Union[Polygon, MultiPolygon]


def _validate_extent(min_x: float, min_y: float, max_x: float, max_y: float) -> Tuple[float, float, float, float]:
    try:
        values = tuple(float(v) for v in (min_x, min_y, max_x, max_y))
    except (TypeError, ValueError) as e:
        raise InvalidExtent(f"Extent values must be numbers, got: {(min_x, min_y, max_x, max_y)!r}", e)
    if not all(math.isfinite(v) for v in values):
        raise InvalidExtent(f"Extent must be finite, got: {values}")
    if values[0] >= values[2] or values[1] >= values[3]:
        raise InvalidExtent(f"Extent min must be below max on both axes, got: {values}")
    return values


_WORKING_EXTENT = box(*GRID_EXTENTS)
# Hexagons that touch the extent edge only within rounding still count
EDGE_TOLERANCE_M = 1e-6


def _reaches_working_extent(cell: HexCell) -> bool:
    """True when some point of the working extent falls in the cell's hexagon.

    Edge cells along the east and north edges have centers past the extent
    but still hold points inside it.
    """
    if in_working_extent(cell.easting, cell.northing):
        return True
    return _WORKING_EXTENT.distance(cell.to_polygon()) <= EDGE_TOLERANCE_M


def _cover_rows(zoom: int, row_start: int, row_stop: int, col_min: int, col_max: int,
                area: Optional[Area] = None) -> List[HexCell]:
    """
    Cells for rows ``row_start..row_stop-1`` whose center passes the containment test.

    Module level so a process pool can pickle it. With no area every cell
    reaching into the working extent is kept.
    """
    covers = prep(area).covers if area is not None else None
    cells = []
    for row in range(row_start, row_stop):
        for col in range(col_min, col_max + 1):
            cell = HexCell.from_address(row, col, zoom)
            if not _reaches_working_extent(cell):
                continue
            if covers is not None and not covers(cell.center):
                continue
            cells.append(cell)
    return cells


class HexGrid:
    """
    Read-only set of cells at one zoom level, indexed by (row, col).

    Build grids with the ``from_*`` constructors; the index is fixed once the
    grid exists and ``filter`` returns a new grid.
    """

    def __init__(self, zoom_level: int, cells: Iterable[HexCell] = (),
                 bounds: Optional[Tuple[float, float, float, float]] = None):
        self.zoom_level = validate_zoom(zoom_level)
        self.bounds = bounds
        self._index: Dict[Address, HexCell] = {}
        for cell in cells:
            if cell.zoom_level != self.zoom_level:
                raise GridSystemError(
                    f"Cell {cell.id} has zoom {cell.zoom_level}, grid zoom is {self.zoom_level}"
                )
            if cell.address in self._index:
                raise GridSystemError(f"Duplicate cell address {cell.address} in grid")
            self._index[cell.address] = cell

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_extent(cls, min_x: float, min_y: float, max_x: float, max_y: float,
                    zoom: int, max_workers: Optional[int] = None) -> 'HexGrid':
        """
        Build the grid covering a rectangular BNG extent.

        Args:
            min_x, min_y, max_x, max_y: Extent in BNG metres
            zoom: Zoom level (0-15)
            max_workers: Worker processes (defaults to ``processing.max_workers``)
        """
        zoom = validate_zoom(zoom)
        extent = _validate_extent(min_x, min_y, max_x, max_y)
        return cls._build(zoom, extent, None, max_workers)

    @classmethod
    def from_bng_extent(cls, min_point: Any, max_point: Any, zoom: int,
                        max_workers: Optional[int] = None) -> 'HexGrid':
        """Build the grid between two BNG corner points."""
        zoom = validate_zoom(zoom)
        min_x, min_y = coordinate_xy(min_point)
        max_x, max_y = coordinate_xy(max_point)
        return cls.from_extent(min_x, min_y, max_x, max_y, zoom, max_workers)

    @classmethod
    def from_bounds(cls, bounds: Union[str, BoundsDefinition, Tuple[float, float, float, float]],
                    zoom: int, max_workers: Optional[int] = None) -> 'HexGrid':
        """Build the grid for a named region, a bounds string or a BoundsDefinition."""
        zoom = validate_zoom(zoom)
        bounds_def = BoundsManager().resolve(bounds)
        return cls.from_extent(*bounds_def.bounds, zoom=zoom, max_workers=max_workers)

    @classmethod
    def from_bng_polygon(cls, polygon: Area, zoom: int,
                         max_workers: Optional[int] = None) -> 'HexGrid':
        """
        Build the grid of cells whose centers the polygon covers.

        Centers on the polygon boundary are kept.
        """
        zoom = validate_zoom(zoom)
        if not isinstance(polygon, (Polygon, MultiPolygon)):
            raise InvalidExtent(f"Expected a Polygon or MultiPolygon, got: {type(polygon).__name__}")
        if polygon.is_empty:
            raise InvalidExtent("Cannot build a grid from an empty polygon")
        extent = _validate_extent(*polygon.bounds)
        return cls._build(zoom, extent, polygon, max_workers)

    @classmethod
    def from_wgs84_extent(cls, min_point: Any, max_point: Any, zoom: int,
                          max_workers: Optional[int] = None) -> 'HexGrid':
        """Build the grid for a (longitude, latitude) box, projected to BNG."""
        zoom = validate_zoom(zoom)
        min_lon, min_lat = coordinate_xy(min_point)
        max_lon, max_lat = coordinate_xy(max_point)
        _validate_extent(min_lon, min_lat, max_lon, max_lat)
        # Densify so the projected outline follows the curved box edges
        outline = box(min_lon, min_lat, max_lon, max_lat).segmentize(
            max(max_lon - min_lon, max_lat - min_lat) / 32.0
        )
        return cls.from_bng_polygon(wgs84_geometry_to_bng(outline), zoom, max_workers)

    @classmethod
    def from_wgs84_polygon(cls, polygon: Area, zoom: int,
                           max_workers: Optional[int] = None) -> 'HexGrid':
        """Build the grid for a (longitude, latitude) polygon, projected to BNG."""
        zoom = validate_zoom(zoom)
        if not isinstance(polygon, (Polygon, MultiPolygon)):
            raise InvalidExtent(f"Expected a Polygon or MultiPolygon, got: {type(polygon).__name__}")
        if polygon.is_empty:
            raise InvalidExtent("Cannot build a grid from an empty polygon")
        return cls.from_bng_polygon(wgs84_geometry_to_bng(polygon), zoom, max_workers)

    @classmethod
    def _build(cls, zoom: int, extent: Tuple[float, float, float, float],
               area: Optional[Area], max_workers: Optional[int]) -> 'HexGrid':
        clipped = BoundsManager.clip_to_working_extent(BoundsDefinition('extent', extent))
        if clipped is None:
            logger.debug(f"Extent {extent} is outside the BNG working extent, grid is empty")
            return cls(zoom, (), bounds=extent)

        row_min, row_max, col_min, col_max = address_range(*clipped.bounds, zoom=zoom)
        partitions = cls._partition_rows(row_min, row_max + 1, max_workers)

        if len(partitions) == 1:
            cells = _cover_rows(zoom, row_min, row_max + 1, col_min, col_max, area)
        else:
            cells = cls._build_parallel(zoom, partitions, col_min, col_max, area)

        logger.debug(f"Built grid at zoom {zoom}: {len(cells)} cells from rows "
                     f"{row_min}..{row_max}, cols {col_min}..{col_max}")
        return cls(zoom, cells, bounds=extent)

    @staticmethod
    def _partition_rows(row_start: int, row_stop: int,
                        max_workers: Optional[int]) -> List[Tuple[int, int]]:
        """Split a row range into contiguous chunks, one per worker."""
        if max_workers is None:
            max_workers = config.get('processing.max_workers', 1)
        if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
            raise GridSystemError(f"max_workers must be a positive integer, got: {max_workers!r}")

        min_rows = max(1, int(config.get('processing.min_rows_per_worker', 64)))
        total = row_stop - row_start
        n_chunks = max(1, min(max_workers, total // min_rows))
        size = math.ceil(total / n_chunks)
        return [(start, min(start + size, row_stop)) for start in range(row_start, row_stop, size)]

    @staticmethod
    def _build_parallel(zoom: int, partitions: List[Tuple[int, int]], col_min: int,
                        col_max: int, area: Optional[Area]) -> List[HexCell]:
        results: Dict[int, List[HexCell]] = {}
        with ProcessPoolExecutor(max_workers=len(partitions)) as executor:
            futures = {
                executor.submit(_cover_rows, zoom, start, stop, col_min, col_max, area): start
                for start, stop in partitions
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()

        # Merge in row order so the result matches the serial build
        cells: List[HexCell] = []
        for start in sorted(results):
            cells.extend(results[start])
        return cells

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def cell_count(self) -> int:
        return len(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[HexCell]:
        return iter(self._index.values())

    def __contains__(self, address: object) -> bool:
        if isinstance(address, HexCell):
            return self._index.get(address.address) == address
        return address in self._index

    def __repr__(self) -> str:
        return f"HexGrid(zoom_level={self.zoom_level}, cells={len(self)})"

    def cells(self) -> List[HexCell]:
        """All cells of the grid."""
        return list(self._index.values())

    def get_cell(self, row: int, col: int) -> Optional[HexCell]:
        """Cell at an address, or None if the grid does not hold it."""
        return self._index.get((row, col))

    def get_cell_at(self, point: Any) -> Optional[HexCell]:
        """
        Cell of the grid containing a BNG point.

        Returns None for points outside the working extent or whose cell the
        grid does not hold.

        Raises:
            InvalidPoint: point coordinates are not finite
        """
        x, y = coordinate_xy(point)
        if not in_working_extent(x, y):
            return None
        return self._index.get(point_to_address((x, y), self.zoom_level))

    def filter(self, predicate: Callable[[HexCell], bool]) -> 'HexGrid':
        """New grid holding only the cells for which ``predicate`` is true."""
        return HexGrid(self.zoom_level, (c for c in self if predicate(c)), bounds=self.bounds)

    def to_polygons(self) -> List[Polygon]:
        """Hexagon polygons of all cells."""
        return [cell.to_polygon() for cell in self]

    def get_cell_ids(self) -> List[str]:
        return [cell.id for cell in self]
