# bnghex/grid_systems/__init__.py
"""Hexagonal cell indexing over British National Grid."""

from .constants import CELL_RADIUS, CELL_WIDTHS, GRID_EXTENTS, IDENTIFIER_VERSION, MAX_ZOOM_LEVEL
from .exceptions import (
    GridSystemError,
    InvalidZoom,
    InvalidPoint,
    InvalidDimension,
    InvalidExtent,
    InvalidIdentifier,
    ProjectionError,
    GeometryParseError,
)
from .dimensions import HexagonDims
from .lattice import address_to_center, point_to_address
from .identifier import decode_hex_identifier, generate_hex_identifier
from .geometry import create_hexagon, hexagon_vertices
from .projection import Crs, wgs84_to_bng
from .hex_cell import HexCell
from .bounds_manager import BoundsManager, BoundsDefinition
from .hexagonal_grid import HexGrid
from .grid_factory import GridFactory, GridSpecification

__all__ = [
    'CELL_RADIUS',
    'CELL_WIDTHS',
    'GRID_EXTENTS',
    'IDENTIFIER_VERSION',
    'MAX_ZOOM_LEVEL',
    'GridSystemError',
    'InvalidZoom',
    'InvalidPoint',
    'InvalidDimension',
    'InvalidExtent',
    'InvalidIdentifier',
    'ProjectionError',
    'GeometryParseError',
    'HexagonDims',
    'address_to_center',
    'point_to_address',
    'decode_hex_identifier',
    'generate_hex_identifier',
    'create_hexagon',
    'hexagon_vertices',
    'Crs',
    'wgs84_to_bng',
    'HexCell',
    'BoundsManager',
    'BoundsDefinition',
    'HexGrid',
    'GridFactory',
    'GridSpecification',
]
