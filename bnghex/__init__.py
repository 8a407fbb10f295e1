"""
Hexagonal cell indexing for British National Grid.

This package maps BNG coordinates to cells of a fixed hexagonal tiling,
encodes cells as compact identifiers, and builds grids of cells covering
extents and polygons, with CSV and GeoParquet export.
"""

__version__ = "1.0.0"
__author__ = "Jason"
__description__ = "Hexagonal cell indexing for British National Grid"

# Note: Modules should be imported explicitly when needed to avoid
# side effects like config discovery on import.

__all__ = [
    '__version__',
    '__author__',
    '__description__',
]
