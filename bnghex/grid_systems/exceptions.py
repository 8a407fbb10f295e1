"""Exceptions raised by the hexagonal indexing system."""

from typing import Any, Optional


class GridSystemError(ValueError):
    """Base error for hexagonal indexing operations."""
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.original_exception = original_exception


class InvalidZoom(GridSystemError):
    """Raised when a zoom level is not an integer in [0, MAX_ZOOM_LEVEL]."""
    def __init__(self, zoom: Any, message: Optional[str] = None):
        super().__init__(message or f"Invalid zoom level: {zoom!r}")
        self.zoom = zoom


class InvalidPoint(GridSystemError):
    """Raised for non-finite coordinates or coordinates outside the working extent."""
    pass


class InvalidDimension(GridSystemError):
    """Raised when a hexagon measurement is not a positive finite number."""
    pass


class InvalidExtent(GridSystemError):
    """Raised for degenerate extents or empty polygons."""
    pass


class InvalidIdentifier(GridSystemError):
    """Raised when a cell identifier cannot be decoded."""
    pass


class ProjectionError(GridSystemError):
    """Raised when reprojection to British National Grid fails."""
    pass


class GeometryParseError(GridSystemError):
    """Raised when WKT/GeoJSON text or a geometry type cannot be handled."""
    pass
