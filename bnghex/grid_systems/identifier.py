"""
Compact, reversible text identifiers for hexagon cells.

An identifier packs ``[u8 version][f64 center_x][f64 center_y][u8 zoom]``
big-endian (18 bytes) and encodes it as URL-safe base64 without padding,
which always yields 24 characters.
"""

import base64
import binascii
import logging
import math
import re
import struct
from typing import NamedTuple

from .constants import IDENTIFIER_VERSION
from .exceptions import InvalidIdentifier, InvalidPoint
from .lattice import validate_zoom

logger = logging.getLogger(__name__)

_RECORD = struct.Struct(">BddB")
IDENTIFIER_BYTES = _RECORD.size
IDENTIFIER_LENGTH = 24

_URLSAFE_CHARS = re.compile(r"^[A-Za-z0-9_-]*$")


class DecodedIdentifier(NamedTuple):
    """Fields recovered from an identifier."""
    version: int
    easting: float
    northing: float
    zoom: int


def encode(easting: float, northing: float, zoom: int) -> str:
    """
    Encode a cell center and zoom level as an identifier string.

    Raises:
        InvalidZoom: zoom out of range
        InvalidPoint: center is not finite
    """
    z = validate_zoom(zoom)
    x, y = float(easting), float(northing)
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidPoint(f"Cell center must be finite, got: ({x}, {y})")

    packed = _RECORD.pack(IDENTIFIER_VERSION, x, y, z)
    return base64.urlsafe_b64encode(packed).rstrip(b"=").decode("ascii")


def decode(identifier: str) -> DecodedIdentifier:
    """
    Decode an identifier string back to its version, center and zoom.

    The zoom byte is returned as stored; range checks are left to whoever
    builds a cell from it.

    Raises:
        InvalidIdentifier: wrong type, bad alphabet, bad base64, wrong length
            or unsupported version
    """
    if not isinstance(identifier, str):
        raise InvalidIdentifier(f"Identifier must be a string, got: {type(identifier).__name__}")
    if not _URLSAFE_CHARS.match(identifier):
        raise InvalidIdentifier(f"Identifier contains non URL-safe characters: {identifier!r}")

    padded = identifier + "=" * (-len(identifier) % 4)
    try:
        raw = base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidIdentifier(f"Identifier is not valid base64: {identifier!r}", e)

    if len(raw) != IDENTIFIER_BYTES:
        raise InvalidIdentifier(
            f"Identifier must decode to {IDENTIFIER_BYTES} bytes, got {len(raw)}"
        )

    version, x, y, zoom = _RECORD.unpack(raw)
    if version != IDENTIFIER_VERSION:
        raise InvalidIdentifier(f"Unsupported identifier version: {version}")

    logger.debug(f"Decoded identifier {identifier} -> ({x}, {y}) zoom {zoom}")
    return DecodedIdentifier(version, x, y, zoom)


# Descriptive aliases used by the cell constructors
generate_hex_identifier = encode
decode_hex_identifier = decode
