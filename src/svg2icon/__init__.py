"""Convert SVG artwork into Windows ICO and macOS ICNS icon containers."""

from .errors import (
    RasterizationError,
    RasterizerUnavailableError,
    SerializationError,
    Svg2IconError,
)
from .icns import build_icns, encode_icns
from .ico import build_ico, encode_ico

__all__ = [
    "RasterizationError",
    "RasterizerUnavailableError",
    "SerializationError",
    "Svg2IconError",
    "build_icns",
    "build_ico",
    "encode_icns",
    "encode_ico",
]

__version__ = "1.0.0"
