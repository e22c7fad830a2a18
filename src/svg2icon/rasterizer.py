from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Protocol

from PIL import Image

from .errors import RasterizationError, RasterizerUnavailableError


logger = logging.getLogger(__name__)


class Rasterizer(Protocol):
    def render(self, source: Path, size: int) -> bytes:
        """Return PNG bytes of ``source`` rendered at ``size`` x ``size`` pixels."""


def _load_backend():
    try:
        import cairosvg  # type: ignore
    except (ImportError, OSError) as exc:  # pragma: no cover - missing libcairo
        raise RasterizerUnavailableError(
            f"cairosvg could not be loaded ({exc}). Install cairosvg and the Cairo library."
        ) from exc
    return cairosvg


def _normalize_png(payload: bytes, size: int) -> bytes:
    try:
        image = Image.open(io.BytesIO(payload))
    except Exception as exc:  # pragma: no cover - cairosvg emitted garbage
        raise ValueError(f"Rendered output is not a readable PNG: {exc}") from exc

    with image:
        if image.size != (size, size):
            raise ValueError(
                f"Rendered image is {image.size[0]}x{image.size[1]}, expected {size}x{size}"
            )
        if image.format == "PNG" and image.mode == "RGBA":
            return payload

        buffer = io.BytesIO()
        image.convert("RGBA").save(buffer, format="PNG")
    return buffer.getvalue()


class CairoRasterizer:
    """Render SVG files to square RGBA PNGs with cairosvg."""

    def __init__(self) -> None:
        self._cairosvg = _load_backend()

    def render(self, source: Path, size: int) -> bytes:
        try:
            # Not url=: "#" and "?" in a file name would be parsed as URL syntax.
            payload = self._cairosvg.svg2png(
                bytestring=Path(source).read_bytes(),
                output_width=size,
                output_height=size,
            )
            png = _normalize_png(payload, size)
        except Exception as exc:
            raise RasterizationError(size, size, exc) from exc
        logger.debug("Rendered %s at %dpx → %d bytes", source, size, len(png))
        return png
