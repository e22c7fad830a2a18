"""Windows ICO container encoder.

The file is a 6-byte ICONDIR header, one 16-byte ICONDIRENTRY per image and
then the PNG payloads, in the same order. All integers are little-endian.
"""
from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .errors import SerializationError
from .rasterizer import CairoRasterizer, Rasterizer
from .rendering import RenderRequest, render_all
from .sizes import ICO_SIZES


logger = logging.getLogger(__name__)

HEADER_FORMAT = "<HHH"
ENTRY_FORMAT = "<BBBBHHII"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)
ENTRY_SIZE = struct.calcsize(ENTRY_FORMAT)
ICON_TYPE = 1


def dimension_byte(size: int) -> int:
    """Encode a pixel dimension for the one-byte width/height fields (256 → 0)."""
    if size == 256:
        return 0
    if not 0 < size < 256:
        raise SerializationError(f"ICO entries must be 1-256 pixels wide, got {size}")
    return size


@dataclass(frozen=True)
class IcoDirectoryEntry:
    width: int
    height: int
    bytes_in_res: int
    image_offset: int
    color_count: int = 0  # 0 for >= 8bpp
    reserved: int = 0
    planes: int = 1
    bit_count: int = 32  # RGBA

    def pack(self) -> bytes:
        try:
            return struct.pack(
                ENTRY_FORMAT,
                self.width,
                self.height,
                self.color_count,
                self.reserved,
                self.planes,
                self.bit_count,
                self.bytes_in_res,
                self.image_offset,
            )
        except struct.error as exc:
            raise SerializationError(f"Cannot encode ICO directory entry {self}: {exc}") from exc


def layout_directory(images: Sequence[tuple[int, bytes]]) -> list[IcoDirectoryEntry]:
    offset = HEADER_SIZE + len(images) * ENTRY_SIZE
    entries: list[IcoDirectoryEntry] = []
    for size, payload in images:
        dim = dimension_byte(size)
        entries.append(
            IcoDirectoryEntry(
                width=dim,
                height=dim,
                bytes_in_res=len(payload),
                image_offset=offset,
            )
        )
        offset += len(payload)
    return entries


def build_ico(images: Sequence[tuple[int, bytes]]) -> bytes:
    """Serialize ``(size, png_bytes)`` pairs into an ICO file, preserving order."""
    entries = layout_directory(images)
    try:
        header = struct.pack(HEADER_FORMAT, 0, ICON_TYPE, len(entries))
    except struct.error as exc:
        raise SerializationError(f"Too many images for an ICO file: {len(entries)}") from exc

    buffer = bytearray(header)
    for entry in entries:
        buffer += entry.pack()
    for _, payload in images:
        buffer += payload
    return bytes(buffer)


def encode_ico(
    source: Path,
    rasterizer: Optional[Rasterizer] = None,
    max_workers: int = 1,
    dedupe: bool = False,
) -> bytes:
    if rasterizer is None:
        rasterizer = CairoRasterizer()

    requests = [RenderRequest(label=size, size=size) for size in ICO_SIZES]
    payloads = render_all(rasterizer, Path(source), requests, max_workers, dedupe)
    data = build_ico(list(zip(ICO_SIZES, payloads)))

    logger.info(
        "ICO encoded → entries=%d bytes=%d",
        len(payloads),
        len(data),
    )
    return data
