"""Apple ICNS container encoder.

An ICNS file is the magic ``icns``, a big-endian total length and a flat run
of ``type + length + payload`` chunks. There is no directory; readers walk the
chunks by summing their lengths.
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
from .sizes import ICNS_TYPES


logger = logging.getLogger(__name__)

MAGIC = b"icns"
HEADER_SIZE = 8
CHUNK_HEADER_SIZE = 8


@dataclass(frozen=True)
class IcnsEntry:
    ostype: str
    data: bytes

    @property
    def length(self) -> int:
        # The length field counts the chunk's own type and length fields.
        return len(self.data) + CHUNK_HEADER_SIZE

    def pack(self) -> bytes:
        try:
            tag = self.ostype.encode("ascii")
        except UnicodeEncodeError as exc:
            raise SerializationError(f"OSType must be ASCII: {self.ostype!r}") from exc
        if len(tag) != 4:
            raise SerializationError(f"OSType must be exactly 4 bytes: {self.ostype!r}")
        try:
            header = tag + struct.pack(">I", self.length)
        except struct.error as exc:
            raise SerializationError(f"{self.ostype} payload is too large: {exc}") from exc
        return header + self.data


def build_icns(entries: Sequence[IcnsEntry]) -> bytes:
    total_size = HEADER_SIZE + sum(entry.length for entry in entries)
    try:
        header = MAGIC + struct.pack(">I", total_size)
    except struct.error as exc:
        raise SerializationError(f"ICNS file would exceed 4 GiB: {total_size} bytes") from exc

    buffer = bytearray(header)
    for entry in entries:
        buffer += entry.pack()
    return bytes(buffer)


def encode_icns(
    source: Path,
    rasterizer: Optional[Rasterizer] = None,
    max_workers: int = 1,
    dedupe: bool = False,
) -> bytes:
    if rasterizer is None:
        rasterizer = CairoRasterizer()

    requests = [RenderRequest(label=icon.ostype, size=icon.size) for icon in ICNS_TYPES]
    payloads = render_all(rasterizer, Path(source), requests, max_workers, dedupe)
    entries = [
        IcnsEntry(ostype=icon.ostype, data=payload)
        for icon, payload in zip(ICNS_TYPES, payloads)
    ]
    data = build_icns(entries)

    logger.info(
        "ICNS encoded → entries=%d retina=%d bytes=%d",
        len(entries),
        sum(1 for icon in ICNS_TYPES if icon.retina),
        len(data),
    )
    return data
