from __future__ import annotations

import io
import threading
import time
from pathlib import Path
from typing import Optional

import pytest
from PIL import Image

import svg2icon.config


SQUARE_SVG = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="64" height="64" viewBox="0 0 64 64">
  <rect x="0" y="0" width="64" height="64" fill="#1e90ff"/>
</svg>
"""


def png_bytes(size: int) -> bytes:
    image = Image.new("RGBA", (size, size), (size % 256, 64, 128, 255))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class PngRasterizer:
    """Deterministic stand-in that paints a flat square per size."""

    def __init__(
        self,
        fail_sizes: tuple[int, ...] = (),
        fail_on_call: Optional[int] = None,
        delays: Optional[dict[int, float]] = None,
    ) -> None:
        self.fail_sizes = fail_sizes
        self.fail_on_call = fail_on_call
        self.delays = delays or {}
        self.calls: list[int] = []
        self._lock = threading.Lock()

    def render(self, source: Path, size: int) -> bytes:
        with self._lock:
            self.calls.append(size)
            call_number = len(self.calls)
        time.sleep(self.delays.get(size, 0))
        if size in self.fail_sizes or call_number == self.fail_on_call:
            raise RuntimeError(f"renderer exploded at {size}px")
        return png_bytes(size)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setattr(svg2icon.config, "SETTINGS_FILE", tmp_path / "no-settings.json")
    for name in ("SVG2ICON_JOBS", "SVG2ICON_DEDUPE", "SVG2ICON_LOG_PATH"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def svg_file(tmp_path) -> Path:
    path = tmp_path / "square.svg"
    path.write_text(SQUARE_SVG, encoding="utf-8")
    return path


@pytest.fixture
def rasterizer() -> PngRasterizer:
    return PngRasterizer()
