import io
import struct

import pytest
from PIL import Image

from svg2icon.errors import RasterizationError, SerializationError
from svg2icon.icns import IcnsEntry, build_icns, encode_icns
from svg2icon.sizes import ICNS_TYPES, IcnsType

from conftest import PngRasterizer, png_bytes


def _walk_chunks(data: bytes) -> list[tuple[str, int, bytes]]:
    chunks = []
    offset = 8
    while offset < len(data):
        tag = data[offset : offset + 4].decode("ascii")
        (length,) = struct.unpack_from(">I", data, offset + 4)
        chunks.append((tag, length, data[offset + 8 : offset + length]))
        offset += length
    assert offset == len(data)
    return chunks


def test_header_and_total_size(svg_file, rasterizer):
    data = encode_icns(svg_file, rasterizer=rasterizer)

    assert data[:4] == b"icns"
    (total,) = struct.unpack(">I", data[4:8])
    expected = 8 + sum(len(png_bytes(icon.size)) + 8 for icon in ICNS_TYPES)
    assert total == expected == len(data)


def test_chunks_follow_table_order(svg_file, rasterizer):
    chunks = _walk_chunks(encode_icns(svg_file, rasterizer=rasterizer))

    assert [tag for tag, _, _ in chunks] == [icon.ostype for icon in ICNS_TYPES]
    for icon, (_, length, payload) in zip(ICNS_TYPES, chunks):
        assert payload == png_bytes(icon.size)
        assert length == len(payload) + 8


def test_retina_entries_are_rendered_independently(svg_file, rasterizer):
    encode_icns(svg_file, rasterizer=rasterizer)

    assert rasterizer.calls == [icon.size for icon in ICNS_TYPES]
    assert rasterizer.calls.count(32) == 2


def test_dedupe_renders_each_size_once(svg_file):
    plain = encode_icns(svg_file, rasterizer=PngRasterizer())
    deduping = PngRasterizer()
    shared = encode_icns(svg_file, rasterizer=deduping, dedupe=True)

    assert shared == plain
    assert sorted(deduping.calls) == sorted({icon.size for icon in ICNS_TYPES})


def test_failure_names_the_type_code(svg_file):
    # ic11 is the eighth table entry.
    failing = PngRasterizer(fail_on_call=8)

    with pytest.raises(RasterizationError) as excinfo:
        encode_icns(svg_file, rasterizer=failing)

    assert excinfo.value.label == "ic11"
    assert excinfo.value.size == 32
    assert "ic11" in str(excinfo.value)


def test_build_icns_without_entries():
    assert build_icns([]) == b"icns\x00\x00\x00\x08"


def test_entry_pack_layout():
    entry = IcnsEntry("ic07", b"\x89PNG-data")
    assert entry.length == 17
    assert entry.pack() == b"ic07\x00\x00\x00\x11\x89PNG-data"


@pytest.mark.parametrize("ostype", ["ic7", "ic077", "icé7"])
def test_entry_rejects_bad_type_codes(ostype):
    with pytest.raises(SerializationError):
        IcnsEntry(ostype, b"x").pack()


def test_table_shape():
    assert len(ICNS_TYPES) == 11
    assert len({icon.ostype for icon in ICNS_TYPES}) == 11
    assert [icon.ostype for icon in ICNS_TYPES if icon.retina] == ["ic11", "ic12", "ic13", "ic14"]
    with pytest.raises(ValueError):
        IcnsType("toolong", 16)
    with pytest.raises(ValueError):
        IcnsType("ic07", 0)


def test_pillow_reads_every_entry(svg_file, rasterizer):
    data = encode_icns(svg_file, rasterizer=rasterizer)

    with Image.open(io.BytesIO(data)) as image:
        assert image.format == "ICNS"
        assert set(image.info["sizes"]) == {
            (16, 16, 1),
            (16, 16, 2),
            (32, 32, 1),
            (32, 32, 2),
            (64, 64, 1),
            (128, 128, 1),
            (128, 128, 2),
            (256, 256, 1),
            (256, 256, 2),
            (512, 512, 1),
            (512, 512, 2),
        }
        # The best entry is ic10, painted by the 1024 px render.
        assert image.size == (1024, 1024)
        image.load()
        assert image.getpixel((0, 0)) == (1024 % 256, 64, 128, 255)
