import io
import struct
import zlib

import numpy as np
import pytest
from PIL import Image

from splurt.decoder import DecodeError, decode, from_pil, load


def encode(img, fmt="PNG"):
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def _chunk(kind, data):
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


def oversized_png(width=20000, height=20000):
    """A valid PNG header claiming far more pixels than Pillow allows."""
    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _chunk(b"IHDR", header)
        + _chunk(b"IDAT", zlib.compress(b""))
        + _chunk(b"IEND", b"")
    )


def test_decode_rgb_png():
    img = Image.new("RGB", (3, 2), (10, 20, 30))
    bitmap = decode(encode(img))
    assert (bitmap.width, bitmap.height, bitmap.channels) == (3, 2, 3)
    assert bitmap.pixel(2, 1) == (10, 20, 30)


def test_decode_grayscale_keeps_one_channel():
    img = Image.new("L", (4, 4), 128)
    bitmap = decode(encode(img))
    assert bitmap.channels == 1
    assert bitmap.pixel(0, 0) == (128, 128, 128)


def test_decode_grayscale_jpeg():
    img = Image.new("L", (16, 16), 200)
    bitmap = decode(encode(img, "JPEG"))
    assert bitmap.channels == 1
    assert len(bitmap.pixels) == 16 * 16


def test_decode_rgb_jpeg():
    img = Image.new("RGB", (16, 8), (255, 0, 0))
    bitmap = decode(encode(img, "JPEG"))
    assert (bitmap.width, bitmap.height, bitmap.channels) == (16, 8, 3)
    r, g, b = bitmap.pixel(8, 4)
    assert r > 200 and g < 50 and b < 50


def test_decode_drops_alpha():
    img = Image.new("RGBA", (2, 2), (1, 2, 3, 0))
    bitmap = decode(encode(img))
    assert bitmap.channels == 3
    assert bitmap.pixel(1, 1) == (1, 2, 3)


def test_decode_palette_image():
    img = Image.new("P", (2, 2))
    img.putpalette([0, 0, 0, 255, 0, 0] + [0] * (256 * 3 - 6))
    img.putpixel((1, 0), 1)
    bitmap = decode(encode(img))
    assert bitmap.channels == 3
    assert bitmap.pixel(1, 0) == (255, 0, 0)
    assert bitmap.pixel(0, 0) == (0, 0, 0)


def test_decode_garbage():
    with pytest.raises(DecodeError, match="Cannot decode image"):
        decode(b"not an image at all")


def test_decode_truncated():
    data = encode(Image.new("RGB", (64, 64), (1, 2, 3)), "JPEG")
    with pytest.raises(DecodeError):
        decode(data[: len(data) // 2])


def test_decode_error_is_value_error():
    with pytest.raises(ValueError):
        decode(b"")


def test_load_file(tmp_path):
    path = tmp_path / "test.png"
    Image.new("RGB", (5, 3), (0, 0, 255)).save(path)
    bitmap = load(path)
    assert (bitmap.width, bitmap.height) == (5, 3)


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load(tmp_path / "missing.jpg")


def test_from_pil_cmyk():
    bitmap = from_pil(Image.new("CMYK", (1, 1), (0, 0, 0, 0)))
    assert bitmap.channels == 3
    assert bitmap.pixel(0, 0) == (255, 255, 255)


def test_decode_16_bit_grayscale_png():
    img = Image.fromarray(np.full((4, 4), 32768, dtype=np.uint16))
    bitmap = decode(encode(img))
    assert bitmap.channels == 1
    assert set(bitmap.pixels) == {128}


def test_decode_16_bit_extremes():
    arr = np.array([[0, 255, 256, 65535]], dtype=np.uint16)
    bitmap = decode(encode(Image.fromarray(arr)))
    assert list(bitmap.pixels) == [0, 0, 1, 255]


def test_from_pil_32_bit_integer():
    img = Image.fromarray(np.array([[-5, 32768, 70000]], dtype=np.int32))
    assert img.mode == "I"
    assert list(from_pil(img).pixels) == [0, 128, 255]


def test_from_pil_float():
    img = Image.fromarray(np.array([[0.0, 0.5, 1.0, 2.0]], dtype=np.float32))
    assert img.mode == "F"
    assert list(from_pil(img).pixels) == [0, 128, 255, 255]


def test_decode_oversized_image():
    with pytest.raises(DecodeError, match="Cannot decode image"):
        decode(oversized_png())
