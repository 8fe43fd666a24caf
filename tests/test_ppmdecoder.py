"""Tests for the manual PPM decoder/encoder."""

from __future__ import annotations

import struct

import numpy as np
import pytest

from pixelbuffer import PixelBuffer
from ppmdecoder import (
    DecodeError,
    InvalidHeader,
    TruncatedData,
    UnsupportedFormat,
    ValueOutOfRange,
    decode_ppm,
    decode_ppm_file,
    encode_ppm,
    ppm_header_info,
    read_ppm_header,
    save_ppm,
)

RGBW = bytes([255, 0, 0, 0, 255, 0, 0, 0, 255, 255, 255, 255])


def _p6(width: int, height: int, max_value: int, payload: bytes) -> bytes:
    return f"P6\n{width} {height}\n{max_value}\n".encode("ascii") + payload


def test_decode_p6_example_pixels():
    buf = decode_ppm(_p6(2, 2, 255, RGBW))
    assert (buf.width, buf.height, buf.max_value) == (2, 2, 255)
    assert buf.pixel(0, 0) == (255, 0, 0, 255)
    assert buf.pixel(1, 0) == (0, 255, 0, 255)
    assert buf.pixel(0, 1) == (0, 0, 255, 255)
    assert buf.pixel(1, 1) == (255, 255, 255, 255)


def test_p6_round_trip_is_byte_exact():
    rng = np.random.RandomState(3)
    payload = rng.randint(0, 256, 7 * 5 * 3, dtype=np.uint8).tobytes()
    data = _p6(7, 5, 255, payload)
    assert encode_ppm(decode_ppm(data)) == data


def test_max_sample_rescales_to_255():
    buf = decode_ppm(_p6(1, 1, 15, bytes([15, 0, 15])))
    r, g, b, a = buf.pixel(0, 0)
    assert (r, g, b, a) == (255, 0, 255, 255)


def test_sixteen_bit_big_endian():
    payload = struct.pack(">3H", 0xFFFF, 0x0000, 0x8000)
    buf = decode_ppm(_p6(1, 1, 65535, payload))
    assert buf.pixel(0, 0) == (255, 0, 128, 255)


def test_raster_may_start_with_whitespace_bytes():
    buf = decode_ppm(_p6(1, 1, 255, bytes([10, 32, 9])))
    assert buf.pixel(0, 0) == (10, 32, 9, 255)


def test_header_comments_are_skipped():
    data = b"P6\n# created by hand\n2 # width\n2\n255\n" + RGBW
    buf = decode_ppm(data)
    assert buf.pixel(1, 1) == (255, 255, 255, 255)


def test_decode_p3_ascii():
    data = b"P3\n# tiny\n2 1\n255\n255 0 0\n  0 0 255\n"
    buf = decode_ppm(data)
    assert buf.pixel(0, 0) == (255, 0, 0, 255)
    assert buf.pixel(1, 0) == (0, 0, 255, 255)


def test_decode_p3_rescales_low_max_value():
    buf = decode_ppm(b"P3 1 1 1\n1 0 1\n")
    assert buf.pixel(0, 0) == (255, 0, 255, 255)
    assert buf.max_value == 1


def test_encode_always_writes_8bit_p6():
    buf = decode_ppm(b"P3\n1 1\n15\n15 0 15\n")
    data = encode_ppm(buf)
    assert data == b"P6\n1 1\n255\n" + bytes([255, 0, 255])


def test_read_header_fields():
    header = read_ppm_header(_p6(3, 2, 1000, b"\x00" * 36))
    assert (header.magic, header.width, header.height, header.max_value) == ("P6", 3, 2, 1000)
    assert header.bytes_per_component == 2
    assert header.expected_bytes == 36


@pytest.mark.parametrize(
    "data, error",
    [
        (b"P5\n1 1\n255\n\x00", UnsupportedFormat),
        (b"", UnsupportedFormat),
        (b"P6\n0 2\n255\n", InvalidHeader),
        (b"P6\nabc 2\n255\n", InvalidHeader),
        (b"P6\n2 -2\n255\n", InvalidHeader),
        (b"P6\n2 2\n0\n", InvalidHeader),
        (b"P6\n2 2\n70000\n", InvalidHeader),
        (b"P6\n2 2\n", InvalidHeader),
        (b"P6\n2 2\n255\n" + b"\x00" * 11, TruncatedData),
        (b"P6\n1 1\n65535\n" + b"\x00" * 5, TruncatedData),
        (b"P3\n2 1\n255\n1 2 3 4 5\n", TruncatedData),
        (b"P3\n1 1\n255\n300 0 0\n", ValueOutOfRange),
        (b"P3\n1 1\n255\n-1 0 0\n", ValueOutOfRange),
        (b"P3\n1 1\n255\nx 0 0\n", ValueOutOfRange),
    ],
)
def test_decode_errors(data, error):
    with pytest.raises(error):
        decode_ppm(data)


def test_p3_huge_header_with_short_raster_is_truncated():
    # 100000 x 100000 would need 30 GB of samples; the raster holds three
    with pytest.raises(TruncatedData):
        decode_ppm(b"P3\n100000 100000\n255\n0 0 0\n")


def test_p3_minimal_separators_are_enough():
    buf = decode_ppm(b"P3\n1 1\n255\n1 2 3")
    assert buf.pixel(0, 0) == (1, 2, 3, 255)


def test_decode_errors_share_base_class():
    for cls in (UnsupportedFormat, InvalidHeader, TruncatedData, ValueOutOfRange):
        assert issubclass(cls, DecodeError)
        assert issubclass(cls, ValueError)


def test_file_helpers(tmp_path):
    buf = PixelBuffer.from_rgb(2, 2, RGBW)
    path = tmp_path / "image.ppm"
    save_ppm(buf, path)
    assert decode_ppm_file(path) == buf

    info = ppm_header_info(path)
    assert info["Filename"] == "image.ppm"
    assert info["Max Value"] == 255
    assert info["Image Dimensions"] == "2 × 2"
