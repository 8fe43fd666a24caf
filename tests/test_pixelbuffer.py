"""Tests for the shared PixelBuffer model."""

from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from pixelbuffer import PixelBuffer, clip8, luma, round_half_up


def test_channel_length_invariant():
    with pytest.raises(ValueError):
        PixelBuffer(2, 2, bytes(15))


@pytest.mark.parametrize("width, height", [(0, 3), (3, 0), (-1, 2)])
def test_empty_geometry_is_rejected(width, height):
    with pytest.raises(ValueError):
        PixelBuffer(width, height, b"")


def test_buffers_are_immutable():
    buf = PixelBuffer.filled(1, 1, (1, 2, 3))
    with pytest.raises(dataclasses.FrozenInstanceError):
        buf.width = 5
    assert isinstance(buf.channels, bytes)


def test_from_rgb_sets_opaque_alpha():
    buf = PixelBuffer.from_rgb(2, 1, bytes([1, 2, 3, 4, 5, 6]))
    assert buf.channels == bytes([1, 2, 3, 255, 4, 5, 6, 255])


def test_array_round_trip():
    rng = np.random.RandomState(0)
    arr = rng.randint(0, 256, (4, 3, 3), dtype=np.uint8)
    buf = PixelBuffer.from_array(arr)
    out = buf.to_array()
    assert out.shape == (4, 3, 4)
    assert (out[:, :, :3] == arr).all()
    assert (out[:, :, 3] == 255).all()


def test_from_array_accepts_grayscale():
    buf = PixelBuffer.from_array(np.array([[7, 9]], dtype=np.uint8))
    assert buf.pixel(1, 0) == (9, 9, 9, 255)


def test_image_export_and_gray_levels():
    buf = PixelBuffer.from_array(np.array([[(1, 2, 3), (4, 5, 6)], [(7, 8, 9), (255, 255, 255)]],
                                          dtype=np.uint8))
    img = buf.to_image()
    assert img.mode == "RGB"
    assert img.size == (2, 2)
    assert img.getpixel((0, 1)) == (7, 8, 9)
    assert buf.gray_levels() == [2, 5, 8, 255]


def test_from_array_rejects_bad_shapes():
    with pytest.raises(ValueError):
        PixelBuffer.from_array(np.zeros((2, 2, 2), dtype=np.uint8))


def test_rounding_helpers():
    assert clip8(-3) == 0
    assert clip8(300) == 255
    assert clip8(127.5) == 128
    assert clip8(126.5) == 126
    assert round_half_up(126.5) == 127
    assert luma(255, 255, 255) == 255
    assert luma(0, 0, 0) == 0
