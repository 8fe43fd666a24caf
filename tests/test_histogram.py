"""Tests for the luminance histogram engine."""

from __future__ import annotations

import numpy as np
from PIL import Image

from histogram import (
    compute_histogram,
    cumulative,
    equalize_histogram,
    mean_level,
    plot_histogram_image,
    stretch_histogram,
)
from pixelbuffer import PixelBuffer


def _random_buffer(seed: int, height: int = 9, width: int = 13) -> PixelBuffer:
    rng = np.random.RandomState(seed)
    return PixelBuffer.from_array(rng.randint(0, 256, (height, width, 3), dtype=np.uint8))


def _rgbw() -> PixelBuffer:
    return PixelBuffer.from_array(np.array([
        [(255, 0, 0), (0, 255, 0)],
        [(0, 0, 255), (255, 255, 255)],
    ], dtype=np.uint8))


def test_histogram_sums_to_pixel_count():
    for seed in range(5):
        buf = _random_buffer(seed)
        hist = compute_histogram(buf)
        assert len(hist) == 256
        assert sum(hist) == buf.width * buf.height


def test_histogram_uses_bt601_luma():
    hist = compute_histogram(_rgbw())
    assert sum(hist) == 4
    assert hist[76] == 1    # red
    assert hist[150] == 1   # green
    assert hist[29] == 1    # blue
    assert hist[255] == 1   # white


def test_cumulative_is_prefix_sum():
    hist = [0] * 256
    hist[3], hist[10], hist[255] = 2, 5, 1
    cdf = cumulative(hist)
    assert cdf[2] == 0
    assert cdf[3] == 2
    assert cdf[9] == 2
    assert cdf[10] == 7
    assert cdf[-1] == 8
    assert all(a <= b for a, b in zip(cdf, cdf[1:]))


def test_mean_level():
    hist = [0] * 256
    hist[50], hist[150] = 1, 1
    assert mean_level(hist) == 100


def test_stretch_expands_to_full_range():
    arr = np.array([[[50, 50, 50], [110, 130, 70], [150, 150, 150]]], dtype=np.uint8)
    out = stretch_histogram(PixelBuffer.from_array(arr)).to_array()
    assert out[0, 0, :3].tolist() == [0, 0, 0]
    assert out[0, 2, :3].tolist() == [255, 255, 255]
    assert out[0, 1, :3].tolist() == [153, 204, 51]
    assert (out[:, :, 3] == 255).all()


def test_stretch_of_flat_image_is_unchanged():
    buf = PixelBuffer.filled(3, 3, (90, 90, 90))
    assert stretch_histogram(buf) == buf


def test_equalize_two_level_image():
    arr = np.zeros((2, 4, 3), dtype=np.uint8)
    arr[:, :2] = 50
    arr[:, 2:] = 200
    out = equalize_histogram(PixelBuffer.from_array(arr)).to_array()
    assert set(out[:, :2, :3].ravel().tolist()) == {0}
    assert set(out[:, 2:, :3].ravel().tolist()) == {255}


def test_equalize_single_level_image_is_unchanged():
    buf = PixelBuffer.filled(4, 4, (77, 77, 77))
    assert equalize_histogram(buf) == buf


def test_equalize_does_not_modify_input():
    buf = _random_buffer(11)
    before = buf.channels
    equalize_histogram(buf)
    assert buf.channels == before


def test_plot_histogram_image_renders():
    hist = compute_histogram(_random_buffer(2))
    img = plot_histogram_image(hist, threshold=100)
    assert isinstance(img, Image.Image)
    assert img.width > 0 and img.height > 0


def test_plot_histogram_image_handles_empty_histogram():
    img = plot_histogram_image([0] * 256)
    assert img.width > 0
