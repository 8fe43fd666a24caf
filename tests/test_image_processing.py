"""Tests for point transforms, grayscale reduction and fixed-threshold binarization."""

from __future__ import annotations

import numpy as np
import pytest

from image_processing import (
    apply_point_op,
    binarize_at,
    divide,
    grayscale_average,
    grayscale_weighted,
)
from pixelbuffer import PixelBuffer


def _buffer(*rgb) -> PixelBuffer:
    return PixelBuffer.from_array(np.array([rgb], dtype=np.uint8))


def _rgb(buf: PixelBuffer):
    return [tuple(p) for p in buf.iter_rgb()]


def _random_buffer(seed: int) -> PixelBuffer:
    rng = np.random.RandomState(seed)
    return PixelBuffer.from_array(rng.randint(0, 256, (6, 7, 3), dtype=np.uint8))


@pytest.mark.parametrize(
    "op, value, src, expected",
    [
        ("add", 100, (200, 10, 0), (255, 110, 100)),
        ("subtract", 100, (50, 150, 255), (0, 50, 155)),
        ("multiply", 2, (100, 200, 0), (200, 255, 0)),
        ("divide", 2, (100, 255, 0), (50, 128, 0)),
        ("divide", 0, (100, 255, 7), (0, 0, 0)),
        ("brightness", -30, (20, 30, 200), (0, 0, 170)),
        ("brightness", 60, (20, 200, 250), (80, 255, 255)),
    ],
)
def test_point_ops(op, value, src, expected):
    out = apply_point_op(_buffer(src), op, value)
    assert _rgb(out) == [expected]
    assert out.pixel(0, 0)[3] == 255


def test_divide_by_zero_is_defined_as_zero():
    assert divide(200, 0) == 0


def test_point_op_does_not_modify_input():
    buf = _random_buffer(1)
    before = buf.channels
    apply_point_op(buf, "add", 40)
    assert buf.channels == before


def test_unknown_point_op():
    with pytest.raises(ValueError):
        apply_point_op(_buffer((1, 2, 3)), "gamma", 2)


def test_grayscale_average_example():
    buf = PixelBuffer.from_array(np.array([
        [(255, 0, 0), (0, 255, 0)],
        [(0, 0, 255), (255, 255, 255)],
    ], dtype=np.uint8))
    assert _rgb(grayscale_average(buf)) == [(85, 85, 85), (85, 85, 85), (85, 85, 85), (255, 255, 255)]


def test_grayscale_average_is_close_to_mean():
    buf = _random_buffer(4)
    for (r, g, b), (s, s2, s3) in zip(buf.iter_rgb(), grayscale_average(buf).iter_rgb()):
        assert s == s2 == s3
        assert abs(s - (r + g + b) / 3) <= 1


def test_grayscale_weighted_uses_luma():
    assert _rgb(grayscale_weighted(_buffer((255, 0, 0), (0, 255, 0)))) == [(76, 76, 76), (150, 150, 150)]


def test_grayscale_weighted_is_idempotent():
    for seed in range(3):
        once = grayscale_weighted(_random_buffer(seed))
        assert grayscale_weighted(once) == once


def test_binarize_at_outputs_black_and_white_only():
    out = binarize_at(_random_buffer(7), 128)
    arr = out.to_array()
    assert set(np.unique(arr[:, :, :3]).tolist()) <= {0, 255}
    assert (arr[:, :, 3] == 255).all()


def test_binarize_at_threshold_is_inclusive():
    out = binarize_at(_buffer((100, 100, 100), (99, 99, 99)), 100)
    assert _rgb(out) == [(255, 255, 255), (0, 0, 0)]
