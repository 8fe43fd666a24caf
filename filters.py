#!/usr/bin/env python3
"""
filters.py

Spatial domain filters for the PPM lab, applied to R, G and B independently:
- Generic convolution (any rectangular mask, divisor, offset, border policy)
- Averaging (N×N box), Gaussian 3x3, sharpen, custom masks
- Gradient magnitude via Sobel operator
- Median filter (N×N window)

Out-of-image taps are never read: they are dropped from the sum (and from the
window, for the median), not padded.
"""

from __future__ import annotations
import math
from typing import List, Tuple

from pixelbuffer import PixelBuffer, clip8
from kernels import (
    KernelSource, parse_kernel, kernel_weight, box_kernel,
    GAUSSIAN_3X3, SHARPEN_3X3, SOBEL_X, SOBEL_Y,
)

BORDER_POLICIES = ("omit", "renormalize")

# ------------------ Utility functions ------------------

def split_planes(buf: PixelBuffer) -> List[bytes]:
    """R, G, B planes in row-major order."""
    return [buf.channels[c::4] for c in range(3)]

def merge_planes(buf: PixelBuffer, planes) -> PixelBuffer:
    out = bytearray(buf.channels)
    for c in range(3):
        out[c::4] = bytes(planes[c])
    return buf.with_channels(out)

def window_taps(width: int, height: int, x: int, y: int, offsets) -> List[Tuple[int, float]]:
    """(flat index, weight) for every offset whose sample lies inside the image."""
    taps = []
    for dy, dx, wgt in offsets:
        py, px = y + dy, x + dx
        if 0 <= py < height and 0 <= px < width:
            taps.append((py * width + px, wgt))
    return taps

def _offsets(rows: int, cols: int, kernel=None):
    hy, hx = rows // 2, cols // 2
    return [(ky - hy, kx - hx, kernel[ky][kx] if kernel else 1)
            for ky in range(rows) for kx in range(cols)]

# ------------------ Convolution / Median ------------------

def convolve(buf: PixelBuffer, kernel: KernelSource, divisor: float = 1, offset: float = 0,
             border: str = "omit") -> PixelBuffer:
    """
    out = clamp(sum(sample * weight) / divisor + offset, 0, 255) per channel.

    border="omit" divides by ``divisor`` everywhere. border="renormalize"
    scales the divisor by the share of (positive) kernel weight that fell
    inside the image, so a uniform image is left unchanged by smoothing masks.
    """
    k = parse_kernel(kernel)
    if divisor == 0:
        raise ValueError("Convolution divisor must be non-zero")
    if border not in BORDER_POLICIES:
        raise ValueError(f"Unknown border policy: {border!r}")

    w, h = buf.width, buf.height
    offsets = [o for o in _offsets(len(k), len(k[0]), k) if o[2] != 0]
    total_weight = kernel_weight(k)
    renormalize = border == "renormalize" and total_weight > 0

    planes = split_planes(buf)
    out = [bytearray(w * h) for _ in range(3)]
    for y in range(h):
        for x in range(w):
            taps = window_taps(w, h, x, y, offsets)
            d = divisor
            if renormalize and len(taps) < len(offsets):
                inside = sum(wgt for _, wgt in taps)
                if inside > 0:
                    d = divisor * inside / total_weight
            i = y * w + x
            for c in range(3):
                p = planes[c]
                s = sum(p[j] * wgt for j, wgt in taps)
                out[c][i] = clip8(s / d + offset)
    return merge_planes(buf, out)


def median_filter(buf: PixelBuffer, size: int = 3) -> PixelBuffer:
    """Median of the in-bounds samples of a size×size window, per channel."""
    if size < 1:
        raise ValueError(f"Filter size must be at least 1, got {size}")
    w, h = buf.width, buf.height
    offsets = _offsets(size, size)
    planes = split_planes(buf)
    out = [bytearray(w * h) for _ in range(3)]
    for y in range(h):
        for x in range(w):
            taps = window_taps(w, h, x, y, offsets)
            i = y * w + x
            for c in range(3):
                p = planes[c]
                win = sorted(p[j] for j, _ in taps)
                out[c][i] = win[len(win) // 2]
    return merge_planes(buf, out)

# ------------------ Filters ------------------

def apply_averaging(buf: PixelBuffer, size: int = 3) -> PixelBuffer:
    """N×N box mean; border pixels average only their in-image neighbours."""
    return convolve(buf, box_kernel(size), size * size, border="renormalize")

def apply_gaussian(buf: PixelBuffer) -> PixelBuffer:
    return convolve(buf, GAUSSIAN_3X3, 16)

def apply_sharpen(buf: PixelBuffer) -> PixelBuffer:
    return convolve(buf, SHARPEN_3X3, 1)

def apply_custom_mask(buf: PixelBuffer, mask: KernelSource, divisor: float = 1,
                      offset: float = 0) -> PixelBuffer:
    """Validate a user mask (raises KernelError) and convolve with it."""
    return convolve(buf, parse_kernel(mask), divisor, offset)

def apply_sobel_gradient(buf: PixelBuffer) -> PixelBuffer:
    """Sobel gradient magnitude per channel; the outermost ring is copied unchanged."""
    w, h = buf.width, buf.height
    planes = split_planes(buf)
    out = [bytearray(p) for p in planes]
    for y in range(1, h - 1):
        for x in range(1, w - 1):
            i = y * w + x
            for c in range(3):
                p = planes[c]
                gx = gy = 0
                for ky in range(3):
                    row = (y + ky - 1) * w + x - 1
                    for kx in range(3):
                        v = p[row + kx]
                        gx += v * SOBEL_X[ky][kx]
                        gy += v * SOBEL_Y[ky][kx]
                out[c][i] = clip8(math.sqrt(gx*gx + gy*gy))
    return merge_planes(buf, out)
