#!/usr/bin/env python3
"""
histogram.py

Luminance histogram engine:
- 256-bin luma histogram and its cumulative distribution
- Histogram stretch (normalization to the full 0..255 range)
- Histogram equalization (grayscale)
- Rendering a histogram (with optional threshold marker) to a PIL image
"""

from __future__ import annotations
from io import BytesIO
from typing import List, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from PIL import Image

from pixelbuffer import PixelBuffer, luma, round_half_up

Histogram = List[int]


def compute_histogram(buf: PixelBuffer) -> Histogram:
    hist = [0] * 256
    for level in buf.gray_levels():
        hist[level] += 1
    return hist


def cumulative(hist: Histogram) -> Histogram:
    cdf = []
    csum = 0
    for h in hist:
        csum += h
        cdf.append(csum)
    return cdf


def mean_level(hist: Histogram) -> float:
    total = sum(hist)
    if total == 0:
        return 0.0
    return sum(i * h for i, h in enumerate(hist)) / total


# ---------------------------------------------------------------------
# Histogram Stretch
# ---------------------------------------------------------------------
def stretch_histogram(buf: PixelBuffer) -> PixelBuffer:
    """Linear stretch of every R,G,B sample from [min, max] to [0, 255]."""
    src = buf.channels
    rgb = [src[i+c] for i in range(0, len(src), 4) for c in range(3)]
    lo, hi = min(rgb), max(rgb)
    if hi == lo:
        return buf.copy()

    rng = hi - lo
    lut = list(range(256))
    for v in range(lo, hi + 1):
        lut[v] = round_half_up((v - lo) / rng * 255)
    out = bytearray(src)
    for i in range(0, len(out), 4):
        out[i] = lut[out[i]]
        out[i+1] = lut[out[i+1]]
        out[i+2] = lut[out[i+2]]
    return buf.with_channels(out)


# ---------------------------------------------------------------------
# Histogram Equalization (Grayscale)
# ---------------------------------------------------------------------
def equalize_histogram(buf: PixelBuffer) -> PixelBuffer:
    """Histogram equalization on luma, written back to all three channels."""
    # Step 1: histogram and CDF
    hist = compute_histogram(buf)
    cdf = cumulative(hist)
    total = buf.pixel_count

    # Step 2: first nonzero CDF value
    cdf_min = next(c for c in cdf if c != 0)
    if total == cdf_min:
        return buf.copy()

    # Step 3: mapping LUT
    lut = [max(0, round_half_up((c - cdf_min) / (total - cdf_min) * 255)) for c in cdf]

    # Step 4: apply mapping to pixels
    out = bytearray(buf.channels)
    for i in range(0, len(out), 4):
        v = lut[luma(out[i], out[i+1], out[i+2])]
        out[i] = out[i+1] = out[i+2] = v
    return buf.with_channels(out)


# ---------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------
def plot_histogram_image(hist: Histogram, threshold: Optional[int] = None,
                         color: str = "#3b82f6", width: int = 512, height: int = 220) -> Image.Image:
    """Bar chart of ``hist`` as a PIL image; a red line marks ``threshold``."""
    fig, ax = plt.subplots(figsize=(width/100, height/100), dpi=100)
    ax.bar(range(256), hist, width=1.0, color=color)
    ax.set_xlim(0, 255)
    ax.set_ylim(0, max(hist)*1.1 if max(hist) else 1)
    ax.set_xticks([0, 64, 128, 192, 255])
    ax.set_xlabel("Intensity")
    ax.set_ylabel("Pixel count")
    if threshold is not None:
        ax.axvline(threshold, color="#ef4444", linewidth=2)
        ax.text(threshold + 3, ax.get_ylim()[1] * 0.92, f"Threshold: {threshold}", color="#ef4444")
    buf = BytesIO()
    fig.savefig(buf, format="png", bbox_inches="tight")
    plt.close(fig)
    buf.seek(0)
    return Image.open(buf)
