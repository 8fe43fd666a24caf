#!/usr/bin/env python3
"""
morphology.py

Binary morphology over a structuring element, evaluated on R, G and B
independently (intended for images that are already binarized):
- Erosion / dilation, opening / closing
- Hit-or-miss (1 = foreground, 0 = background, -1 = don't care)
- Thinning / thickening driven by hit-or-miss matches
"""

from __future__ import annotations
from typing import Callable, Dict, List

from pixelbuffer import PixelBuffer, FOREGROUND_LEVEL
from kernels import Kernel, KernelSource, parse_structuring_element
from filters import split_planes, merge_planes, window_taps


def _member_offsets(kernel: Kernel, value: int):
    hy, hx = len(kernel) // 2, len(kernel[0]) // 2
    return [(ky - hy, kx - hx, value)
            for ky, row in enumerate(kernel) for kx, v in enumerate(row) if v == value]


def _rank_filter(buf: PixelBuffer, kernel: Kernel, pick: Callable) -> PixelBuffer:
    """``pick`` (min or max) over in-bounds members; pixels with none keep their value."""
    w, h = buf.width, buf.height
    offsets = _member_offsets(kernel, 1)
    planes = split_planes(buf)
    out = [bytearray(p) for p in planes]
    for y in range(h):
        for x in range(w):
            taps = window_taps(w, h, x, y, offsets)
            if not taps:
                continue
            i = y * w + x
            for c in range(3):
                p = planes[c]
                out[c][i] = pick(p[j] for j, _ in taps)
    return merge_planes(buf, out)


# ------------------ Erosion / Dilation ------------------

def dilation(buf: PixelBuffer, kernel: KernelSource) -> PixelBuffer:
    return _rank_filter(buf, parse_structuring_element(kernel), max)

def erosion(buf: PixelBuffer, kernel: KernelSource) -> PixelBuffer:
    return _rank_filter(buf, parse_structuring_element(kernel), min)

def opening(buf: PixelBuffer, kernel: KernelSource) -> PixelBuffer:
    k = parse_structuring_element(kernel)
    return _rank_filter(_rank_filter(buf, k, min), k, max)

def closing(buf: PixelBuffer, kernel: KernelSource) -> PixelBuffer:
    k = parse_structuring_element(kernel)
    return _rank_filter(_rank_filter(buf, k, max), k, min)


MORPHOLOGY_OPS: Dict[str, Callable[[PixelBuffer, KernelSource], PixelBuffer]] = {
    "erosion": erosion,
    "dilation": dilation,
    "opening": opening,
    "closing": closing,
}


def morphology(buf: PixelBuffer, kernel: KernelSource, op: str) -> PixelBuffer:
    try:
        fn = MORPHOLOGY_OPS[op]
    except KeyError:
        raise ValueError(f"Unknown morphology operation: {op!r}") from None
    return fn(buf, kernel)


# ------------------ Hit-or-miss ------------------

def hit_or_miss_planes(buf: PixelBuffer, kernel: Kernel) -> List[bytearray]:
    """Per channel, 1 where every 1-cell sits on foreground and every 0-cell on background."""
    w, h = buf.width, buf.height
    hits = _member_offsets(kernel, 1)
    misses = _member_offsets(kernel, 0)
    planes = split_planes(buf)
    matches = [bytearray(w * h) for _ in range(3)]
    for y in range(h):
        for x in range(w):
            i = y * w + x
            for c in range(3):
                p = planes[c]
                ok = True
                for dy, dx, _ in hits:
                    py, px = y + dy, x + dx
                    # outside the image counts as background
                    if not (0 <= py < h and 0 <= px < w) or p[py * w + px] <= FOREGROUND_LEVEL:
                        ok = False
                        break
                if ok:
                    for dy, dx, _ in misses:
                        py, px = y + dy, x + dx
                        if 0 <= py < h and 0 <= px < w and p[py * w + px] > FOREGROUND_LEVEL:
                            ok = False
                            break
                matches[c][i] = 1 if ok else 0
    return matches


def hit_or_miss(buf: PixelBuffer, kernel: KernelSource, mode: str = "match") -> PixelBuffer:
    """
    mode="match": new binary image, white where the pattern matches.
    mode="thinning": source with matched pixels set to background.
    mode="thickening": source with matched pixels set to foreground.
    """
    k = parse_structuring_element(kernel)
    matches = hit_or_miss_planes(buf, k)
    if mode == "match":
        planes = [bytes(255 if m else 0 for m in plane) for plane in matches]
    elif mode in ("thinning", "thickening"):
        level = 0 if mode == "thinning" else 255
        planes = []
        for src, plane in zip(split_planes(buf), matches):
            planes.append(bytes(level if m else v for v, m in zip(src, plane)))
    else:
        raise ValueError(f"Unknown hit-or-miss mode: {mode!r}")
    return merge_planes(buf, planes)


def thinning(buf: PixelBuffer, kernel: KernelSource) -> PixelBuffer:
    return hit_or_miss(buf, kernel, "thinning")

def thickening(buf: PixelBuffer, kernel: KernelSource) -> PixelBuffer:
    return hit_or_miss(buf, kernel, "thickening")
