# image_processing.py
"""
Manual point-processing methods for the PPM lab.
Per-pixel, per-channel arithmetic on R,G,B (alpha untouched), grayscale
reduction and fixed-threshold binarization. Every function returns a new
PixelBuffer; inputs are never modified.
"""

from typing import Callable, Dict, List

from pixelbuffer import PixelBuffer, clip8, luma


def _apply_lut(buf: PixelBuffer, lut: List[int]) -> PixelBuffer:
    out = bytearray(buf.channels)
    for i in range(0, len(out), 4):
        out[i] = lut[out[i]]
        out[i+1] = lut[out[i+1]]
        out[i+2] = lut[out[i+2]]
    return buf.with_channels(out)


# ---------------------------------------------------------------------
# 1. Arithmetic point transforms
# ---------------------------------------------------------------------
def add(v: int, k: float) -> float:
    return min(255, v + k)

def subtract(v: int, k: float) -> float:
    return max(0, v - k)

def multiply(v: int, k: float) -> float:
    return min(255, v * k)

def divide(v: int, k: float) -> float:
    """Division by zero maps every sample to 0."""
    return 0 if k == 0 else min(255, v / k)

def brightness(v: int, k: float) -> float:
    return min(255, max(0, v + k))


POINT_OPS: Dict[str, Callable[[int, float], float]] = {
    "add": add,
    "subtract": subtract,
    "multiply": multiply,
    "divide": divide,
    "brightness": brightness,
}


def apply_point_op(buf: PixelBuffer, op: str, value: float) -> PixelBuffer:
    """Apply one of POINT_OPS with parameter ``value`` to every R,G,B sample."""
    try:
        fn = POINT_OPS[op]
    except KeyError:
        raise ValueError(f"Unknown point operation: {op!r}") from None
    # Precompute LUT
    lut = [clip8(fn(v, value)) for v in range(256)]
    return _apply_lut(buf, lut)


# ---------------------------------------------------------------------
# 2. Grayscale Transformation
# ---------------------------------------------------------------------
def grayscale_average(buf: PixelBuffer) -> PixelBuffer:
    """s = (R + G + B) / 3 on all three channels."""
    out = bytearray(buf.channels)
    for i in range(0, len(out), 4):
        s = clip8((out[i] + out[i+1] + out[i+2]) / 3)
        out[i] = out[i+1] = out[i+2] = s
    return buf.with_channels(out)

def grayscale_weighted(buf: PixelBuffer) -> PixelBuffer:
    """s = 0.299R + 0.587G + 0.114B on all three channels."""
    out = bytearray(buf.channels)
    for i in range(0, len(out), 4):
        s = luma(out[i], out[i+1], out[i+2])
        out[i] = out[i+1] = out[i+2] = s
    return buf.with_channels(out)


# ---------------------------------------------------------------------
# 3. Threshold (Black/White)
# ---------------------------------------------------------------------
def binarize_at(buf: PixelBuffer, threshold: int) -> PixelBuffer:
    """White where luma >= threshold, black elsewhere."""
    out = bytearray(buf.channels)
    for i in range(0, len(out), 4):
        v = 255 if luma(out[i], out[i+1], out[i+2]) >= threshold else 0
        out[i] = out[i+1] = out[i+2] = v
    return buf.with_channels(out)
