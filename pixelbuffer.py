#!/usr/bin/env python3
"""
pixelbuffer.py — shared RGBA pixel model for the image lab

A PixelBuffer is width × height interleaved RGBA bytes, every sample already
normalized to 0..255 and alpha always 255. Buffers are never mutated: every
operation builds a new one.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import List, Tuple, Iterator

import numpy as np
from PIL import Image

# ITU-R BT.601 luma weights
LUMA_R, LUMA_G, LUMA_B = 0.299, 0.587, 0.114

# Samples above this level count as foreground in binary images
FOREGROUND_LEVEL = 128


# ------------------ Utility functions ------------------

def clip8(x) -> int:
    """Round (half-to-even, like a clamped byte array) and clip to 0..255."""
    v = round(x)
    return 0 if v < 0 else (255 if v > 255 else v)

def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))

def luma(r: int, g: int, b: int) -> int:
    """Integer luminance: round(0.299R + 0.587G + 0.114B)."""
    return round_half_up(LUMA_R * r + LUMA_G * g + LUMA_B * b)


# ------------------ PixelBuffer ------------------

@dataclass(frozen=True)
class PixelBuffer:
    width: int
    height: int
    channels: bytes
    max_value: int = 255

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width} × {self.height}")
        if not isinstance(self.channels, bytes):
            object.__setattr__(self, "channels", bytes(self.channels))
        expected = self.width * self.height * 4
        if len(self.channels) != expected:
            raise ValueError(f"Channel data has {len(self.channels)} bytes, expected {expected}")

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        i = (y * self.width + x) * 4
        c = self.channels
        return c[i], c[i+1], c[i+2], c[i+3]

    def iter_rgb(self) -> Iterator[Tuple[int, int, int]]:
        c = self.channels
        for i in range(0, len(c), 4):
            yield c[i], c[i+1], c[i+2]

    def gray_levels(self) -> List[int]:
        """Luma of every pixel in row-major order."""
        return [luma(r, g, b) for (r, g, b) in self.iter_rgb()]

    def with_channels(self, channels) -> "PixelBuffer":
        """New buffer of the same geometry holding ``channels``."""
        return PixelBuffer(self.width, self.height, bytes(channels), self.max_value)

    def copy(self) -> "PixelBuffer":
        return self.with_channels(self.channels)

    # ---- constructors ----
    @classmethod
    def from_rgb(cls, width: int, height: int, rgb, max_value: int = 255) -> "PixelBuffer":
        """Build from packed R,G,B bytes (3 per pixel); alpha is set to 255."""
        rgb = bytes(rgb)
        out = bytearray(b"\xff" * (width * height * 4))
        out[0::4] = rgb[0::3]
        out[1::4] = rgb[1::3]
        out[2::4] = rgb[2::3]
        return cls(width, height, bytes(out), max_value)

    @classmethod
    def filled(cls, width: int, height: int, rgb: Tuple[int, int, int]) -> "PixelBuffer":
        r, g, b = (clip8(v) for v in rgb)
        return cls(width, height, bytes((r, g, b, 255)) * (width * height))

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "PixelBuffer":
        """From a uint8 array shaped H×W (gray), H×W×3 (RGB) or H×W×4 (RGBA)."""
        arr = np.asarray(arr)
        if arr.ndim == 2:
            arr = np.stack([arr, arr, arr], axis=-1)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError(f"Unsupported array shape {arr.shape}")
        arr = np.clip(arr, 0, 255).astype(np.uint8)
        h, w = arr.shape[:2]
        rgba = np.full((h, w, 4), 255, dtype=np.uint8)
        rgba[:, :, :3] = arr[:, :, :3]
        return cls(w, h, rgba.tobytes())

    @classmethod
    def from_image(cls, img: Image.Image) -> "PixelBuffer":
        return cls.from_array(np.array(img.convert("RGB")))

    # ---- exporters ----
    def to_array(self) -> np.ndarray:
        return np.frombuffer(self.channels, dtype=np.uint8).reshape(self.height, self.width, 4).copy()

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.to_array()[:, :, :3]))
