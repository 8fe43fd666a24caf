#!/usr/bin/env python3
"""
image_loader.py — loading/saving images and the viewer's working buffers

- PPM/PNM files go through the manual decoder in ppmdecoder.py
- JPEG/PNG/BMP files are decoded with Pillow and normalized to RGBA, alpha 255
- Export as PPM (P6) or JPEG
- ImageSession keeps the decode-time ``original`` next to the ``current`` buffer
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Callable, Optional

from PIL import Image, UnidentifiedImageError

from pixelbuffer import PixelBuffer
from ppmdecoder import DecodeError, decode_ppm_file, save_ppm
from thresholds import BinarizationResult, binarize

logger = logging.getLogger(__name__)

PPM_EXTENSIONS = {".ppm", ".pnm"}
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp"}
DEFAULT_JPEG_QUALITY = 90


def load_image(path: Path) -> PixelBuffer:
    """Decode ``path`` into a PixelBuffer; raises DecodeError on unreadable input."""
    path = Path(path)
    if path.suffix.lower() in PPM_EXTENSIONS:
        return decode_ppm_file(path)
    try:
        with Image.open(path) as img:
            buf = PixelBuffer.from_image(img)
    except (UnidentifiedImageError, OSError) as e:
        raise DecodeError(f"Cannot read image {path.name}: {e}") from e
    logger.debug("Loaded %s (%dx%d) with Pillow", path.name, buf.width, buf.height)
    return buf


def save_jpeg(buf: PixelBuffer, path: Path, quality: int = DEFAULT_JPEG_QUALITY) -> None:
    quality = max(1, min(100, int(quality)))
    buf.to_image().save(Path(path), format="JPEG", quality=quality)
    logger.info("Saved %dx%d JPEG (quality %d) to %s", buf.width, buf.height, quality, path)


def save_image(buf: PixelBuffer, path: Path, quality: int = DEFAULT_JPEG_QUALITY) -> None:
    path = Path(path)
    if path.suffix.lower() in (".jpg", ".jpeg"):
        save_jpeg(buf, path, quality)
    else:
        save_ppm(buf, path)


class ImageSession:
    """``original`` never changes after a load; operations replace ``current``."""

    def __init__(self):
        self.original: Optional[PixelBuffer] = None
        self.current: Optional[PixelBuffer] = None
        self.path: Optional[Path] = None
        self.threshold: Optional[int] = None

    @property
    def loaded(self) -> bool:
        return self.current is not None

    def load(self, path: Path) -> PixelBuffer:
        # decode first so a failure leaves both buffers untouched
        buf = load_image(path)
        self.original = buf
        self.current = buf
        self.path = Path(path)
        self.threshold = None
        return buf

    def apply(self, fn: Callable[..., PixelBuffer], *args, **kwargs) -> PixelBuffer:
        if self.current is None:
            raise RuntimeError("No image loaded")
        self.current = fn(self.current, *args, **kwargs)
        return self.current

    def binarize(self, strategy: str, **params) -> BinarizationResult:
        if self.current is None:
            raise RuntimeError("No image loaded")
        result = binarize(self.current, strategy, **params)
        self.current = result.buffer
        self.threshold = result.threshold
        return result

    def reset(self) -> PixelBuffer:
        if self.original is None:
            raise RuntimeError("No image loaded")
        self.current = self.original.copy()
        self.threshold = None
        return self.current
