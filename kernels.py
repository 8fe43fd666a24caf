#!/usr/bin/env python3
"""
kernels.py — parsing and validation of user-supplied masks

Convolution masks are any rectangular matrix of numbers. Morphology masks
(structuring elements) use 1 = member, 0 = background and, for hit-or-miss,
-1 = don't care.

Text format: one row per line, values separated by commas and/or spaces:

    0,-1,0
    -1,5,-1
    0,-1,0
"""

from __future__ import annotations
import logging
import math
import re
from typing import List, Sequence, Union

logger = logging.getLogger(__name__)

Kernel = List[List[float]]
KernelSource = Union[str, Sequence[Sequence[float]]]

MORPHOLOGY_VALUES = (-1, 0, 1)


class KernelError(ValueError):
    """Base class for mask parsing failures."""

class NotRectangular(KernelError):
    pass

class NonNumeric(KernelError):
    pass


# ------------------ Parsing ------------------

def _parse_rows(text: str) -> List[List[str]]:
    rows = []
    for line in text.strip().splitlines():
        line = line.strip()
        if not line:
            continue
        rows.append([tok for tok in re.split(r"[,\s;]+", line) if tok])
    return rows


def _to_number(value) -> float:
    if isinstance(value, bool):
        raise NonNumeric(f"Mask value is not a number: {value!r}")
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise NonNumeric(f"Mask value is not a number: {value!r}") from None
    if not math.isfinite(v):
        raise NonNumeric(f"Mask value is not finite: {value!r}")
    return int(v) if v.is_integer() else v


def parse_kernel(source: KernelSource) -> Kernel:
    """Parse ``source`` (text or nested sequence) into a rectangular numeric matrix."""
    rows = _parse_rows(source) if isinstance(source, str) else [list(row) for row in source]
    if not rows or not rows[0]:
        raise NotRectangular("Mask is empty")
    kernel = [[_to_number(v) for v in row] for row in rows]
    cols = len(kernel[0])
    for i, row in enumerate(kernel):
        if len(row) != cols:
            raise NotRectangular(f"Mask row {i + 1} has {len(row)} values, expected {cols}")
    return kernel


def parse_structuring_element(source: KernelSource) -> Kernel:
    """Like parse_kernel; values outside {-1, 0, 1} are logged but kept."""
    kernel = parse_kernel(source)
    odd = sorted({v for row in kernel for v in row if v not in MORPHOLOGY_VALUES})
    if odd:
        logger.warning("Structuring element contains values outside {-1, 0, 1}: %s", odd)
    return kernel


def kernel_weight(kernel: Kernel) -> float:
    return sum(sum(row) for row in kernel)


# ------------------ Presets ------------------

def box_kernel(size: int) -> Kernel:
    if size < 1:
        raise ValueError(f"Filter size must be at least 1, got {size}")
    return [[1] * size for _ in range(size)]

GAUSSIAN_3X3 = [[1, 2, 1], [2, 4, 2], [1, 2, 1]]
SHARPEN_3X3 = [[0, -1, 0], [-1, 5, -1], [0, -1, 0]]
SOBEL_X = [[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]]
SOBEL_Y = [[-1, -2, -1], [0, 0, 0], [1, 2, 1]]

# 3x3 cross, the default structuring element in the viewer
CROSS_3X3 = [[0, 1, 0], [1, 1, 1], [0, 1, 0]]
SQUARE_3X3 = [[1, 1, 1], [1, 1, 1], [1, 1, 1]]
