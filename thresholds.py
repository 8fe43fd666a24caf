#!/usr/bin/env python3
"""
thresholds.py

Histogram-based threshold selection for binarization:
- Manual threshold
- Percent-black (percentile) selection
- Iterative means (isodata)
- Maximum entropy

Each selector maps a 256-bin luma histogram to a single threshold t;
``binarize`` then produces white where luma >= t and black elsewhere.
"""

from __future__ import annotations
import math
import logging
from dataclasses import dataclass
from typing import Callable, Dict

from pixelbuffer import PixelBuffer, round_half_up
from histogram import Histogram, compute_histogram, cumulative, mean_level
from image_processing import binarize_at

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100
ENTROPY_FALLBACK_THRESHOLD = 128


@dataclass(frozen=True)
class BinarizationResult:
    buffer: PixelBuffer
    threshold: int
    strategy: str


# ------------------ Selectors ------------------

def manual_threshold(hist: Histogram, threshold: int = 128) -> int:
    return max(0, min(255, int(threshold)))


def percent_black_threshold(hist: Histogram, percent: float = 50) -> int:
    """Smallest t whose cumulative count reaches ``percent`` % of all pixels."""
    if percent <= 0:
        return 0
    target = percent / 100 * sum(hist)
    for t, c in enumerate(cumulative(hist)):
        if c >= target:
            return t
    return 255


def iterative_mean_threshold(hist: Histogram, max_iterations: int = MAX_ITERATIONS) -> int:
    """Isodata: split at t, move t to the midpoint of the two class means."""
    threshold = round_half_up(mean_level(hist))
    previous = -1
    iterations = 0
    while abs(threshold - previous) > 1 and iterations < max_iterations:
        previous = threshold

        count1 = sum(hist[:threshold])
        sum1 = sum(i * hist[i] for i in range(threshold))
        mean1 = sum1 / count1 if count1 > 0 else 0

        count2 = sum(hist[threshold:])
        sum2 = sum(i * hist[i] for i in range(threshold, 256))
        mean2 = sum2 / count2 if count2 > 0 else 255

        threshold = round_half_up((mean1 + mean2) / 2)
        iterations += 1
    logger.debug("Iterative means converged to %d after %d iterations", threshold, iterations)
    return max(0, min(255, threshold))


def _class_entropy(hist: Histogram, lo: int, hi: int, mass: int) -> float:
    h = 0.0
    for i in range(lo, hi):
        if hist[i] > 0:
            p = hist[i] / mass
            h -= p * math.log2(p)
    return h


def max_entropy_threshold(hist: Histogram) -> int:
    """t in [1, 254] maximizing the summed entropy of the two classes."""
    best_entropy = -math.inf
    best_threshold = ENTROPY_FALLBACK_THRESHOLD
    cdf = cumulative(hist)
    total = cdf[-1]
    for t in range(1, 255):
        mass1 = cdf[t-1]
        mass2 = total - mass1
        if mass1 == 0 or mass2 == 0:
            continue
        entropy = _class_entropy(hist, 0, t, mass1) + _class_entropy(hist, t, 256, mass2)
        if entropy > best_entropy:
            best_entropy = entropy
            best_threshold = t
    return best_threshold


STRATEGIES: Dict[str, Callable[..., int]] = {
    "manual": manual_threshold,
    "percent_black": percent_black_threshold,
    "iterative_mean": iterative_mean_threshold,
    "max_entropy": max_entropy_threshold,
}


def select_threshold(hist: Histogram, strategy: str, **params) -> int:
    try:
        selector = STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"Unknown binarization strategy: {strategy!r}") from None
    return selector(hist, **params)


def binarize(buf: PixelBuffer, strategy: str = "manual", **params) -> BinarizationResult:
    """Pick a threshold with ``strategy`` and binarize ``buf`` with it."""
    threshold = select_threshold(compute_histogram(buf), strategy, **params)
    logger.info("Binarizing with %s threshold %d", strategy, threshold)
    return BinarizationResult(binarize_at(buf, threshold), threshold, strategy)
