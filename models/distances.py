"""
models/distances.py
═══════════════════
Distance Library: one pure function per supported metric.

Every function takes two equal-length 1-D numeric vectors and returns a
single float. Elementwise terms are computed with NumPy; the final
reduction goes through ``math.fsum`` so the score is exactly rounded and
does not depend on summation order (bitwise reproducible across calls).

Metric                     Function                      Orientation
─────────────────────────  ────────────────────────────  ────────────────────
SSD                        ssd                           lower  = more similar
RGB histogram intersection histogram_intersection        higher = more similar
Multi-histogram            multi_histogram_distance      lower  = more similar
Texture-color              texture_color_distance        lower  = more similar

Composite layouts
─────────────────
  multi-hist     [ hist_1 | hist_2 | … | hist_R ]   R equal-length segments
  texture-color  [ color hist | texture hist ]       texture hist is the tail

Histograms are expected to be normalised (each segment sums to 1); the
composite distances then lie in [0, 1]. This is not enforced.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np

from utils.errors import VectorShapeError

ArrayLike = Sequence[float] | np.ndarray


# ─────────────────────────────────────────────────────────────────────────────
#  Shape validation
# ─────────────────────────────────────────────────────────────────────────────

def _as_pair(a: ArrayLike, b: ArrayLike) -> tuple[np.ndarray, np.ndarray]:
    """Convert both inputs to float64 arrays and reject shapes that cannot be compared."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.ndim != 1 or vb.ndim != 1:
        raise VectorShapeError(
            f"Vectors must be one-dimensional, got shapes {va.shape} and {vb.shape}"
        )
    if va.shape[0] != vb.shape[0]:
        raise VectorShapeError(
            f"Vector length mismatch: {va.shape[0]} vs {vb.shape[0]}"
        )
    if va.shape[0] == 0:
        raise VectorShapeError("Vectors must not be empty")
    return va, vb


def _intersection(va: np.ndarray, vb: np.ndarray) -> float:
    return math.fsum(np.minimum(va, vb))


# ─────────────────────────────────────────────────────────────────────────────
#  Base metrics
# ─────────────────────────────────────────────────────────────────────────────

def ssd(a: ArrayLike, b: ArrayLike) -> float:
    """Sum of squared differences. 0.0 for identical vectors."""
    va, vb = _as_pair(a, b)
    diff = va - vb
    return math.fsum(diff * diff)


def histogram_intersection(a: ArrayLike, b: ArrayLike) -> float:
    """Sum over bins of ``min(a[i], b[i])``. Higher means more overlap."""
    va, vb = _as_pair(a, b)
    return _intersection(va, vb)


# ─────────────────────────────────────────────────────────────────────────────
#  Composite metrics
# ─────────────────────────────────────────────────────────────────────────────

def _normalised_weights(weights: Optional[Sequence[float]], regions: int) -> np.ndarray:
    if weights is None:
        return np.full(regions, 1.0 / regions)
    w = np.asarray(weights, dtype=np.float64)
    if w.shape != (regions,):
        raise ValueError(f"Expected {regions} weights, got {len(weights)}")
    if np.any(w < 0) or w.sum() <= 0:
        raise ValueError("Weights must be non-negative and sum to a positive value")
    return w / math.fsum(w)


def multi_histogram_distance(
    a: ArrayLike,
    b: ArrayLike,
    regions: int = 2,
    weights: Optional[Sequence[float]] = None,
) -> float:
    """
    Dissimilarity between two vectors of ``regions`` concatenated histograms.

    Each segment is compared by histogram intersection; the weighted sum of
    the per-segment intersections is subtracted from 1, so identical
    normalised histograms score 0.0.
    """
    if regions < 1:
        raise ValueError(f"regions must be a positive integer, got {regions}")
    va, vb = _as_pair(a, b)
    n = va.shape[0]
    if n % regions != 0:
        raise VectorShapeError(
            f"Vector length {n} cannot be split into {regions} equal histograms"
        )
    w = _normalised_weights(weights, regions)
    step = n // regions
    terms = [
        w[k] * _intersection(va[k * step:(k + 1) * step], vb[k * step:(k + 1) * step])
        for k in range(regions)
    ]
    return 1.0 - math.fsum(terms)


def texture_color_distance(
    a: ArrayLike,
    b: ArrayLike,
    texture_bins: Optional[int] = None,
    texture_weight: float = 0.5,
) -> float:
    """
    Weighted sum of a color-histogram distance and a texture-histogram distance.

    The vector is the color histogram followed by ``texture_bins`` texture
    bins (half the vector when ``texture_bins`` is None). Each part is scored
    as ``1 - intersection``.
    """
    if not 0.0 <= texture_weight <= 1.0:
        raise ValueError(f"texture_weight must lie in [0, 1], got {texture_weight}")
    va, vb = _as_pair(a, b)
    n = va.shape[0]
    if texture_bins is None:
        if n % 2 != 0:
            raise VectorShapeError(
                f"Vector length {n} cannot be split evenly into color and texture halves"
            )
        texture_bins = n // 2
    if not 0 < texture_bins < n:
        raise VectorShapeError(
            f"texture_bins={texture_bins} leaves no room for both parts of a {n}-value vector"
        )
    split = n - texture_bins
    color_dist = 1.0 - _intersection(va[:split], vb[:split])
    texture_dist = 1.0 - _intersection(va[split:], vb[split:])
    return math.fsum([(1.0 - texture_weight) * color_dist, texture_weight * texture_dist])


__all__ = [
    "ssd",
    "histogram_intersection",
    "multi_histogram_distance",
    "texture_color_distance",
]
