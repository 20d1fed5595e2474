"""
models/metrics.py
─────────────────
Registry of the distance metrics the matcher can rank by.

Each metric token maps to a ``Metric`` that carries the scoring function
and its orientation, so the matcher needs a single scan/sort/select path
for every metric. Composite metrics get their segment layout from
``Settings`` when they are resolved.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Callable, Optional

import numpy as np

from config.settings import Settings, get_settings
from models.distances import (
    histogram_intersection,
    multi_histogram_distance,
    ssd,
    texture_color_distance,
)
from utils.errors import ConfigurationError

DistanceFunction = Callable[[np.ndarray, np.ndarray], float]


class DistanceMetric(str, Enum):
    SSD = "ssd"
    RGB_HIST = "rgb-hist"
    MULTI_HIST = "multi-hist"
    TEXTURE_COLOR = "texture-color"


@dataclass(frozen=True)
class Metric:
    """A resolved metric: scoring function plus sort direction."""

    name: DistanceMetric
    function: DistanceFunction
    higher_is_better: bool
    description: str = ""

    def score(self, a: np.ndarray, b: np.ndarray) -> float:
        return self.function(a, b)

    def is_better(self, x: float, y: float) -> bool:
        """True if score ``x`` ranks strictly ahead of score ``y``."""
        return x > y if self.higher_is_better else x < y

    @property
    def token(self) -> str:
        return self.name.value


_DESCRIPTIONS: dict[DistanceMetric, str] = {
    DistanceMetric.SSD: "Sum of squared differences",
    DistanceMetric.RGB_HIST: "RGB histogram intersection",
    DistanceMetric.MULTI_HIST: "Weighted intersection over several concatenated histograms",
    DistanceMetric.TEXTURE_COLOR: "Weighted color-histogram and texture-histogram distance",
}


def list_metrics() -> list[str]:
    """Valid metric tokens in declaration order."""
    return [m.value for m in DistanceMetric]


def parse_metric(token: str | DistanceMetric) -> DistanceMetric:
    if isinstance(token, DistanceMetric):
        return token
    try:
        return DistanceMetric(token)
    except ValueError:
        raise ConfigurationError(
            f"Invalid distance metric: '{token}'. "
            f"Must be one of: {', '.join(list_metrics())}"
        ) from None


def get_metric(token: str | DistanceMetric | Metric, settings: Optional[Settings] = None) -> Metric:
    """
    Resolve a metric token to a ``Metric``.

    Composite metrics are bound to the histogram layout in ``settings``
    (falls back to the process settings). Unknown tokens raise
    ConfigurationError; there is no fallback metric.
    """
    if isinstance(token, Metric):
        return token
    kind = parse_metric(token)
    settings = settings or get_settings()

    if kind is DistanceMetric.SSD:
        fn: DistanceFunction = ssd
        higher = False
    elif kind is DistanceMetric.RGB_HIST:
        fn = histogram_intersection
        higher = True
    elif kind is DistanceMetric.MULTI_HIST:
        weights = settings.multi_hist_weights
        if weights is not None and len(weights) != settings.multi_hist_regions:
            raise ConfigurationError(
                f"multi_hist_weights has {len(weights)} entries for "
                f"{settings.multi_hist_regions} regions"
            )
        fn = partial(
            multi_histogram_distance,
            regions=settings.multi_hist_regions,
            weights=weights,
        )
        higher = False
    else:
        fn = partial(
            texture_color_distance,
            texture_bins=settings.texture_bins,
            texture_weight=settings.texture_weight,
        )
        higher = False

    return Metric(name=kind, function=fn, higher_is_better=higher, description=_DESCRIPTIONS[kind])


__all__ = ["DistanceMetric", "Metric", "get_metric", "list_metrics", "parse_metric"]
