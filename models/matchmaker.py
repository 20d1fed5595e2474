"""
models/matchmaker.py
════════════════════
Top-N matching over a precomputed, in-memory set of feature vectors.

Algorithm
─────────
  1. Locate the query record by exact name (first occurrence wins).
  2. Score every other record against the query vector with the selected
     metric: a full O(n) scan, no pruning.
  3. Stable sort: ascending for distance metrics (ssd, multi-hist,
     texture-color), descending for similarity metrics (rgb-hist). Equal
     scores keep dataset order.
  4. Keep the first min(N, n - 1) entries and map indices back to names.

The dataset is never mutated and the engine keeps no per-query state, so a
dataset may be shared by any number of readers.

Usage
─────
  from utils.data_loader import load_features
  from models.matchmaker import MatchingEngine, find_top_n

  dataset = load_features("data/features.csv")
  names   = find_top_n("pic.0164.jpg", dataset, 3, "ssd")

  engine  = MatchingEngine(dataset)
  result  = engine.match("pic.0164.jpg", top_n=3, metric="rgb-hist")
  result.names, result.candidates
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Sequence

import numpy as np

from config.settings import Settings, get_settings
from models.metrics import DistanceMetric, Metric, get_metric
from utils.errors import NotFoundError, VectorShapeError
from utils.logger import logger


# ─────────────────────────────────────────────────────────────────────────────
#  Data model
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True, eq=False)
class FeatureRecord:
    """One named feature vector. The vector is a read-only float64 array."""

    name: str
    vector: np.ndarray

    def __post_init__(self) -> None:
        vec = np.array(self.vector, dtype=np.float64)
        if vec.ndim != 1:
            raise VectorShapeError(
                f"Record '{self.name}' vector must be one-dimensional, got shape {vec.shape}"
            )
        vec.setflags(write=False)
        object.__setattr__(self, "vector", vec)

    def __len__(self) -> int:
        return int(self.vector.shape[0])


class FeatureDataset:
    """
    Ordered, read-only sequence of FeatureRecord.

    Order is the insertion order of the source. Names are not required to
    be unique; lookups return the first occurrence.
    """

    def __init__(self, records: Iterable[FeatureRecord]) -> None:
        self._records: tuple[FeatureRecord, ...] = tuple(records)

    @classmethod
    def from_pairs(
        cls, names: Sequence[str], vectors: Sequence[Sequence[float]] | np.ndarray
    ) -> "FeatureDataset":
        """Build a dataset from index-aligned names and vectors."""
        if len(names) != len(vectors):
            raise ValueError(
                f"names and vectors must be aligned: {len(names)} names, {len(vectors)} vectors"
            )
        return cls(FeatureRecord(str(n), v) for n, v in zip(names, vectors))

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FeatureRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> FeatureRecord:
        return self._records[index]

    @property
    def names(self) -> list[str]:
        return [r.name for r in self._records]

    @property
    def dimensions(self) -> set[int]:
        """Distinct vector lengths present in the dataset."""
        return {len(r) for r in self._records}

    def index_of(self, name: str) -> int:
        for i, record in enumerate(self._records):
            if record.name == name:
                return i
        raise NotFoundError(name)

    def summary(self) -> str:
        dims = sorted(self.dimensions)
        dim_text = ", ".join(str(d) for d in dims) if dims else "-"
        return f"{len(self):,} records × {dim_text} values"


@dataclass(frozen=True)
class ScoredCandidate:
    score: float
    index: int


@dataclass
class MatchResult:
    """Best-first matches for one query. ``names`` is what a renderer consumes."""

    query: str
    metric: DistanceMetric
    candidates: list[ScoredCandidate] = field(default_factory=list)
    names: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.names)

    def pairs(self) -> list[tuple[str, float]]:
        return [(n, c.score) for n, c in zip(self.names, self.candidates)]


# ─────────────────────────────────────────────────────────────────────────────
#  Matcher
# ─────────────────────────────────────────────────────────────────────────────

def rank_candidates(
    query_name: str,
    dataset: FeatureDataset,
    metric: Metric | DistanceMetric | str,
) -> list[ScoredCandidate]:
    """Score every non-query record and return them best-first."""
    metric = get_metric(metric)
    target_index = dataset.index_of(query_name)
    target = dataset[target_index].vector

    scored: list[ScoredCandidate] = []
    for i, record in enumerate(dataset):
        if i == target_index:
            continue
        if len(record) != target.shape[0]:
            raise VectorShapeError(
                f"Record '{record.name}' has {len(record)} values, "
                f"query '{query_name}' has {target.shape[0]}"
            )
        scored.append(ScoredCandidate(score=metric.score(record.vector, target), index=i))

    # sorted() is stable and keeps tie order under reverse=True
    return sorted(scored, key=lambda c: c.score, reverse=metric.higher_is_better)


def find_top_n(
    query_name: str,
    dataset: FeatureDataset,
    top_n: int,
    metric: Metric | DistanceMetric | str,
) -> list[str]:
    """Names of the ``top_n`` records most similar to ``query_name``, best first."""
    if top_n < 1:
        raise ValueError(f"top_n must be a positive integer, got {top_n}")
    ranked = rank_candidates(query_name, dataset, metric)
    return [dataset[c.index].name for c in ranked[:top_n]]


class MatchingEngine:
    """
    Parameters
    ----------
    dataset  : records to search; not copied and never modified
    settings : defaults for N and metric, and the composite-metric layout
    """

    def __init__(self, dataset: FeatureDataset, settings: Optional[Settings] = None) -> None:
        self.dataset = dataset
        self.settings = settings or get_settings()
        logger.info(f"MatchingEngine ready — {dataset.summary()}")
        if len(dataset.dimensions) > 1:
            logger.warning(
                f"Dataset mixes vector lengths {sorted(dataset.dimensions)}; "
                "queries against mismatched records will fail"
            )

    def match(
        self,
        query_name: str,
        top_n: Optional[int] = None,
        metric: Metric | DistanceMetric | str | None = None,
    ) -> MatchResult:
        top_n = self.settings.top_n if top_n is None else top_n
        if top_n < 1:
            raise ValueError(f"top_n must be a positive integer, got {top_n}")
        resolved = get_metric(
            self.settings.distance_metric if metric is None else metric,
            self.settings,
        )

        ranked = rank_candidates(query_name, self.dataset, resolved)
        for c in ranked:
            logger.debug(f"  {self.dataset[c.index].name}: {c.score:.6g}")

        top = ranked[:top_n]
        result = MatchResult(
            query=query_name,
            metric=resolved.name,
            candidates=top,
            names=[self.dataset[c.index].name for c in top],
        )
        logger.info(
            f"Matched '{query_name}' with {resolved.token}: "
            f"{len(ranked):,} candidates scanned → {len(result)} returned"
        )
        return result


__all__ = [
    "FeatureRecord",
    "FeatureDataset",
    "ScoredCandidate",
    "MatchResult",
    "MatchingEngine",
    "rank_candidates",
    "find_top_n",
]
