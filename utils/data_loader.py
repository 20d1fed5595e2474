"""
utils/data_loader.py
────────────────────
Reads and writes the feature CSV consumed by the matcher.

File format (no header):
  <name>,<v1>,<v2>,…,<vK>
  pic.0001.jpg,0.0123,0.0456,…

Column 0 is the record name, kept verbatim as a string; the remaining
columns are the feature vector. Every row must carry the same number of
values.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Iterable

import numpy as np
import pandas as pd

from config.settings import get_settings
from models.matchmaker import FeatureDataset, FeatureRecord
from utils.errors import LoadError
from utils.logger import logger


def _blank(column: pd.Series) -> pd.Series:
    return column.isna() | column.astype(str).str.strip().eq("")


def load_features(path: str | Path) -> FeatureDataset:
    """
    Read a feature CSV into a FeatureDataset, preserving row order.
    Raises LoadError for a missing, empty or malformed file.
    """
    path = Path(path)
    if not path.is_file():
        raise LoadError("Feature file not found", path)

    logger.info(f"Loading feature vectors from {path}")
    try:
        df = pd.read_csv(
            path,
            header=None,
            dtype={0: str},
            keep_default_na=False,
            skipinitialspace=True,
            skip_blank_lines=True,
            float_precision="round_trip",
        )
    except pd.errors.EmptyDataError:
        raise LoadError("Feature file is empty", path) from None
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise LoadError(f"Cannot parse feature file: {exc}", path) from exc
    except OSError as exc:
        raise LoadError(f"Cannot read feature file: {exc}", path) from exc

    # rows written with a trailing comma leave an all-blank last column
    last = df.iloc[:, -1]
    if df.shape[1] > 1 and _blank(last).all():
        df = df.iloc[:, :-1]

    if df.shape[1] < 2:
        raise LoadError("Feature file has no value columns", path)

    blank = _blank(df.iloc[:, 0])
    if blank.any():
        raise LoadError("Row has no record name", path, row=int(blank.to_numpy().argmax()) + 1)

    values = df.iloc[:, 1:].apply(pd.to_numeric, errors="coerce")
    bad_rows = values.isna().any(axis=1)
    if bad_rows.any():
        row = int(bad_rows.to_numpy().argmax())
        raise LoadError(
            "Row has missing or non-numeric feature values", path, row=row + 1
        )

    matrix = values.to_numpy(dtype=np.float64)
    if not np.isfinite(matrix).all():
        row = int((~np.isfinite(matrix)).any(axis=1).argmax())
        raise LoadError("Row has non-finite feature values", path, row=row + 1)

    dataset = FeatureDataset.from_pairs(df.iloc[:, 0].astype(str).str.strip().tolist(), matrix)
    logger.info(f"Feature file '{path.name}': {dataset.summary()}")
    return dataset


def save_features(
    path: str | Path,
    records: Iterable[FeatureRecord | tuple[str, Iterable[float]]],
    append: bool = False,
) -> int:
    """
    Write records in the feature CSV format. With ``append=True`` rows are
    added to an existing file. Returns the number of rows written.
    """
    path = Path(path)
    rows = []
    for rec in records:
        if isinstance(rec, FeatureRecord):
            name, vector = rec.name, rec.vector
        else:
            name, vector = rec
        rows.append([name, *(float(v) for v in vector)])

    if not rows:
        return 0
    width = len(rows[0])
    if any(len(r) != width for r in rows):
        raise ValueError("All records must have the same vector length")

    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(rows).to_csv(
        path,
        header=False,
        index=False,
        mode="a" if append else "w",
    )
    logger.debug(f"Wrote {len(rows)} rows to {path}")
    return len(rows)


@lru_cache(maxsize=1)
def get_dataset() -> FeatureDataset:
    """Load ``settings.feature_file`` once per process."""
    return load_features(get_settings().feature_file)
