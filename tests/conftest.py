"""Shared fixtures for the matcher test-suite."""

import os
import tempfile
from pathlib import Path

# Keep the JSON log file out of the working tree; must run before
# utils.logger is first imported.
os.environ.setdefault("LOG_FILE", str(Path(tempfile.mkdtemp()) / "test.log"))

import pytest

from config.settings import Settings, get_settings
from models.matchmaker import FeatureDataset


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are cached per process; drop the cache around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, log_file=None)


@pytest.fixture
def ssd_dataset() -> FeatureDataset:
    return FeatureDataset.from_pairs(
        ["A", "B", "C"],
        [[0.0, 0.0], [0.0, 0.0], [3.0, 4.0]],
    )


@pytest.fixture
def hist_dataset() -> FeatureDataset:
    return FeatureDataset.from_pairs(
        ["A", "B", "C"],
        [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 0.0, 0.0]],
    )


@pytest.fixture
def image_histograms() -> FeatureDataset:
    """Normalised two-segment histograms (whole image | centre region)."""
    return FeatureDataset.from_pairs(
        ["pic.0001.jpg", "pic.0002.jpg", "pic.0003.jpg", "pic.0004.jpg"],
        [
            [0.50, 0.50, 1.00, 0.00],
            [0.50, 0.50, 0.00, 1.00],
            [0.25, 0.75, 1.00, 0.00],
            [0.00, 1.00, 0.00, 1.00],
        ],
    )


@pytest.fixture
def write_csv(tmp_path):
    """Write raw CSV text to a file and return its path."""

    def _write(text: str, name: str = "features.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
