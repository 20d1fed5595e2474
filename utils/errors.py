"""
utils/errors.py
───────────────
Error kinds raised across the matcher. Each carries the process exit
status the command-line entry point returns when it is the terminal error.

    MatcherError
    ├── ConfigurationError   bad CLI parameters, unknown metric, bad settings
    ├── LoadError            feature file unreadable or malformed
    ├── NotFoundError        query name absent from the dataset
    ├── VectorShapeError     vectors a metric cannot compare
    └── RenderError          target image cannot be displayed
"""

from __future__ import annotations

from pathlib import Path


class MatcherError(Exception):
    """Base class for every error the matcher reports to the user."""

    exit_code = 1


class ConfigurationError(MatcherError):
    exit_code = 2


class LoadError(MatcherError):
    """The feature file could not be turned into a dataset."""

    exit_code = 3

    def __init__(self, message: str, path: str | Path | None = None, row: int | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self.row = row
        location = ""
        if self.path is not None:
            location = f"{self.path}"
            if row is not None:
                location += f", row {row}"
            location = f" ({location})"
        super().__init__(f"{message}{location}")


class NotFoundError(MatcherError, LookupError):
    exit_code = 4

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Target '{name}' not found in dataset")


class VectorShapeError(MatcherError, ValueError):
    """Two vectors cannot be compared by the requested metric."""


class RenderError(MatcherError):
    exit_code = 5
