"""
config/settings.py
──────────────────
Centralised settings loaded from .env via pydantic-settings.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Data
    feature_file: Path = Path("./data/features.csv")
    image_dir: Optional[Path] = None

    # Matching
    top_n: int = Field(default=5, ge=1)
    distance_metric: str = "ssd"

    # Composite metric layout
    multi_hist_regions: int = Field(default=2, ge=1)
    multi_hist_weights: Optional[list[float]] = None
    texture_bins: Optional[int] = Field(default=None, ge=1)
    texture_weight: float = Field(default=0.5, ge=0.0, le=1.0)

    # Gallery
    gallery_columns: int = Field(default=5, ge=1)
    gallery_thumb_size: int = Field(default=160, ge=16)
    gallery_output: Optional[Path] = None

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = Path("./logs/image_matcher.log")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, v: str) -> str:
        v = v.upper()
        try:
            logger.level(v)
        except ValueError:
            raise ValueError(f"unknown log level '{v}'") from None
        return v

    @field_validator("multi_hist_weights")
    @classmethod
    def _check_weights(cls, v: Optional[list[float]]) -> Optional[list[float]]:
        if v is None:
            return v
        if any(w < 0 for w in v):
            raise ValueError("multi_hist_weights must be non-negative")
        if sum(v) <= 0:
            raise ValueError("multi_hist_weights must sum to a positive value")
        return v

    @model_validator(mode="after")
    def _weights_match_regions(self) -> "Settings":
        if self.multi_hist_weights is not None and len(self.multi_hist_weights) != self.multi_hist_regions:
            raise ValueError(
                f"multi_hist_weights has {len(self.multi_hist_weights)} entries, "
                f"expected {self.multi_hist_regions} (one per region)"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
