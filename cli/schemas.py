"""
cli/schemas.py
──────────────
Pydantic v2 models for the command-line selection parameters and the JSON
match report.

Sections
────────
  1. Request model   — MatchRequest
  2. Response models — MatchEntry, MatchResponse
"""

from pathlib import Path
from typing import Optional, Sequence

from pydantic import BaseModel, Field, field_validator

from models.matchmaker import MatchResult
from models.metrics import DistanceMetric


# ─────────────────────────────────────────────────────────────────────────────
#  1. Request model
# ─────────────────────────────────────────────────────────────────────────────

class MatchRequest(BaseModel):
    """Validated selection parameters for one matching run."""
    target: str = Field(..., min_length=1, description="Query record name (image filename)")
    feature_file: Path = Field(..., description="Feature CSV to search")
    top_n: int = Field(..., ge=1, description="Number of matches to return")
    metric: DistanceMetric = Field(..., description="Distance metric token")

    @field_validator("target")
    @classmethod
    def _non_blank_target(cls, v: str) -> str:
        # names are matched verbatim, so surrounding spaces are kept
        if not v.strip():
            raise ValueError("target must not be blank")
        return v


# ─────────────────────────────────────────────────────────────────────────────
#  2. Response models
# ─────────────────────────────────────────────────────────────────────────────

class MatchEntry(BaseModel):
    rank:  int
    name:  str
    score: Optional[float] = Field(None, description="Metric score; absent when only names are known")


class MatchResponse(BaseModel):
    """Report envelope printed by the JSON renderer."""
    target:        str
    metric:        Optional[DistanceMetric] = None
    total_matches: int
    matches:       list[MatchEntry]

    @classmethod
    def from_result(cls, result: MatchResult) -> "MatchResponse":
        entries = [
            MatchEntry(rank=i + 1, name=name, score=score)
            for i, (name, score) in enumerate(result.pairs())
        ]
        return cls(
            target=result.query,
            metric=result.metric,
            total_matches=len(entries),
            matches=entries,
        )

    @classmethod
    def from_names(cls, target: str, names: Sequence[str]) -> "MatchResponse":
        entries = [MatchEntry(rank=i + 1, name=n) for i, n in enumerate(names)]
        return cls(target=target, total_matches=len(entries), matches=entries)
