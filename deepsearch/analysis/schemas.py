"""Structured outputs of the model service."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


def _clamp_score(value: Any) -> int:
    if isinstance(value, str):
        value = float(value.strip())
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("score must be numeric")
    if value != value:
        raise ValueError("score must not be NaN")
    return round(max(0, min(100, value)))


def _string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError("expected a list of strings")
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


class SourceAnalysis(BaseModel):
    """Model assessment of one scraped source."""

    relevance_score: int = Field(..., ge=0, le=100, description="Relevance to the query, 0-100")
    credibility_score: int = Field(..., ge=0, le=100, description="Source credibility, 0-100")
    summary: str = Field(..., description="Summary of the source content")
    key_points: list[str] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)

    @field_validator("relevance_score", "credibility_score", mode="before")
    @classmethod
    def clamp_score(cls, value: Any) -> int:
        return _clamp_score(value)

    @field_validator("key_points", "insights", "topics", mode="before")
    @classmethod
    def coerce_list(cls, value: Any) -> list[str]:
        return _string_list(value)

    @field_validator("summary", mode="before")
    @classmethod
    def coerce_summary(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("summary must be a string")
        return value.strip()


class EmbeddingResult(BaseModel):
    """Vector returned by the embed task."""

    embedding: list[float]
    model: str
    text_length: int
