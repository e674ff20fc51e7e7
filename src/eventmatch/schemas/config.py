"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.ranking import RankingConfig


class ScoringSection(BaseModel):
    base_score: float | None = Field(default=None, ge=0, le=1)
    category_weight: float | None = Field(default=None, ge=0)
    rating_weight: float | None = Field(default=None, ge=0)
    review_weight: float | None = Field(default=None, ge=0)
    location_weight: float | None = Field(default=None, ge=0)
    review_saturation: int | None = Field(default=None, gt=0)

    model_config = ConfigDict(extra="forbid")


class RankingSection(BaseModel):
    high_priority_threshold: float | None = Field(default=None, ge=0, le=1)
    medium_priority_threshold: float | None = Field(default=None, ge=0, le=1)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _check_order(self) -> RankingSection:
        defaults = RankingConfig()
        high = self.high_priority_threshold
        medium = self.medium_priority_threshold
        if high is None:
            high = defaults.high_priority_threshold
        if medium is None:
            medium = defaults.medium_priority_threshold
        if medium > high:
            raise ValueError("medium_priority_threshold must not exceed high_priority_threshold")
        return self


class PerformanceSection(BaseModel):
    top_rating_threshold: float | None = Field(default=None, ge=0, le=5)
    top_completion_threshold: float | None = Field(default=None, ge=0, le=100)
    ranking_limit: int | None = Field(default=None, gt=0)
    placeholder_seed: int | None = None

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    scoring: ScoringSection = Field(default_factory=ScoringSection)
    ranking: RankingSection = Field(default_factory=RankingSection)
    performance: PerformanceSection = Field(default_factory=PerformanceSection)

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        for section in ("scoring", "ranking", "performance"):
            values = getattr(self, section).model_dump(exclude_none=True)
            if values:
                settings[section] = values
        return settings


def load_config(raw: Any) -> AppConfig:
    """Validate a loaded YAML document; an empty file means defaults."""
    return AppConfig.model_validate(raw if raw is not None else {})
