"""Contractor-to-event match scoring."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from ..schemas import ContractorProfile, EventLocation


@dataclass
class MatchScorerConfig:
    """Weights for the additive match score."""

    base_score: float = 0.5
    category_weight: float = 0.3
    rating_weight: float = 0.2
    review_weight: float = 0.1
    location_weight: float = 0.1
    review_saturation: int = 50
    max_rating: float = 5.0


@dataclass(slots=True)
class MatchBreakdown:
    """Per-component view of a match score."""

    contributions: dict[str, float]
    matched_categories: list[str]
    location_matched: bool
    raw_score: float
    score: float
    metadata: dict[str, float] = field(default_factory=dict)


class MatchScorer:
    """Score how well a contractor covers an event's service requirements.

    The score is ``base + overlap + rating + review volume + location``,
    capped at 1.0 and rounded to two decimals. Missing fields contribute
    nothing, so the scorer is safe to run over a whole candidate batch.
    """

    method = "match"

    def __init__(self, *, config: MatchScorerConfig | None = None) -> None:
        self._config = config or MatchScorerConfig()

    @property
    def config(self) -> MatchScorerConfig:
        return self._config

    def score(
        self,
        requirement_categories: Iterable[str],
        contractor: ContractorProfile,
        event_location: EventLocation | None = None,
    ) -> float:
        return self.breakdown(requirement_categories, contractor, event_location).score

    def breakdown(
        self,
        requirement_categories: Iterable[str],
        contractor: ContractorProfile,
        event_location: EventLocation | None = None,
    ) -> MatchBreakdown:
        required = set(requirement_categories)
        matched = sorted(set(contractor.service_categories) & required)
        overlap_ratio = len(matched) / len(required) if required else 0.0
        location_matched = self._location_matches(contractor.service_areas, event_location)

        contributions = {
            "base": self._config.base_score,
            "category": overlap_ratio * self._config.category_weight,
            "rating": self._rating_ratio(contractor.average_rating) * self._config.rating_weight,
            "reviews": self._review_ratio(contractor.review_count) * self._config.review_weight,
            "location": self._config.location_weight if location_matched else 0.0,
        }
        raw_score = sum(contributions.values())
        score = round(min(raw_score, 1.0), 2)

        return MatchBreakdown(
            contributions=contributions,
            matched_categories=matched,
            location_matched=location_matched,
            raw_score=raw_score,
            score=score,
            metadata={"overlap_ratio": overlap_ratio},
        )

    def _rating_ratio(self, rating: float | None) -> float:
        if not rating or rating < 0:
            return 0.0
        return min(rating / self._config.max_rating, 1.0)

    def _review_ratio(self, review_count: int | None) -> float:
        if not review_count or review_count < 0:
            return 0.0
        return min(review_count / self._config.review_saturation, 1.0)

    @staticmethod
    def _location_matches(
        service_areas: Iterable[str],
        event_location: EventLocation | None,
    ) -> bool:
        if event_location is None:
            return False
        needles = [
            value.strip().lower()
            for value in (event_location.city, event_location.region)
            if value and value.strip()
        ]
        if not needles:
            return False
        for area in service_areas:
            area_lower = area.lower()
            if any(needle in area_lower for needle in needles):
                return True
        return False
