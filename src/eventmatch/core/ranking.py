"""Ranking of candidate contractors for an event."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Literal, Sequence

import structlog

from ..schemas import ContractorProfile, EventLocation, ServiceRequirement
from ..store import MatchRecord, MatchStore
from .matching import MatchBreakdown, MatchScorer

PriorityBucket = Literal["high", "medium", "low"]


@dataclass
class RankingConfig:
    """Thresholds used to label ranked matches."""

    high_priority_threshold: float = 0.85
    medium_priority_threshold: float = 0.65
    excellent_rating: float = 4.5
    high_rating: float = 4.0
    experienced_reviews: int = 20
    premium_tier: str = "spotlight"


@dataclass(slots=True)
class EstimatedPrice:
    min: float = 0.0
    max: float = 0.0


@dataclass(slots=True)
class MatchResult:
    """Ranked match of one contractor against an event."""

    contractor_id: str
    service_category: str
    match_score: float
    estimated_price: EstimatedPrice
    rating: float
    review_count: int
    service_requirement_id: str = ""
    rank: int = 0
    priority: PriorityBucket = "low"
    match_reasons: list[str] = field(default_factory=list)


class ContractorRanker:
    """Score, order, and optionally persist contractor matches."""

    def __init__(
        self,
        *,
        scorer: MatchScorer,
        store: MatchStore | None = None,
        config: RankingConfig | None = None,
    ) -> None:
        self._scorer = scorer
        self._store = store
        self._config = config or RankingConfig()
        self._logger = structlog.get_logger(__name__)

    def rank(
        self,
        requirements: Sequence[ServiceRequirement],
        candidates: Iterable[ContractorProfile],
        event_location: EventLocation | None = None,
        *,
        event_id: str | None = None,
    ) -> list[MatchResult]:
        categories = [req.category for req in requirements]
        required = set(categories)

        results: list[MatchResult] = []
        for contractor in candidates:
            breakdown = self._scorer.breakdown(required, contractor, event_location)
            requirement = self._primary_requirement(requirements, contractor)
            results.append(
                MatchResult(
                    contractor_id=contractor.id,
                    service_category=requirement.category if requirement else "",
                    match_score=breakdown.score,
                    estimated_price=self._estimate_price(contractor, required),
                    rating=contractor.average_rating or 0.0,
                    review_count=contractor.review_count,
                    service_requirement_id=self._requirement_key(requirement),
                    priority=self._priority(breakdown.score),
                    match_reasons=self._match_reasons(contractor, breakdown),
                )
            )

        # sorted() is stable, equal scores keep their input order
        ranked = sorted(results, key=lambda item: item.match_score, reverse=True)
        for position, result in enumerate(ranked, start=1):
            result.rank = position

        self._logger.info(
            "ranking.completed",
            event_id=event_id,
            candidate_count=len(ranked),
            top_score=ranked[0].match_score if ranked else None,
        )

        if event_id is not None and self._store is not None:
            self._persist(event_id, ranked)
        return ranked

    def _persist(self, event_id: str, results: list[MatchResult]) -> None:
        try:
            for result in results:
                self._store.upsert(
                    MatchRecord(
                        event_id=event_id,
                        contractor_id=result.contractor_id,
                        service_requirement_id=result.service_requirement_id,
                        service_category=result.service_category,
                        match_score=result.match_score,
                        estimated_price={
                            "min": result.estimated_price.min,
                            "max": result.estimated_price.max,
                        },
                    )
                )
        except Exception as exc:  # noqa: BLE001
            self._logger.warning(
                "ranking.persist_failed",
                event_id=event_id,
                error=str(exc),
            )

    @staticmethod
    def _primary_requirement(
        requirements: Sequence[ServiceRequirement],
        contractor: ContractorProfile,
    ) -> ServiceRequirement | None:
        for requirement in requirements:
            if requirement.category in contractor.service_categories:
                return requirement
        return requirements[0] if requirements else None

    @staticmethod
    def _requirement_key(requirement: ServiceRequirement | None) -> str:
        if requirement is None:
            return ""
        return requirement.id or requirement.category

    @staticmethod
    def _estimate_price(contractor: ContractorProfile, required: set[str]) -> EstimatedPrice:
        matching = [svc for svc in contractor.services if svc.service_type in required]
        minimums = [svc.price_range_min for svc in matching if svc.price_range_min is not None]
        maximums = [svc.price_range_max for svc in matching if svc.price_range_max is not None]
        return EstimatedPrice(
            min=min(minimums) if minimums else 0.0,
            max=max(maximums) if maximums else 0.0,
        )

    def _priority(self, score: float) -> PriorityBucket:
        if score >= self._config.high_priority_threshold:
            return "high"
        if score >= self._config.medium_priority_threshold:
            return "medium"
        return "low"

    def _match_reasons(
        self,
        contractor: ContractorProfile,
        breakdown: MatchBreakdown,
    ) -> list[str]:
        reasons: list[str] = []
        if breakdown.matched_categories:
            reasons.append(f"Specializes in {', '.join(breakdown.matched_categories)} services")

        rating = contractor.average_rating or 0.0
        if rating >= self._config.excellent_rating:
            reasons.append(f"Excellent rating of {rating} stars")
        elif rating >= self._config.high_rating:
            reasons.append(f"High rating of {rating} stars")

        if contractor.review_count >= self._config.experienced_reviews:
            reasons.append(f"Experienced with {contractor.review_count} reviews")
        if breakdown.location_matched:
            reasons.append("Located in your service area")
        if contractor.is_verified:
            reasons.append("Verified contractor")
        if contractor.subscription_tier == self._config.premium_tier:
            reasons.append("Premium contractor")
        return reasons


def eligible_candidates(
    contractors: Iterable[ContractorProfile],
    requirement_categories: Iterable[str],
) -> list[ContractorProfile]:
    """Verified contractors offering at least one required category."""
    required = set(requirement_categories)
    return [
        contractor
        for contractor in contractors
        if contractor.is_verified
        and (not required or contractor.service_categories & required)
    ]
