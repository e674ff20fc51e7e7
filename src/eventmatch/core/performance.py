"""Contractor performance aggregation."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Protocol, runtime_checkable

import pendulum
import structlog

from ..schemas import ContractorProfile, JobRecord


@dataclass
class PerformanceConfig:
    """Thresholds for performance rollups."""

    top_rating_threshold: float = 4.5
    top_completion_threshold: float = 90.0
    ranking_limit: int = 5


@dataclass(slots=True)
class PerformanceSample:
    contractor_id: str
    total_jobs: int
    completed_jobs: int
    revenue: float
    completion_rate: float
    response_time_minutes: float | None
    customer_satisfaction: float | None
    rating: float
    is_active: bool
    estimated_fields: list[str] = field(default_factory=list)


@dataclass(slots=True)
class PerformanceMetrics:
    total_contractors: int
    active_contractors: int
    average_rating: float
    average_completion_rate: float
    average_response_time: float
    total_revenue: float
    top_performers: int


@dataclass(slots=True)
class PerformerRankings:
    top_rated: list[PerformanceSample]
    top_earners: list[PerformanceSample]
    most_active: list[PerformanceSample]


@runtime_checkable
class FallbackEstimator(Protocol):
    """Supplies response time and satisfaction when a profile lacks them."""

    def response_time_minutes(self, contractor_id: str) -> float | None:
        """Return an estimated response time in minutes, or None."""

    def customer_satisfaction(self, contractor_id: str) -> float | None:
        """Return an estimated satisfaction score on a 0-5 scale, or None."""


class NullEstimator:
    """Leave missing metrics unset."""

    def response_time_minutes(self, contractor_id: str) -> float | None:
        return None

    def customer_satisfaction(self, contractor_id: str) -> float | None:
        return None


class PlaceholderEstimator:
    """Bounded pseudo-random values for demo and staging data only.

    These numbers carry no information about the contractor. Production
    deployments should inject an estimator backed by real job history.
    """

    def __init__(
        self,
        *,
        seed: int | None = None,
        response_time_bounds: tuple[float, float] = (15.0, 240.0),
        satisfaction_bounds: tuple[float, float] = (3.5, 5.0),
    ) -> None:
        self._random = random.Random(seed)
        self._response_time_bounds = response_time_bounds
        self._satisfaction_bounds = satisfaction_bounds

    def response_time_minutes(self, contractor_id: str) -> float | None:
        return round(self._random.uniform(*self._response_time_bounds), 1)

    def customer_satisfaction(self, contractor_id: str) -> float | None:
        return round(self._random.uniform(*self._satisfaction_bounds), 1)


class PerformanceScorer:
    """Aggregate job history into per-contractor performance samples."""

    ACTIVE_WINDOW_HOURS = 168

    def __init__(
        self,
        *,
        config: PerformanceConfig | None = None,
        estimator: FallbackEstimator | None = None,
        now_provider: Callable[[], pendulum.DateTime] | None = None,
    ) -> None:
        self._config = config or PerformanceConfig()
        self._estimator = estimator or NullEstimator()
        self._now_provider = now_provider or pendulum.now
        self._logger = structlog.get_logger(__name__)

    def score(
        self,
        profile: ContractorProfile,
        jobs: Iterable[JobRecord],
        *,
        as_of: Any | None = None,
    ) -> PerformanceSample:
        own_jobs = [job for job in jobs if job.contractor_id == profile.id]
        total_jobs = len(own_jobs)
        completed = [job for job in own_jobs if job.status == "completed"]
        completion_rate = len(completed) / max(total_jobs, 1) * 100

        estimated_fields: list[str] = []
        response_time = profile.response_time_minutes
        if response_time is None:
            response_time = self._estimator.response_time_minutes(profile.id)
            if response_time is not None:
                estimated_fields.append("response_time_minutes")
        satisfaction = profile.customer_satisfaction
        if satisfaction is None:
            satisfaction = self._estimator.customer_satisfaction(profile.id)
            if satisfaction is not None:
                estimated_fields.append("customer_satisfaction")
        if estimated_fields:
            self._logger.debug(
                "performance.placeholder_estimate",
                contractor_id=profile.id,
                fields=estimated_fields,
            )

        return PerformanceSample(
            contractor_id=profile.id,
            total_jobs=total_jobs,
            completed_jobs=len(completed),
            revenue=sum(job.amount for job in completed),
            completion_rate=completion_rate,
            response_time_minutes=response_time,
            customer_satisfaction=satisfaction,
            rating=profile.average_rating or 0.0,
            is_active=self._is_active(profile.last_sign_in_at, self._resolve_as_of(as_of)),
            estimated_fields=estimated_fields,
        )

    def summarize(self, samples: Iterable[PerformanceSample]) -> PerformanceMetrics:
        samples = list(samples)
        response_times = [
            sample.response_time_minutes
            for sample in samples
            if sample.response_time_minutes is not None
        ]
        return PerformanceMetrics(
            total_contractors=len(samples),
            active_contractors=sum(1 for sample in samples if sample.is_active),
            average_rating=_mean(sample.rating for sample in samples),
            average_completion_rate=_mean(sample.completion_rate for sample in samples),
            average_response_time=_mean(response_times),
            total_revenue=sum(sample.revenue for sample in samples),
            top_performers=sum(1 for sample in samples if self._is_top_performer(sample)),
        )

    def rank_performers(self, samples: Iterable[PerformanceSample]) -> PerformerRankings:
        samples = list(samples)
        limit = self._config.ranking_limit
        return PerformerRankings(
            top_rated=sorted(samples, key=lambda s: s.rating, reverse=True)[:limit],
            top_earners=sorted(samples, key=lambda s: s.revenue, reverse=True)[:limit],
            most_active=sorted(samples, key=lambda s: s.total_jobs, reverse=True)[:limit],
        )

    def _is_top_performer(self, sample: PerformanceSample) -> bool:
        return (
            sample.rating >= self._config.top_rating_threshold
            and sample.completion_rate >= self._config.top_completion_threshold
        )

    def _is_active(self, last_sign_in_at: datetime | None, as_of: pendulum.DateTime) -> bool:
        if last_sign_in_at is None:
            return False
        signed_in = pendulum.instance(last_sign_in_at)
        return signed_in >= as_of.subtract(hours=self.ACTIVE_WINDOW_HOURS)

    def _resolve_as_of(self, as_of: Any | None) -> pendulum.DateTime:
        if as_of is None:
            return self._now_provider()
        if isinstance(as_of, pendulum.DateTime):
            return as_of
        if isinstance(as_of, datetime):
            return pendulum.instance(as_of)
        return pendulum.parse(str(as_of))


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)
