from __future__ import annotations

from typing import Any

import pytest
from structlog.testing import capture_logs

from eventmatch.core import ContractorRanker, MatchScorer, RankingConfig, eligible_candidates
from eventmatch.schemas import (
    ContractorProfile,
    EventLocation,
    ServicePriceRange,
    ServiceRequirement,
)
from eventmatch.store import InMemoryMatchStore, MatchRecord


def build_contractor(contractor_id: str, **kwargs: Any) -> ContractorProfile:
    defaults: dict[str, Any] = {
        "id": contractor_id,
        "service_categories": {"catering"},
        "is_verified": True,
    }
    defaults.update(kwargs)
    return ContractorProfile(**defaults)


class FailingStore:
    def __init__(self) -> None:
        self.attempts = 0

    def upsert(self, record: MatchRecord) -> None:
        self.attempts += 1
        raise RuntimeError("database unavailable")

    def get(self, key):
        return None

    def records_for_event(self, event_id: str) -> list[MatchRecord]:
        return []


REQUIREMENTS = [ServiceRequirement(id="REQ-1", category="catering", priority="high", is_required=True)]


def test_rank_orders_by_score_and_keeps_ties_in_input_order():
    ranker = ContractorRanker(scorer=MatchScorer())
    first = build_contractor("A", average_rating=3.0)
    best = build_contractor("B", average_rating=5.0, review_count=50)
    second = build_contractor("C", average_rating=3.0)

    results = ranker.rank(REQUIREMENTS, [first, best, second])

    assert [r.contractor_id for r in results] == ["B", "A", "C"]
    assert [r.rank for r in results] == [1, 2, 3]
    assert results[1].match_score == results[2].match_score


def test_rank_estimates_price_from_matching_services_only():
    ranker = ContractorRanker(scorer=MatchScorer())
    contractor = build_contractor(
        "A",
        services=[
            ServicePriceRange(service_type="catering", price_range_min=100, price_range_max=500),
            ServicePriceRange(service_type="catering", price_range_min=200, price_range_max=800),
            ServicePriceRange(service_type="photography", price_range_min=50, price_range_max=5000),
        ],
    )
    no_prices = build_contractor(
        "B",
        services=[ServicePriceRange(service_type="photography", price_range_min=50, price_range_max=90)],
    )

    results = {r.contractor_id: r for r in ranker.rank(REQUIREMENTS, [contractor, no_prices])}

    assert results["A"].estimated_price.min == 100
    assert results["A"].estimated_price.max == 800
    assert results["B"].estimated_price.min == 0
    assert results["B"].estimated_price.max == 0


def test_rank_uses_union_of_requirement_categories():
    ranker = ContractorRanker(scorer=MatchScorer())
    requirements = [
        ServiceRequirement(id="REQ-1", category="venue"),
        ServiceRequirement(id="REQ-2", category="catering"),
    ]

    [result] = ranker.rank(requirements, [build_contractor("A")])

    assert result.match_score == pytest.approx(0.65)
    assert result.service_category == "catering"
    assert result.service_requirement_id == "REQ-2"


def test_rank_labels_priority_and_reasons():
    ranker = ContractorRanker(scorer=MatchScorer())
    contractor = build_contractor(
        "A",
        average_rating=4.6,
        review_count=25,
        service_areas=["Auckland Central"],
        subscription_tier="spotlight",
    )

    [result] = ranker.rank(REQUIREMENTS, [contractor], EventLocation(city="Auckland"))

    assert result.priority == "high"
    assert result.rating == 4.6
    assert result.review_count == 25
    assert result.match_reasons == [
        "Specializes in catering services",
        "Excellent rating of 4.6 stars",
        "Experienced with 25 reviews",
        "Located in your service area",
        "Verified contractor",
        "Premium contractor",
    ]


def test_priority_thresholds_are_configurable():
    ranker = ContractorRanker(
        scorer=MatchScorer(),
        config=RankingConfig(high_priority_threshold=0.95, medium_priority_threshold=0.9),
    )

    [result] = ranker.rank(REQUIREMENTS, [build_contractor("A")])

    assert result.match_score == pytest.approx(0.8)
    assert result.priority == "low"


def test_repeated_ranking_upserts_a_single_row_per_key():
    store = InMemoryMatchStore()
    ranker = ContractorRanker(scorer=MatchScorer(), store=store)

    ranker.rank(REQUIREMENTS, [build_contractor("A", average_rating=1.0)], event_id="E-1")
    ranker.rank(REQUIREMENTS, [build_contractor("A", average_rating=5.0)], event_id="E-1")

    assert len(store) == 1
    record = store.get(("E-1", "A", "REQ-1"))
    assert record is not None
    assert record.match_score == pytest.approx(1.0)


def test_rank_without_event_id_does_not_persist():
    store = InMemoryMatchStore()
    ranker = ContractorRanker(scorer=MatchScorer(), store=store)

    ranker.rank(REQUIREMENTS, [build_contractor("A")])

    assert len(store) == 0


def test_store_failure_is_logged_and_ranking_still_returned():
    store = FailingStore()
    ranker = ContractorRanker(scorer=MatchScorer(), store=store)

    with capture_logs() as logs:
        results = ranker.rank(REQUIREMENTS, [build_contractor("A"), build_contractor("B")], event_id="E-1")

    assert [r.contractor_id for r in results] == ["A", "B"]
    assert store.attempts == 1
    failures = [entry for entry in logs if entry["event"] == "ranking.persist_failed"]
    assert failures and failures[0]["error"] == "database unavailable"


def test_rank_handles_empty_inputs():
    ranker = ContractorRanker(scorer=MatchScorer(), store=InMemoryMatchStore())

    assert ranker.rank([], [], event_id="E-1") == []

    [result] = ranker.rank([], [build_contractor("A")])
    assert result.service_category == ""
    assert result.match_score == pytest.approx(0.5)


def test_eligible_candidates_requires_verification_and_overlap():
    contractors = [
        build_contractor("A"),
        build_contractor("B", is_verified=False),
        build_contractor("C", service_categories={"music"}),
    ]

    assert [c.id for c in eligible_candidates(contractors, {"catering"})] == ["A"]
    assert [c.id for c in eligible_candidates(contractors, set())] == ["A", "C"]


def test_profile_without_verification_flag_is_not_eligible():
    unflagged = ContractorProfile.model_validate({"id": "X", "service_categories": ["catering"]})

    assert eligible_candidates([unflagged], {"catering"}) == []

    [result] = ContractorRanker(scorer=MatchScorer()).rank(REQUIREMENTS, [unflagged])
    assert "Verified contractor" not in result.match_reasons
