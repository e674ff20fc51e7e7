"""Dependency injection container for the matching services."""

from __future__ import annotations

from pathlib import Path

from dependency_injector import containers, providers

from .core import (
    ABTestAnalyzer,
    ContractorRanker,
    MatchScorer,
    MatchScorerConfig,
    NullEstimator,
    PerformanceConfig,
    PerformanceScorer,
    PlaceholderEstimator,
    RankingConfig,
)
from .pipeline import ABTestPipeline, MatchingPipeline, PerformancePipeline
from .store import InMemoryMatchStore, JsonFileMatchStore


class MatchingContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    match_store = providers.Singleton(InMemoryMatchStore)

    match_scorer = providers.Singleton(MatchScorer)

    contractor_ranker = providers.Singleton(
        ContractorRanker,
        scorer=match_scorer,
        store=match_store,
    )

    fallback_estimator = providers.Singleton(NullEstimator)

    performance_scorer = providers.Singleton(
        PerformanceScorer,
        estimator=fallback_estimator,
    )

    ab_test_analyzer = providers.Singleton(ABTestAnalyzer)

    matching_pipeline = providers.Factory(MatchingPipeline, ranker=contractor_ranker)
    performance_pipeline = providers.Factory(PerformancePipeline, scorer=performance_scorer)
    ab_test_pipeline = providers.Factory(ABTestPipeline, analyzer=ab_test_analyzer)


def create_container(
    *,
    settings: dict | None = None,
    store_path: str | Path | None = None,
    placeholder_estimates: bool = False,
) -> MatchingContainer:
    """Instantiate container with optional overrides."""

    container = MatchingContainer()
    settings = settings if isinstance(settings, dict) else {}

    if store_path is not None:
        container.match_store.override(providers.Singleton(JsonFileMatchStore, store_path))

    if "scoring" in settings:
        scoring_config = MatchScorerConfig(**settings["scoring"])
        container.match_scorer.override(providers.Singleton(MatchScorer, config=scoring_config))

    if "ranking" in settings:
        ranking_config = RankingConfig(**settings["ranking"])
        container.contractor_ranker.override(
            providers.Singleton(
                ContractorRanker,
                scorer=container.match_scorer,
                store=container.match_store,
                config=ranking_config,
            )
        )

    performance_settings = dict(settings.get("performance", {}))
    seed = performance_settings.pop("placeholder_seed", None)
    if placeholder_estimates:
        container.fallback_estimator.override(
            providers.Singleton(PlaceholderEstimator, seed=seed)
        )

    if performance_settings:
        performance_config = PerformanceConfig(**performance_settings)
        container.performance_scorer.override(
            providers.Singleton(
                PerformanceScorer,
                config=performance_config,
                estimator=container.fallback_estimator,
            )
        )

    return container
