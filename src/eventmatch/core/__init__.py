"""Core scoring components."""

from __future__ import annotations

# NOTE: keep imports explicit for export clarity.
from .ab_testing import ABTestAnalyzer, Statistics
from .matching import MatchBreakdown, MatchScorer, MatchScorerConfig
from .performance import (
    FallbackEstimator,
    NullEstimator,
    PerformanceConfig,
    PerformanceMetrics,
    PerformanceSample,
    PerformanceScorer,
    PerformerRankings,
    PlaceholderEstimator,
)
from .ranking import (
    ContractorRanker,
    EstimatedPrice,
    MatchResult,
    RankingConfig,
    eligible_candidates,
)

__all__ = [
    "ABTestAnalyzer",
    "ContractorRanker",
    "EstimatedPrice",
    "FallbackEstimator",
    "MatchBreakdown",
    "MatchResult",
    "MatchScorer",
    "MatchScorerConfig",
    "NullEstimator",
    "PerformanceConfig",
    "PerformanceMetrics",
    "PerformanceSample",
    "PerformanceScorer",
    "PerformerRankings",
    "PlaceholderEstimator",
    "RankingConfig",
    "Statistics",
    "eligible_candidates",
]
