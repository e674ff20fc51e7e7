"""Two-sample significance for A/B test metrics."""

from __future__ import annotations

import math
import statistics
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Literal, Sequence

from ..schemas import ABTestSample

ConfidenceLevel = Literal[80, 90, 95, 99]

# Large-sample two-tailed critical values, checked from the strictest down.
CRITICAL_VALUES: tuple[tuple[float, ConfidenceLevel], ...] = (
    (2.576, 99),
    (1.96, 95),
    (1.645, 90),
)
BASELINE_CONFIDENCE: ConfidenceLevel = 80


@dataclass(slots=True)
class Statistics:
    control_avg: float
    variant_avg: float
    improvement_pct: float
    t_statistic: float
    confidence_level: ConfidenceLevel
    standard_error: float = 0.0
    control_count: int = 0
    variant_count: int = 0


class ABTestAnalyzer:
    """Compare control and variant metric samples.

    Uses a pooled-variance t-statistic bucketed against fixed critical values.
    This is a large-sample approximation, not a Student or Welch test with a
    degrees-of-freedom lookup, and the four buckets are what callers display.
    """

    def analyze(
        self,
        control_samples: Sequence[float],
        variant_samples: Sequence[float],
    ) -> Statistics:
        control = [float(value) for value in control_samples]
        variant = [float(value) for value in variant_samples]
        n1, n2 = len(control), len(variant)

        control_avg = statistics.fmean(control) if control else 0.0
        variant_avg = statistics.fmean(variant) if variant else 0.0
        improvement_pct = (
            (variant_avg - control_avg) / control_avg * 100 if control_avg != 0 else 0.0
        )

        standard_error = 0.0
        t_statistic = 0.0
        if n1 > 0 and n2 > 0 and n1 + n2 > 2:
            pooled_variance = (
                (n1 - 1) * _sample_variance(control) + (n2 - 1) * _sample_variance(variant)
            ) / (n1 + n2 - 2)
            standard_error = math.sqrt(pooled_variance * (1 / n1 + 1 / n2))
            if standard_error > 0:
                t_statistic = abs(variant_avg - control_avg) / standard_error

        return Statistics(
            control_avg=control_avg,
            variant_avg=variant_avg,
            improvement_pct=improvement_pct,
            t_statistic=t_statistic,
            confidence_level=confidence_level(t_statistic),
            standard_error=standard_error,
            control_count=n1,
            variant_count=n2,
        )

    def analyze_samples(self, samples: Iterable[ABTestSample]) -> Statistics:
        control, variant = split_samples(samples)
        return self.analyze(control, variant)

    def build_test_results(
        self,
        test: dict[str, Any],
        samples: Iterable[ABTestSample],
    ) -> dict[str, Any]:
        """Assemble the ``test_results`` response payload."""
        control, variant = split_samples(samples)
        stats = self.analyze(control, variant)
        return {
            "test_results": {
                "test": test,
                "control_results": control,
                "variant_results": variant,
                "statistics": asdict(stats),
            }
        }


def confidence_level(t_statistic: float) -> ConfidenceLevel:
    for critical, level in CRITICAL_VALUES:
        if t_statistic > critical:
            return level
    return BASELINE_CONFIDENCE


def split_samples(samples: Iterable[ABTestSample]) -> tuple[list[float], list[float]]:
    control: list[float] = []
    variant: list[float] = []
    for sample in samples:
        target = control if sample.variant == "control" else variant
        target.append(sample.metric_value)
    return control, variant


def _sample_variance(values: list[float]) -> float:
    if len(values) < 2:
        return 0.0
    return statistics.variance(values)
