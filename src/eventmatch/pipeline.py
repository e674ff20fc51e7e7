"""Loaders and end-to-end runs for matching, performance and A/B analysis."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Generic, TypeVar

import pendulum
import structlog
from pydantic import BaseModel, ValidationError

from . import __version__
from .core import ABTestAnalyzer, ContractorRanker, PerformanceScorer, eligible_candidates
from .schemas import ABTestSample, ContractorProfile, EventRequirements, JobRecord

RecordT = TypeVar("RecordT", bound=BaseModel)


class RecordLoadError(ValueError):
    """Raised when a JSONL file contains invalid records."""

    def __init__(self, errors: list[str], partial: list[Any]):
        super().__init__("Record loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Record loading failed: {self.errors}"


class ContractorLoadError(RecordLoadError):
    """Raised when contractor profiles fail validation."""


class JsonlLoader(Generic[RecordT]):
    """Validate one pydantic model per JSONL line, collecting bad lines."""

    error_class: type[RecordLoadError] = RecordLoadError

    def __init__(self, model: type[RecordT]):
        self._model = model

    def load(self, path: Path) -> list[RecordT]:
        records: list[RecordT] = []
        errors: list[str] = []
        with path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    data = json.loads(raw)
                except json.JSONDecodeError as exc:
                    errors.append(f"line {idx}: invalid JSON ({exc})")
                    continue
                try:
                    records.append(self._model.model_validate(data))
                except ValidationError as exc:
                    first = exc.errors()[0]
                    location = ".".join(str(part) for part in first["loc"]) or "record"
                    errors.append(f"line {idx}: {location}: {first['msg']}")
        if errors:
            raise self.error_class(errors, records)
        return records


class ContractorLoader(JsonlLoader[ContractorProfile]):
    error_class = ContractorLoadError

    def __init__(self) -> None:
        super().__init__(ContractorProfile)


class EventLoader:
    """Load an event document with its service requirements."""

    def load(self, path: Path) -> EventRequirements:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid event JSON: {exc}") from exc
        return EventRequirements.model_validate(data)


class OutputWriter:
    """Persist run output as pretty-printed JSON."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


def _run_metadata(**extra: Any) -> dict[str, Any]:
    return {
        **extra,
        "timestamp": pendulum.now("UTC").to_iso8601_string(),
        "app_version": __version__,
    }


class MatchingPipeline:
    """Load an event and its candidates, rank them, write the response."""

    def __init__(
        self,
        *,
        ranker: ContractorRanker,
        contractor_loader: ContractorLoader | None = None,
        event_loader: EventLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._ranker = ranker
        self._contractors = contractor_loader or ContractorLoader()
        self._events = event_loader or EventLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def run(
        self,
        *,
        event_path: Path,
        contractors_path: Path,
        output_path: Path,
    ) -> dict[str, Any]:
        event = self._events.load(event_path)
        with structlog.contextvars.bound_contextvars(event_id=event.event_id):
            load_errors: list[str] = []
            try:
                contractors = self._contractors.load(contractors_path)
            except ContractorLoadError as exc:
                contractors = exc.partial
                load_errors.extend(exc.errors)
                self._logger.warning("contractors.partial_load", errors=exc.errors)

            candidates = eligible_candidates(contractors, event.categories())
            matches = self._ranker.rank(
                event.service_requirements,
                candidates,
                event.location_data,
                event_id=event.event_id,
            )

        response = {
            "success": True,
            "matches": [asdict(match) for match in matches],
            "metadata": _run_metadata(
                event_id=event.event_id,
                contractor_count=len(contractors),
                candidate_count=len(candidates),
                errors=load_errors,
            ),
        }
        self._writer.write(output_path, response)
        return response


class PerformancePipeline:
    """Score every contractor's job history and write rollups."""

    def __init__(
        self,
        *,
        scorer: PerformanceScorer,
        contractor_loader: ContractorLoader | None = None,
        job_loader: JsonlLoader[JobRecord] | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._scorer = scorer
        self._contractors = contractor_loader or ContractorLoader()
        self._jobs = job_loader or JsonlLoader(JobRecord)
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def run(
        self,
        *,
        contractors_path: Path,
        jobs_path: Path,
        output_path: Path,
        as_of: str | None = None,
    ) -> dict[str, Any]:
        load_errors: list[str] = []
        try:
            contractors = self._contractors.load(contractors_path)
        except ContractorLoadError as exc:
            contractors = exc.partial
            load_errors.extend(exc.errors)
            self._logger.warning("contractors.partial_load", errors=exc.errors)
        try:
            jobs = self._jobs.load(jobs_path)
        except RecordLoadError as exc:
            jobs = exc.partial
            load_errors.extend(exc.errors)
            self._logger.warning("jobs.partial_load", errors=exc.errors)

        samples = [self._scorer.score(profile, jobs, as_of=as_of) for profile in contractors]
        metrics = self._scorer.summarize(samples)
        rankings = self._scorer.rank_performers(samples)
        self._logger.info(
            "performance.completed",
            contractor_count=len(samples),
            active_contractors=metrics.active_contractors,
        )

        payload = {
            "contractors": [asdict(sample) for sample in samples],
            "metrics": asdict(metrics),
            "rankings": asdict(rankings),
            "metadata": _run_metadata(as_of=as_of, job_count=len(jobs), errors=load_errors),
        }
        self._writer.write(output_path, payload)
        return payload


class ABTestPipeline:
    """Analyze a JSONL file of A/B test samples."""

    def __init__(
        self,
        *,
        analyzer: ABTestAnalyzer,
        sample_loader: JsonlLoader[ABTestSample] | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._analyzer = analyzer
        self._samples = sample_loader or JsonlLoader(ABTestSample)
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def run(
        self,
        *,
        samples_path: Path,
        output_path: Path,
        test_name: str = "ab-test",
    ) -> dict[str, Any]:
        load_errors: list[str] = []
        try:
            samples = self._samples.load(samples_path)
        except RecordLoadError as exc:
            samples = exc.partial
            load_errors.extend(exc.errors)
            self._logger.warning("samples.partial_load", errors=exc.errors)

        payload = self._analyzer.build_test_results({"name": test_name}, samples)
        statistics = payload["test_results"]["statistics"]
        self._logger.info(
            "ab_test.analyzed",
            test=test_name,
            t_statistic=statistics["t_statistic"],
            confidence_level=statistics["confidence_level"],
        )
        payload["metadata"] = _run_metadata(
            test=test_name,
            sample_count=len(samples),
            errors=load_errors,
        )
        self._writer.write(output_path, payload)
        return payload
