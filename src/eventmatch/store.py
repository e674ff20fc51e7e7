"""Match record persistence."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import pendulum

MatchKey = tuple[str, str, str]


class MatchStoreError(RuntimeError):
    """Raised when a match record cannot be read or written."""


@dataclass(slots=True)
class MatchRecord:
    """Row of the event/contractor match table."""

    event_id: str
    contractor_id: str
    service_requirement_id: str
    service_category: str
    match_score: float
    estimated_price: dict[str, float]
    updated_at: str = field(default_factory=lambda: pendulum.now("UTC").to_iso8601_string())

    @property
    def key(self) -> MatchKey:
        return (self.event_id, self.contractor_id, self.service_requirement_id)


@runtime_checkable
class MatchStore(Protocol):
    """Upsert-only store keyed by (event, contractor, requirement)."""

    def upsert(self, record: MatchRecord) -> None:
        """Insert the record or overwrite the row with the same key."""

    def get(self, key: MatchKey) -> MatchRecord | None:
        """Return the record stored under key, if any."""

    def records_for_event(self, event_id: str) -> list[MatchRecord]:
        """Return every record stored for the event."""


class InMemoryMatchStore:
    """Dictionary-backed store, mainly for tests and one-off runs."""

    def __init__(self) -> None:
        self._rows: dict[MatchKey, MatchRecord] = {}

    def upsert(self, record: MatchRecord) -> None:
        self._rows[record.key] = record

    def get(self, key: MatchKey) -> MatchRecord | None:
        return self._rows.get(key)

    def records_for_event(self, event_id: str) -> list[MatchRecord]:
        return [row for key, row in self._rows.items() if key[0] == event_id]

    def __len__(self) -> int:
        return len(self._rows)


class JsonFileMatchStore:
    """Store persisted as a JSON list of records in a single file."""

    def __init__(self, path: str | Path):
        self._path = Path(path)

    def upsert(self, record: MatchRecord) -> None:
        rows = self._load()
        rows[record.key] = record
        self._dump(rows)

    def get(self, key: MatchKey) -> MatchRecord | None:
        return self._load().get(key)

    def records_for_event(self, event_id: str) -> list[MatchRecord]:
        return [row for key, row in self._load().items() if key[0] == event_id]

    def _load(self) -> dict[MatchKey, MatchRecord]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8") or "[]")
            records = [MatchRecord(**item) for item in raw]
        except (OSError, json.JSONDecodeError, TypeError) as exc:
            raise MatchStoreError(f"Cannot read match store {self._path}: {exc}") from exc
        return {record.key: record for record in records}

    def _dump(self, rows: dict[MatchKey, MatchRecord]) -> None:
        payload: list[dict[str, Any]] = [asdict(row) for row in rows.values()]
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(payload, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        except OSError as exc:
            raise MatchStoreError(f"Cannot write match store {self._path}: {exc}") from exc
