from __future__ import annotations

from pathlib import Path

import pytest

from eventmatch.store import (
    InMemoryMatchStore,
    JsonFileMatchStore,
    MatchRecord,
    MatchStore,
    MatchStoreError,
)


def build_record(score: float, **kwargs) -> MatchRecord:
    defaults = {
        "event_id": "E-1",
        "contractor_id": "C-1",
        "service_requirement_id": "R-1",
        "service_category": "catering",
        "match_score": score,
        "estimated_price": {"min": 100.0, "max": 400.0},
    }
    defaults.update(kwargs)
    return MatchRecord(**defaults)


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path: Path) -> MatchStore:
    if request.param == "memory":
        return InMemoryMatchStore()
    return JsonFileMatchStore(tmp_path / "nested" / "matches.json")


def test_upsert_overwrites_same_key(store: MatchStore):
    store.upsert(build_record(0.6))
    store.upsert(build_record(0.9))

    rows = store.records_for_event("E-1")
    assert len(rows) == 1
    assert rows[0].match_score == 0.9
    assert store.get(("E-1", "C-1", "R-1")).match_score == 0.9


def test_distinct_keys_are_kept_apart(store: MatchStore):
    store.upsert(build_record(0.6))
    store.upsert(build_record(0.7, service_requirement_id="R-2"))
    store.upsert(build_record(0.8, event_id="E-2"))

    assert len(store.records_for_event("E-1")) == 2
    assert len(store.records_for_event("E-2")) == 1
    assert store.get(("E-3", "C-1", "R-1")) is None


def test_stores_satisfy_protocol(store: MatchStore):
    assert isinstance(store, MatchStore)


def test_json_store_persists_across_instances(tmp_path: Path):
    path = tmp_path / "matches.json"
    JsonFileMatchStore(path).upsert(build_record(0.75))

    reopened = JsonFileMatchStore(path)

    record = reopened.get(("E-1", "C-1", "R-1"))
    assert record is not None
    assert record.estimated_price == {"min": 100.0, "max": 400.0}


def test_json_store_rejects_corrupt_file(tmp_path: Path):
    path = tmp_path / "matches.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(MatchStoreError):
        JsonFileMatchStore(path).upsert(build_record(0.5))
