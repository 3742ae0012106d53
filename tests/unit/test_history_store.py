from __future__ import annotations

import json

from verihow.core.observability import snapshot_observability
from verihow.core.schemas import AIDetectionResult, AnalysisMode, AnalysisResult, CredibilityVerdict, HistoryEntry
from verihow.db.session import build_engine
from verihow.store.history import HistoryStore, is_loadable, new_entry_id, normalize
from verihow.store.kv import InMemoryKeyValueStore, SqlKeyValueStore

KEY = "verihow_history"


def _entry(index: int) -> HistoryEntry:
    return HistoryEntry(
        id=str(1000 + index),
        timestamp=1000 + index,
        mode=AnalysisMode.FACT_CHECK,
        input_text=f"claim {index}",
        fact_check_result=AnalysisResult(verdict="CREDIBLE", score=index, explanation=f"body {index}"),
    )


def test_load_missing_key_is_empty(history_store: HistoryStore) -> None:
    assert history_store.load() == []


def test_append_then_reload_round_trips(kv_store: InMemoryKeyValueStore, history_store: HistoryStore) -> None:
    history_store.append(_entry(1))
    history_store.append(
        HistoryEntry(
            id="ai-1",
            timestamp=2000,
            mode=AnalysisMode.AI_DETECTOR,
            image_data="data:image/png;base64,AAAA",
            ai_result=AIDetectionResult(score=70, verdict="POSSIBLE AI", analysis="noise"),
        )
    )

    reloaded = HistoryStore(kv_store, storage_key=KEY).load()

    assert [e.id for e in reloaded] == ["ai-1", "1001"]
    assert reloaded[0].ai_result == AIDetectionResult(score=70, verdict="POSSIBLE AI", analysis="noise")
    assert reloaded[1].fact_check_result.explanation == "body 1"


def test_append_caps_at_fifty_most_recent_first(kv_store: InMemoryKeyValueStore, history_store: HistoryStore) -> None:
    for index in range(55):
        history_store.append(_entry(index))

    stored = json.loads(kv_store.get(KEY))

    assert len(history_store.entries) == 50
    assert len(stored) == 50
    assert stored[0]["id"] == "1054"
    assert stored[-1]["id"] == "1005"


def test_clear_removes_key(kv_store: InMemoryKeyValueStore, history_store: HistoryStore) -> None:
    history_store.append(_entry(1))
    history_store.clear()

    assert KEY not in kv_store
    assert history_store.entries == []
    assert history_store.load() == []


def test_corrupt_payload_loads_empty_and_reports(kv_store: InMemoryKeyValueStore) -> None:
    kv_store.set(KEY, "{not json")
    store = HistoryStore(kv_store, storage_key=KEY)

    assert store.load() == []
    snapshot = snapshot_observability()
    assert snapshot["integrity"]["history_corrupt"] == 1


def test_non_array_payload_loads_empty(kv_store: InMemoryKeyValueStore) -> None:
    kv_store.set(KEY, json.dumps({"id": "1"}))

    assert HistoryStore(kv_store, storage_key=KEY).load() == []
    assert snapshot_observability()["integrity"]["history_corrupt"] == 1


def test_legacy_entry_is_normalized_on_load(kv_store: InMemoryKeyValueStore) -> None:
    kv_store.set(
        KEY,
        json.dumps(
            [
                {
                    "id": "1",
                    "timestamp": 1,
                    "mode": "FACT_CHECK",
                    "inputText": "x",
                    "verdict": "FALSE",
                    "score": 10,
                    "explanation": "e",
                    "groundingChunks": [],
                }
            ]
        ),
    )
    store = HistoryStore(kv_store, storage_key=KEY)
    entries = store.load()

    assert len(entries) == 1
    result = entries[0].fact_check_result
    assert result.verdict == CredibilityVerdict.FALSE
    assert result.score == 10
    assert result.explanation == "e"
    assert result.citations == []
    assert entries[0].verdict is None
    assert store.get("1") is not None


def test_malformed_entries_are_excluded_and_reported(kv_store: InMemoryKeyValueStore) -> None:
    kv_store.set(
        KEY,
        json.dumps(
            [
                {"id": "ai-no-result", "timestamp": 2, "mode": "AI_DETECTOR", "imageData": "data:image/png;base64,AA=="},
                {"timestamp": 3},
                _entry(1).to_storage(),
            ]
        ),
    )
    store = HistoryStore(kv_store, storage_key=KEY)
    store.load()

    assert [e.id for e in store.loadable_entries()] == ["1001"]
    assert store.get("ai-no-result") is None
    integrity = snapshot_observability()["integrity"]
    assert integrity["history_entry_malformed"] == 1
    assert integrity["history_record_invalid"] == 1


def test_normalize_prefers_nested_result() -> None:
    entry = _entry(3).model_copy(update={"verdict": "FALSE", "score": 1})

    assert normalize(entry) is entry
    assert is_loadable(entry)


def test_new_entry_id_is_unique_within_same_millisecond() -> None:
    first = new_entry_id(5_000_000)
    second = new_entry_id(5_000_000)
    third = new_entry_id(5_000_001)

    assert first == "5000000"
    assert second == "5000000-1"
    assert third == "5000001"


def test_sql_key_value_store_round_trip(tmp_path) -> None:
    engine = build_engine(f"sqlite:///{tmp_path / 'kv.db'}")
    kv = SqlKeyValueStore(engine)

    assert kv.get(KEY) is None
    kv.set(KEY, "[]")
    kv.set(KEY, '[{"id": "1"}]')
    assert kv.get(KEY) == '[{"id": "1"}]'

    kv.remove(KEY)
    assert kv.get(KEY) is None


def test_history_store_over_sql_survives_new_instance(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'history.db'}"
    store = HistoryStore(SqlKeyValueStore(build_engine(url)), storage_key=KEY)
    store.load()
    store.append(_entry(7))

    reopened = HistoryStore(SqlKeyValueStore(build_engine(url)), storage_key=KEY)

    assert [e.id for e in reopened.load()] == ["1007"]


def test_legacy_infinite_score_loads_with_default(kv_store: InMemoryKeyValueStore) -> None:
    kv_store.set(KEY, '[{"id":"1","timestamp":1,"mode":"FACT_CHECK","verdict":"FALSE","score":Infinity}]')
    store = HistoryStore(kv_store, storage_key=KEY)

    entries = store.load()

    assert len(entries) == 1
    assert entries[0].fact_check_result.verdict == CredibilityVerdict.FALSE
    assert entries[0].fact_check_result.score == 50


def test_nested_overflowing_score_loads_with_default(kv_store: InMemoryKeyValueStore) -> None:
    kv_store.set(
        KEY,
        json.dumps(
            [
                {
                    "id": "1",
                    "timestamp": 1,
                    "mode": "FACT_CHECK",
                    "factCheckResult": {"verdict": "CREDIBLE", "score": "1e999", "explanation": "x"},
                },
                {
                    "id": "2",
                    "timestamp": 2,
                    "mode": "AI_DETECTOR",
                    "aiResult": {"score": float("nan"), "verdict": "LIKELY AI"},
                },
            ]
        ),
    )
    store = HistoryStore(kv_store, storage_key=KEY)

    entries = store.load()

    assert entries[0].fact_check_result.score == 50
    assert entries[1].ai_result.score == 0


def test_integer_past_conversion_limit_is_corrupt_payload(kv_store: InMemoryKeyValueStore) -> None:
    kv_store.set(KEY, '[{"id":"1","timestamp":' + "9" * 5000 + "}]")
    store = HistoryStore(kv_store, storage_key=KEY)

    assert store.load() == []
    assert snapshot_observability()["integrity"]["history_corrupt"] == 1
