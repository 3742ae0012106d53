from __future__ import annotations

from verihow.core.observability import (
    record_analysis_result,
    record_collaborator_result,
    record_integrity_event,
    snapshot_observability,
)


def test_snapshot_aggregates_latency_and_errors():
    record_analysis_result("FACT_CHECK", duration_ms=100, ok=True)
    record_analysis_result("FACT_CHECK", duration_ms=300, ok=False)
    record_analysis_result("AI_DETECTOR", duration_ms=50)

    snapshot = snapshot_observability()

    assert snapshot["analysis_latency"]["FACT_CHECK"]["count"] == 2
    assert snapshot["analysis_latency"]["FACT_CHECK"]["avg_ms"] == 200
    assert snapshot["analysis_latency"]["AI_DETECTOR"]["p95_ms"] == 50
    assert snapshot["analysis_errors"] == {"FACT_CHECK": 1}


def test_collaborator_success_ratio():
    record_collaborator_result("Gemini", ok=True)
    record_collaborator_result("gemini", ok=True)
    record_collaborator_result("gemini", ok=False)

    stats = snapshot_observability()["collaborators"]["gemini"]

    assert stats["requests"] == 3
    assert stats["failure"] == 1
    assert stats["success_ratio"] == 0.6667


def test_integrity_events_are_counted_and_kept():
    record_integrity_event("history_corrupt", detail="bad json")
    record_integrity_event("history_entry_malformed", detail="mode=AI_DETECTOR", entry_id="42")

    snapshot = snapshot_observability()

    assert snapshot["integrity"] == {"history_corrupt": 1, "history_entry_malformed": 1}
    assert snapshot["recent_integrity_events"][-1]["entry_id"] == "42"
