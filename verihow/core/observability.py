from __future__ import annotations

import time
from collections import deque
from threading import Lock
from typing import Any

_LOCK = Lock()
_MAX_DURATION_SAMPLES = 500
_MAX_INTEGRITY_EVENTS = 200

_analysis_durations: dict[str, list[int]] = {}
_analysis_errors: dict[str, int] = {}
_collaborator_stats: dict[str, dict[str, int]] = {}
_integrity_counts: dict[str, int] = {}
_integrity_events: deque[dict[str, Any]] = deque(maxlen=_MAX_INTEGRITY_EVENTS)


def _percentile(values: list[int], percentile: float) -> int:
    if not values:
        return 0
    if len(values) == 1:
        return values[0]
    rank = int(round((percentile / 100.0) * (len(values) - 1)))
    rank = max(0, min(rank, len(values) - 1))
    return values[rank]


def record_analysis_result(mode: str, *, duration_ms: int | None = None, ok: bool = True) -> None:
    mode_name = (mode or "").strip() or "unknown_mode"
    with _LOCK:
        if duration_ms is not None and duration_ms >= 0:
            durations = _analysis_durations.setdefault(mode_name, [])
            durations.append(int(duration_ms))
            if len(durations) > _MAX_DURATION_SAMPLES:
                del durations[0 : len(durations) - _MAX_DURATION_SAMPLES]
        if not ok:
            _analysis_errors[mode_name] = _analysis_errors.get(mode_name, 0) + 1


def record_collaborator_result(provider: str, *, ok: bool) -> None:
    provider_name = (provider or "").strip().lower() or "unknown"
    with _LOCK:
        stats = _collaborator_stats.setdefault(
            provider_name,
            {"requests": 0, "success": 0, "failure": 0},
        )
        stats["requests"] += 1
        if ok:
            stats["success"] += 1
        else:
            stats["failure"] += 1


def record_integrity_event(kind: str, *, detail: str = "", entry_id: str | None = None) -> None:
    """Data-integrity conditions: corrupt history payloads, malformed entries."""
    kind_name = (kind or "").strip() or "unknown"
    event = {
        "kind": kind_name,
        "detail": detail[:300],
        "entry_id": entry_id,
        "timestamp": int(time.time()),
    }
    with _LOCK:
        _integrity_counts[kind_name] = _integrity_counts.get(kind_name, 0) + 1
        _integrity_events.append(event)


def snapshot_observability() -> dict[str, Any]:
    with _LOCK:
        analysis_latency: dict[str, dict[str, int]] = {}
        for mode, durations in _analysis_durations.items():
            if not durations:
                continue
            ordered = sorted(durations)
            analysis_latency[mode] = {
                "count": len(ordered),
                "avg_ms": int(sum(ordered) / len(ordered)),
                "p50_ms": _percentile(ordered, 50),
                "p95_ms": _percentile(ordered, 95),
            }

        collaborators: dict[str, dict[str, float | int]] = {}
        for provider, stats in _collaborator_stats.items():
            requests_total = stats.get("requests", 0)
            success = stats.get("success", 0)
            failure = stats.get("failure", 0)
            success_ratio = (float(success) / float(requests_total)) if requests_total else 0.0
            collaborators[provider] = {
                "requests": requests_total,
                "success": success,
                "failure": failure,
                "success_ratio": round(success_ratio, 4),
            }

        return {
            "analysis_latency": analysis_latency,
            "analysis_errors": dict(_analysis_errors),
            "collaborators": collaborators,
            "integrity": dict(_integrity_counts),
            "recent_integrity_events": list(_integrity_events)[-20:],
        }


def reset_observability_for_test() -> None:
    with _LOCK:
        _analysis_durations.clear()
        _analysis_errors.clear()
        _collaborator_stats.clear()
        _integrity_counts.clear()
        _integrity_events.clear()
