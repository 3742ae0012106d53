from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from verihow.core.constants import DISCLAIMER_TEXT, PROGRESS_STEPS, SAMPLE_TEXTS, SUPPORTED_LANGUAGES
from verihow.core.schemas import (
    AIDetectionResult,
    AnalysisMode,
    AnalysisResult,
    CredibilityVerdict,
    HistoryEntry,
)
from verihow.orchestrator.service import SessionSnapshot
from verihow.parsing.extraction import split_executive_summary
from verihow.parsing.markup import nodes_to_dicts, parse_markup

Tone = Literal["positive", "caution", "negative", "neutral"]

_POSITIVE_VERDICTS = {CredibilityVerdict.CREDIBLE}
_CAUTION_VERDICTS = {CredibilityVerdict.QUESTIONABLE, CredibilityVerdict.SATIRE}
_NEGATIVE_VERDICTS = {CredibilityVerdict.MISLEADING, CredibilityVerdict.FALSE}
_INPUT_PREVIEW_CHARS = 120


def _clamp_percent(value: int) -> int:
    return max(0, min(100, int(value)))


def verdict_tone(verdict: CredibilityVerdict) -> Tone:
    if verdict in _POSITIVE_VERDICTS:
        return "positive"
    if verdict in _CAUTION_VERDICTS:
        return "caution"
    if verdict in _NEGATIVE_VERDICTS:
        return "negative"
    return "neutral"


def authenticity_score(result: AIDetectionResult) -> int:
    """Human-authenticity percentage shown by the gauge (inverse of the AI score)."""
    return 100 - result.score


def authenticity_tone(score: int) -> Tone:
    if score < 50:
        return "negative"
    if score < 80:
        return "caution"
    return "positive"


def trust_band(score: int) -> Literal["low", "medium", "high"]:
    clamped = _clamp_percent(score)
    if clamped < 40:
        return "low"
    if clamped < 70:
        return "medium"
    return "high"


def progress_steps(mode: AnalysisMode, has_image: bool) -> list[str]:
    if mode == AnalysisMode.AI_DETECTOR:
        return list(PROGRESS_STEPS["AI_DETECTION"])
    if has_image:
        return list(PROGRESS_STEPS["FACT_CHECK_WITH_IMAGE"])
    return list(PROGRESS_STEPS["FACT_CHECK_TEXT"])


def build_narrative_view(body: str) -> dict[str, Any]:
    split = split_executive_summary(body or "")
    return {
        "summary": split.summary,
        "summary_nodes": nodes_to_dicts(parse_markup(split.summary)) if split.summary else [],
        "detailed_body": split.detailed_body,
        "detailed_nodes": nodes_to_dicts(parse_markup(split.detailed_body)),
    }


def _fact_check_view(result: AnalysisResult) -> dict[str, Any]:
    return {
        "kind": "fact_check",
        "verdict": result.verdict.value,
        "score": result.score,
        "tone": verdict_tone(result.verdict),
        "trust_band": trust_band(result.score),
        "explanation": result.explanation,
        "citations": [citation.model_dump() for citation in result.citations],
        **build_narrative_view(result.explanation),
    }


def _ai_detection_view(result: AIDetectionResult) -> dict[str, Any]:
    authenticity = authenticity_score(result)
    return {
        "kind": "ai_detection",
        "verdict": result.verdict.value,
        "score": result.score,
        "authenticity_score": authenticity,
        "tone": authenticity_tone(authenticity),
        "analysis": result.analysis,
        **build_narrative_view(result.analysis),
    }


def report_text(snapshot: SessionSnapshot) -> str:
    """Narrative of the active result, as copied by "copy report"."""
    if snapshot.mode == AnalysisMode.AI_DETECTOR:
        return snapshot.ai_result.analysis if snapshot.ai_result else ""
    return snapshot.result.explanation if snapshot.result else ""


def build_session_view(snapshot: SessionSnapshot) -> dict[str, Any]:
    active: dict[str, Any] | None = None
    if snapshot.mode == AnalysisMode.FACT_CHECK and snapshot.result is not None:
        active = _fact_check_view(snapshot.result)
    elif snapshot.mode == AnalysisMode.AI_DETECTOR and snapshot.ai_result is not None:
        active = _ai_detection_view(snapshot.ai_result)

    return {
        "mode": snapshot.mode.value,
        "state": snapshot.state.value,
        "input_text": snapshot.input_text,
        "has_image": bool(snapshot.image_data),
        "image_data": snapshot.image_data,
        "error_message": snapshot.error_message,
        "notice": snapshot.notice,
        "is_translating": snapshot.is_translating,
        "progress_steps": progress_steps(snapshot.mode, bool(snapshot.image_data)),
        "result": active,
        "report_text": report_text(snapshot),
        "disclaimer": DISCLAIMER_TEXT,
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }


def _input_preview(entry: HistoryEntry) -> str:
    text = " ".join((entry.input_text or "").split())
    if not text:
        return "Image analysis" if entry.image_data else ""
    if len(text) > _INPUT_PREVIEW_CHARS:
        return text[:_INPUT_PREVIEW_CHARS].rstrip() + "..."
    return text


def build_history_item(entry: HistoryEntry) -> dict[str, Any]:
    result = entry.nested_result()
    verdict = None
    score = None
    if isinstance(result, (AnalysisResult, AIDetectionResult)):
        verdict = result.verdict.value
        score = result.score
    return {
        "id": entry.id,
        "timestamp": entry.timestamp,
        "mode": entry.mode.value,
        "input_preview": _input_preview(entry),
        "has_image": bool(entry.image_data),
        "verdict": verdict,
        "score": score,
    }


def build_history_view(entries: list[HistoryEntry]) -> dict[str, Any]:
    return {
        "count": len(entries),
        "items": [build_history_item(entry) for entry in entries],
    }


def build_samples_view() -> dict[str, Any]:
    return {
        "samples": [dict(sample) for sample in SAMPLE_TEXTS],
        "languages": list(SUPPORTED_LANGUAGES),
        "disclaimer": DISCLAIMER_TEXT,
    }
