from __future__ import annotations

from verihow.core.constants import DISCLAIMER_TEXT, PROGRESS_STEPS
from verihow.core.schemas import (
    AIDetectionResult,
    AnalysisMode,
    AnalysisResult,
    AnalysisState,
    CredibilityVerdict,
    HistoryEntry,
)
from verihow.orchestrator.service import SessionSnapshot
from verihow.services.response_mapper import (
    authenticity_score,
    authenticity_tone,
    build_history_item,
    build_samples_view,
    build_session_view,
    progress_steps,
    report_text,
    trust_band,
    verdict_tone,
)


def _snapshot(**overrides) -> SessionSnapshot:
    values = dict(
        mode=AnalysisMode.FACT_CHECK,
        state=AnalysisState.IDLE,
        input_text="",
        image_data=None,
        result=None,
        ai_result=None,
        error_message=None,
        notice=None,
        is_translating=False,
    )
    values.update(overrides)
    return SessionSnapshot(**values)


def test_verdict_tone_groups():
    assert verdict_tone(CredibilityVerdict.CREDIBLE) == "positive"
    assert verdict_tone(CredibilityVerdict.SATIRE) == "caution"
    assert verdict_tone(CredibilityVerdict.FALSE) == "negative"
    assert verdict_tone(CredibilityVerdict.UNVERIFIED) == "neutral"


def test_authenticity_is_inverse_of_ai_score():
    result = AIDetectionResult(score=87, verdict="LIKELY AI")

    assert authenticity_score(result) == 13
    assert authenticity_tone(13) == "negative"
    assert authenticity_tone(65) == "caution"
    assert authenticity_tone(80) == "positive"


def test_trust_band_clamps_out_of_range_scores():
    assert trust_band(-20) == "low"
    assert trust_band(39) == "low"
    assert trust_band(40) == "medium"
    assert trust_band(70) == "high"
    assert trust_band(250) == "high"


def test_progress_steps_follow_mode_and_image():
    assert progress_steps(AnalysisMode.AI_DETECTOR, True) == PROGRESS_STEPS["AI_DETECTION"]
    assert progress_steps(AnalysisMode.FACT_CHECK, True) == PROGRESS_STEPS["FACT_CHECK_WITH_IMAGE"]
    assert progress_steps(AnalysisMode.FACT_CHECK, False) == PROGRESS_STEPS["FACT_CHECK_TEXT"]


def test_session_view_renders_fact_check_narrative():
    result = AnalysisResult(
        verdict="FALSE",
        score=12,
        explanation="### Executive Summary\nFabricated.\n### Details\n- **Source**: none",
        citations=[{"uri": "https://a.example", "title": "A"}],
    )
    view = build_session_view(_snapshot(state=AnalysisState.COMPLETE, input_text="claim", result=result))

    active = view["result"]
    assert view["state"] == "COMPLETE"
    assert view["disclaimer"] == DISCLAIMER_TEXT
    assert active["kind"] == "fact_check"
    assert active["tone"] == "negative"
    assert active["trust_band"] == "low"
    assert active["summary"] == "Fabricated."
    assert active["detailed_nodes"][0] == {"level": 3, "text": "Details", "kind": "heading"}
    assert active["citations"] == [{"uri": "https://a.example", "title": "A"}]
    assert view["report_text"] == result.explanation


def test_session_view_shows_only_active_mode_result():
    result = AnalysisResult(verdict="CREDIBLE", score=90, explanation="ok")
    view = build_session_view(_snapshot(mode=AnalysisMode.AI_DETECTOR, result=result))

    assert view["result"] is None
    assert view["report_text"] == ""


def test_report_text_for_ai_detection():
    ai_result = AIDetectionResult(score=30, verdict="LIKELY HUMAN", analysis="Natural grain.")
    snapshot = _snapshot(mode=AnalysisMode.AI_DETECTOR, ai_result=ai_result)

    assert report_text(snapshot) == "Natural grain."
    assert build_session_view(snapshot)["result"]["authenticity_score"] == 70


def test_history_item_preview_and_verdict():
    entry = HistoryEntry(
        id="1",
        timestamp=1,
        mode=AnalysisMode.FACT_CHECK,
        input_text="word " * 40,
        fact_check_result=AnalysisResult(verdict="MISLEADING", score=33),
    )
    item = build_history_item(entry)

    assert item["verdict"] == "MISLEADING"
    assert item["score"] == 33
    assert item["input_preview"].endswith("...")
    assert len(item["input_preview"]) <= 123


def test_history_item_image_only_preview():
    entry = HistoryEntry(
        id="2",
        timestamp=2,
        mode=AnalysisMode.AI_DETECTOR,
        image_data="data:image/png;base64,AA==",
        ai_result=AIDetectionResult(score=50),
    )

    assert build_history_item(entry)["input_preview"] == "Image analysis"


def test_samples_view_lists_languages():
    view = build_samples_view()

    assert len(view["samples"]) == 3
    assert "English" in view["languages"]
    assert len(view["languages"]) == 23
