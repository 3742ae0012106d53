from __future__ import annotations

import logging

import pytest
import requests

import verihow.gateway.gemini_client as gemini_module
from tests.fakes import PNG_DATA_URL
from verihow.core.errors import InputValidationError
from verihow.core.observability import snapshot_observability
from verihow.gateway.gemini_client import GeminiClient, GeminiConfig, ModelError


class _FakeResponse:
    def __init__(self, status_code: int, payload: object | None = None, text: str = ""):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.text = text

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)

    def json(self) -> object:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def _client() -> GeminiClient:
    return GeminiClient(
        GeminiConfig(
            api_key="test-key",
            base_url="https://gemini.test/v1beta",
            model="gemini-test",
            timeout=5.0,
            temperature=0.1,
        )
    )


def _candidate(text: str, chunks: list | None = None) -> dict:
    candidate: dict = {"content": {"parts": [{"text": text}]}}
    if chunks is not None:
        candidate["groundingMetadata"] = {"groundingChunks": chunks}
    return {"candidates": [candidate]}


def test_analyze_credibility_sends_search_tool_and_reads_citations(monkeypatch: pytest.MonkeyPatch):
    captured: dict = {}

    def _fake_post(url, headers=None, json=None, timeout=None):
        captured.update(url=url, headers=headers, json=json, timeout=timeout)
        return _FakeResponse(
            200,
            payload=_candidate(
                "VERDICT: FALSE\nSCORE: 5\nDebunked.",
                chunks=[
                    {"web": {"uri": "https://news.example/a", "title": "A"}},
                    {"web": {"title": "missing uri"}},
                ],
            ),
        )

    monkeypatch.setattr(gemini_module.requests, "post", _fake_post)

    response = _client().analyze_credibility("Claim text", image_data=PNG_DATA_URL)

    assert captured["url"] == "https://gemini.test/v1beta/models/gemini-test:generateContent"
    assert captured["headers"]["x-goog-api-key"] == "test-key"
    assert captured["timeout"] == 5.0
    assert captured["json"]["tools"] == [{"google_search": {}}]
    assert captured["json"]["generationConfig"] == {"temperature": 0.1}
    parts = captured["json"]["contents"][0]["parts"]
    assert parts[0]["inline_data"]["mime_type"] == "image/png"
    assert "Claim text" in parts[1]["text"]

    assert response.text == "VERDICT: FALSE\nSCORE: 5\nDebunked."
    assert [c.uri for c in response.citations] == ["https://news.example/a"]
    assert snapshot_observability()["collaborators"]["gemini"]["success"] == 1


def test_analyze_credibility_empty_text_uses_placeholder(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(gemini_module.requests, "post", lambda *a, **k: _FakeResponse(200, payload={"candidates": []}))

    response = _client().analyze_credibility("Claim")

    assert response.text == "No analysis generated."
    assert response.citations == []


def test_detect_ai_image_has_no_search_tool(monkeypatch: pytest.MonkeyPatch):
    captured: dict = {}

    def _fake_post(url, headers=None, json=None, timeout=None):
        captured["json"] = json
        return _FakeResponse(200, payload=_candidate(""))

    monkeypatch.setattr(gemini_module.requests, "post", _fake_post)

    response = _client().detect_ai_image(PNG_DATA_URL)

    assert "tools" not in captured["json"]
    assert response.text == "Analysis failed."


def test_detect_ai_image_rejects_non_image_before_request(monkeypatch: pytest.MonkeyPatch):
    def _fail_post(*_args, **_kwargs):
        raise AssertionError("request must not be sent")

    monkeypatch.setattr(gemini_module.requests, "post", _fail_post)

    with pytest.raises(InputValidationError):
        _client().detect_ai_image("data:text/plain;base64,aGVsbG8=")


def test_translate_falls_back_to_original_when_empty(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(gemini_module.requests, "post", lambda *a, **k: _FakeResponse(200, payload=_candidate("")))

    assert _client().translate("Original body", "Hindi") == "Original body"


def test_http_error_becomes_model_error(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.ERROR, logger=gemini_module.__name__)
    monkeypatch.setattr(gemini_module.requests, "post", lambda *a, **k: _FakeResponse(503, text="unavailable"))

    with pytest.raises(ModelError) as exc_info:
        _client().analyze_credibility("Claim")

    assert "503" in str(exc_info.value)
    assert isinstance(exc_info.value.cause, requests.exceptions.HTTPError)
    assert snapshot_observability()["collaborators"]["gemini"]["failure"] == 1
    assert "Gemini API error (fact_check)" in caplog.text


def test_timeout_becomes_model_error(monkeypatch: pytest.MonkeyPatch):
    def _timeout(*_args, **_kwargs):
        raise requests.exceptions.Timeout("read timed out")

    monkeypatch.setattr(gemini_module.requests, "post", _timeout)

    with pytest.raises(ModelError, match="timed out"):
        _client().translate("body", "Tamil")


def test_undecodable_body_becomes_model_error(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(
        gemini_module.requests,
        "post",
        lambda *a, **k: _FakeResponse(200, payload=ValueError("Expecting value")),
    )

    with pytest.raises(ModelError, match="could not be decoded"):
        _client().detect_ai_image(PNG_DATA_URL)
