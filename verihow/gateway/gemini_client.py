"""
Gemini client (REST ``generateContent``).

Settings:
    GEMINI_API_KEY: API key
    GEMINI_BASE_URL: default https://generativelanguage.googleapis.com/v1beta
    GEMINI_MODEL: default gemini-2.5-flash
    GEMINI_TIMEOUT_SECONDS: request timeout (default 90)
    FACT_CHECK_TEMPERATURE: temperature of the credibility call (default 0.1)
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

import requests

from verihow.core.observability import record_collaborator_result
from verihow.core.schemas import Citation
from verihow.core.settings import settings
from verihow.gateway.image_payload import parse_image_data
from verihow.gateway.prompts import (
    AI_DETECTION_PROMPT,
    build_credibility_prompt,
    build_translation_prompt,
)

logger = logging.getLogger(__name__)

EMPTY_CREDIBILITY_RESPONSE = "No analysis generated."
EMPTY_DETECTION_RESPONSE = "Analysis failed."


class ModelError(Exception):
    """Transport or provider failure of the model collaborator."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


@dataclass(frozen=True)
class ModelResponse:
    text: str
    citations: List[Citation] = field(default_factory=list)


class ModelClient(Protocol):
    def analyze_credibility(self, content: str, image_data: Optional[str] = None) -> ModelResponse: ...

    def detect_ai_image(self, image_data: str) -> ModelResponse: ...


class Translator(Protocol):
    def translate(self, content: str, target_language: str) -> str: ...


@dataclass
class GeminiConfig:
    api_key: str
    base_url: str
    model: str
    timeout: float
    temperature: float

    @classmethod
    def from_settings(cls) -> "GeminiConfig":
        return cls(
            api_key=settings.gemini_api_key,
            base_url=settings.gemini_base_url,
            model=settings.gemini_model,
            timeout=settings.gemini_timeout_seconds,
            temperature=settings.fact_check_temperature,
        )


def _image_part(image_data: str) -> dict:
    payload = parse_image_data(image_data)
    return {"inline_data": {"mime_type": payload.mime_type, "data": payload.data}}


class GeminiClient:
    """Model and translation collaborator backed by Gemini."""

    def __init__(self, config: Optional[GeminiConfig] = None):
        self.config = config or GeminiConfig.from_settings()

    @staticmethod
    def _extract_text(data: dict) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        content = (candidates[0] or {}).get("content") or {}
        parts = content.get("parts") or []
        return "".join(str(part.get("text", "") or "") for part in parts if isinstance(part, dict))

    @staticmethod
    def _extract_citations(data: dict) -> List[Citation]:
        candidates = data.get("candidates") or []
        if not candidates:
            return []
        metadata = (candidates[0] or {}).get("groundingMetadata") or {}
        citations: List[Citation] = []
        for chunk in metadata.get("groundingChunks") or []:
            web = chunk.get("web") if isinstance(chunk, dict) else None
            if not isinstance(web, dict) or not web.get("uri"):
                continue
            citations.append(Citation(uri=str(web["uri"]), title=web.get("title") or None))
        return citations

    def _generate(
        self,
        parts: list,
        operation: str,
        *,
        temperature: Optional[float] = None,
        tools: Optional[list] = None,
    ) -> dict:
        url = f"{self.config.base_url.rstrip('/')}/models/{self.config.model}:generateContent"
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.config.api_key,
        }
        payload: dict = {"contents": [{"role": "user", "parts": parts}]}
        if temperature is not None:
            payload["generationConfig"] = {"temperature": temperature}
        if tools:
            payload["tools"] = tools

        logger.debug("Gemini call: op=%s model=%s parts=%d", operation, self.config.model, len(parts))
        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.config.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            record_collaborator_result("gemini", ok=False)
            logger.error("Gemini API timeout (%s): %s", operation, e)
            raise ModelError(f"Model request timed out after {self.config.timeout}s", cause=e)
        except requests.exceptions.RequestException as e:
            record_collaborator_result("gemini", ok=False)
            logger.error("Gemini API error (%s): %s", operation, e)
            raise ModelError(f"Model request failed: {e}", cause=e)
        except ValueError as e:
            record_collaborator_result("gemini", ok=False)
            logger.error("Gemini response parse failed (%s): %s", operation, e)
            raise ModelError(f"Model response could not be decoded: {e}", cause=e)

        if not isinstance(data, dict):
            record_collaborator_result("gemini", ok=False)
            raise ModelError("Model response could not be decoded: unexpected payload")
        record_collaborator_result("gemini", ok=True)
        return data

    def analyze_credibility(self, content: str, image_data: Optional[str] = None) -> ModelResponse:
        parts: list = []
        if image_data:
            parts.append(_image_part(image_data))
        parts.append({"text": build_credibility_prompt(content)})

        data = self._generate(
            parts,
            "fact_check",
            temperature=self.config.temperature,
            tools=[{"google_search": {}}],
        )
        text = self._extract_text(data) or EMPTY_CREDIBILITY_RESPONSE
        return ModelResponse(text=text, citations=self._extract_citations(data))

    def detect_ai_image(self, image_data: str) -> ModelResponse:
        parts = [_image_part(image_data), {"text": AI_DETECTION_PROMPT}]
        data = self._generate(parts, "ai_detection")
        return ModelResponse(text=self._extract_text(data) or EMPTY_DETECTION_RESPONSE)

    def translate(self, content: str, target_language: str) -> str:
        data = self._generate(
            [{"text": build_translation_prompt(content, target_language)}],
            "translate",
        )
        return self._extract_text(data) or content


_default_client: Optional[GeminiClient] = None


def get_client() -> GeminiClient:
    """Process-wide client."""
    global _default_client
    if _default_client is None:
        _default_client = GeminiClient()
    return _default_client
