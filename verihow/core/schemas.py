"""
Result domain model.

Typed shapes that the rest of the service treats as ground truth once
extraction succeeds, plus the persisted history entry and the request bodies
of the HTTP surface.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class AnalysisMode(str, Enum):
    """Analysis kind selected by the user."""

    FACT_CHECK = "FACT_CHECK"
    """Content credibility"""

    AI_DETECTOR = "AI_DETECTOR"
    """Image authenticity"""


class AnalysisState(str, Enum):
    IDLE = "IDLE"
    ANALYZING = "ANALYZING"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"


class CredibilityVerdict(str, Enum):
    CREDIBLE = "CREDIBLE"
    QUESTIONABLE = "QUESTIONABLE"
    MISLEADING = "MISLEADING"
    FALSE = "FALSE"
    SATIRE = "SATIRE"
    UNVERIFIED = "UNVERIFIED"

    @classmethod
    def from_string(cls, value: Any) -> "CredibilityVerdict":
        """Unknown or empty tokens become UNVERIFIED."""
        if isinstance(value, cls):
            return value
        token = str(value or "UNVERIFIED").upper().strip()
        try:
            return cls(token)
        except ValueError:
            return cls.UNVERIFIED


class AIVerdict(str, Enum):
    LIKELY_AI = "LIKELY AI"
    POSSIBLE_AI = "POSSIBLE AI"
    LIKELY_HUMAN = "LIKELY HUMAN"
    UNCLEAR = "UNCLEAR"

    @classmethod
    def from_string(cls, value: Any) -> "AIVerdict":
        """Unknown phrases become UNCLEAR; internal whitespace is collapsed."""
        if isinstance(value, cls):
            return value
        token = " ".join(str(value or "UNCLEAR").upper().split())
        try:
            return cls(token)
        except ValueError:
            return cls.UNCLEAR


def _coerce_int(value: Any, default: Optional[int]) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        try:
            return int(value)
        except (ValueError, OverflowError):
            return default
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except (ValueError, OverflowError):
            return default
    return default


def _normalize_chunks(value: Any) -> List[Dict[str, Any]]:
    """Accepts both ``{"web": {"uri", "title"}}`` and flat ``{"uri", "title"}`` chunks."""
    if not isinstance(value, list):
        return []
    chunks: List[Dict[str, Any]] = []
    for raw in value:
        if isinstance(raw, Citation):
            chunks.append(raw.model_dump())
            continue
        if not isinstance(raw, dict):
            continue
        web = raw.get("web") if isinstance(raw.get("web"), dict) else raw
        uri = str(web.get("uri") or "").strip()
        if not uri:
            continue
        title = web.get("title")
        chunks.append({"uri": uri, "title": str(title) if title else None})
    return chunks


class Citation(BaseModel):
    """Source reference returned alongside a credibility analysis."""

    uri: str
    title: Optional[str] = None

    def to_chunk(self) -> Dict[str, Any]:
        """Provider wire shape."""
        return {"web": {"uri": self.uri, "title": self.title or ""}}


class AnalysisResult(BaseModel):
    """Content credibility verdict."""

    model_config = ConfigDict(populate_by_name=True)

    verdict: CredibilityVerdict = CredibilityVerdict.UNVERIFIED
    score: int = 50
    """Higher is more credible. Not clamped."""

    explanation: str = ""
    """Narrative body in the markup grammar"""

    citations: List[Citation] = Field(
        default_factory=list,
        validation_alias=AliasChoices("citations", "groundingChunks"),
        serialization_alias="groundingChunks",
    )

    @field_validator("verdict", mode="before")
    @classmethod
    def _normalize_verdict(cls, value: Any) -> CredibilityVerdict:
        return CredibilityVerdict.from_string(value)

    @field_validator("score", mode="before")
    @classmethod
    def _normalize_score(cls, value: Any) -> int:
        return _coerce_int(value, 50)

    @field_validator("explanation", mode="before")
    @classmethod
    def _normalize_explanation(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("citations", mode="before")
    @classmethod
    def _normalize_citations(cls, value: Any) -> List[Dict[str, Any]]:
        return _normalize_chunks(value)


class AIDetectionResult(BaseModel):
    """Image authenticity verdict."""

    score: int = 0
    """Probability that the image is synthetic (0 human, 100 synthetic)"""

    verdict: AIVerdict = AIVerdict.UNCLEAR
    analysis: str = ""

    @field_validator("verdict", mode="before")
    @classmethod
    def _normalize_verdict(cls, value: Any) -> AIVerdict:
        return AIVerdict.from_string(value)

    @field_validator("score", mode="before")
    @classmethod
    def _normalize_score(cls, value: Any) -> int:
        return _coerce_int(value, 0)

    @field_validator("analysis", mode="before")
    @classmethod
    def _normalize_analysis(cls, value: Any) -> str:
        return "" if value is None else str(value)


class HistoryEntry(BaseModel):
    """
    One persisted analysis.

    Current records nest the result (``factCheckResult`` / ``aiResult``).
    Legacy records carry ``verdict``/``score``/``explanation``/``groundingChunks``
    directly on the entry; the History Store normalizes them on load.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    timestamp: int
    mode: AnalysisMode = AnalysisMode.FACT_CHECK
    input_text: Optional[str] = Field(default=None, alias="inputText")
    image_data: Optional[str] = Field(default=None, alias="imageData")
    fact_check_result: Optional[AnalysisResult] = Field(default=None, alias="factCheckResult")
    ai_result: Optional[AIDetectionResult] = Field(default=None, alias="aiResult")

    # legacy flattened fields
    verdict: Optional[str] = None
    score: Optional[int] = None
    explanation: Optional[str] = None
    citations: Optional[List[Citation]] = Field(
        default=None,
        validation_alias=AliasChoices("citations", "groundingChunks"),
        serialization_alias="groundingChunks",
    )

    @model_validator(mode="before")
    @classmethod
    def _normalize_fields(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        values = dict(values)
        if values.get("id") is not None:
            values["id"] = str(values["id"])
        if values.get("mode") in (None, ""):
            values["mode"] = AnalysisMode.FACT_CHECK
        if "score" in values:
            values["score"] = _coerce_int(values.get("score"), None)
        for key in ("citations", "groundingChunks"):
            if key in values and values[key] is not None:
                values[key] = _normalize_chunks(values[key])
        return values

    def nested_result(self) -> Optional[BaseModel]:
        if self.mode == AnalysisMode.FACT_CHECK:
            return self.fact_check_result
        return self.ai_result

    def has_legacy_fields(self) -> bool:
        return any(
            value is not None
            for value in (self.verdict, self.score, self.explanation, self.citations)
        )

    def to_storage(self) -> Dict[str, Any]:
        """JSON-ready dict in the persisted (camelCase) layout."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SessionInputRequest(BaseModel):
    text: Optional[str] = None
    image_data: Optional[str] = None


class ModeSwitchRequest(BaseModel):
    mode: AnalysisMode


class TranslateRequest(BaseModel):
    target_language: str = Field(..., min_length=1)
