"""
Response extraction.

Turns one raw model response into a typed result. Sentinel fields
(``VERDICT:``, ``SCORE:``, ``AI_SCORE:``, ``AI_VERDICT:``) are matched in a
fixed order; the first match of each wins, its matched text is removed from
the narrative body and absent fields fall back to defaults. Every function
here is total over ``str``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from verihow.core.schemas import AIDetectionResult, AnalysisResult, Citation
from verihow.parsing.markup import is_heading_line

DEFAULT_CREDIBILITY_VERDICT = "UNVERIFIED"
DEFAULT_CREDIBILITY_SCORE = 50
DEFAULT_AI_VERDICT = "UNCLEAR"
DEFAULT_AI_SCORE = 0

_VERDICT_PATTERN = re.compile(r"VERDICT:\s*([A-Z]+)", re.IGNORECASE)
_SCORE_PATTERN = re.compile(r"SCORE:\s*(\d+)", re.IGNORECASE)
_AI_SCORE_PATTERN = re.compile(r"AI_SCORE:\s*(\d+)", re.IGNORECASE)
# letters and blanks only: the capture ends at the line end or the next sentinel
_AI_VERDICT_PATTERN = re.compile(
    r"AI_VERDICT:\s*([A-Z][A-Z \t]*?)(?=[ \t]*(?:AI_SCORE:|[^A-Z \t]|$))",
    re.IGNORECASE,
)

_SUMMARY_HEADING = "### executive summary"


@dataclass(frozen=True)
class CredibilityExtraction:
    verdict: str
    score: int
    body: str


@dataclass(frozen=True)
class SummarySplit:
    summary: Optional[str]
    detailed_body: str


@dataclass(frozen=True)
class _SentinelRule:
    name: str
    pattern: re.Pattern[str]


def _parse_score(value: Optional[str], default: int) -> int:
    if not value:
        return default
    try:
        return int(value, 10)
    except ValueError:
        # past the int string conversion limit
        return default


def _strip_first(body: str, matched: str) -> str:
    return body.replace(matched, "", 1)


def _match_sentinels(raw: str, rules: Iterable[_SentinelRule]) -> tuple[dict[str, str], str]:
    """
    Runs each rule against the raw text and strips its matched substring.

    Returns the captured groups by rule name and the remaining body.
    """
    captured: dict[str, str] = {}
    body = raw
    for rule in rules:
        match = rule.pattern.search(raw)
        if match is None:
            continue
        captured[rule.name] = match.group(1)
        body = _strip_first(body, match.group(0))
    return captured, body


_CREDIBILITY_RULES = (
    _SentinelRule("verdict", _VERDICT_PATTERN),
    _SentinelRule("score", _SCORE_PATTERN),
)

_AI_DETECTION_RULES = (
    _SentinelRule("score", _AI_SCORE_PATTERN),
    _SentinelRule("verdict", _AI_VERDICT_PATTERN),
)


def extract_credibility(raw: str) -> CredibilityExtraction:
    text = raw if isinstance(raw, str) else ""
    captured, body = _match_sentinels(text, _CREDIBILITY_RULES)

    verdict = captured.get("verdict")
    score = captured.get("score")
    return CredibilityExtraction(
        verdict=verdict.upper() if verdict else DEFAULT_CREDIBILITY_VERDICT,
        score=_parse_score(score, DEFAULT_CREDIBILITY_SCORE),
        body=body.strip(),
    )


def build_analysis_result(raw: str, citations: Iterable[Citation] = ()) -> AnalysisResult:
    """Extraction plus the citation chunks returned by the model collaborator."""
    extracted = extract_credibility(raw)
    return AnalysisResult(
        verdict=extracted.verdict,
        score=extracted.score,
        explanation=extracted.body,
        citations=list(citations),
    )


def extract_ai_detection(raw: str) -> AIDetectionResult:
    text = raw if isinstance(raw, str) else ""
    captured, body = _match_sentinels(text, _AI_DETECTION_RULES)

    score = captured.get("score")
    verdict = captured.get("verdict")
    return AIDetectionResult(
        score=_parse_score(score, DEFAULT_AI_SCORE),
        verdict=verdict.upper().strip() if verdict and verdict.strip() else DEFAULT_AI_VERDICT,
        analysis=body.strip(),
    )


def split_executive_summary(body: str) -> SummarySplit:
    """
    Separates the ``### Executive Summary`` section from the rest of the body.

    The section runs from the heading to the next ``## `` or ``### `` heading
    line or the end of the text. Without the heading the body is returned untouched.
    """
    text = body if isinstance(body, str) else ""
    lines = text.split("\n")

    start = None
    for index, line in enumerate(lines):
        if line.strip().lower() == _SUMMARY_HEADING:
            start = index
            break
    if start is None:
        return SummarySplit(summary=None, detailed_body=text)

    end = len(lines)
    for index in range(start + 1, len(lines)):
        if is_heading_line(lines[index]):
            end = index
            break

    summary = "\n".join(lines[start + 1 : end]).strip()
    remaining = lines[:start] + lines[end:]
    return SummarySplit(summary=summary, detailed_body="\n".join(remaining).strip())
