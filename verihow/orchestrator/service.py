"""
Analysis orchestrator.

Owns the active session: mode, input echo, the active result pair (at most
one non-null) and the IDLE -> ANALYZING -> COMPLETE/ERROR state machine.
Collaborator calls and history writes are blocking and run in a worker
thread. Session state only changes on the event loop, so callers must be
coroutines (the HTTP handlers are all `async def`).
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from verihow.core.constants import resolve_language
from verihow.core.errors import (
    AnalysisInProgressError,
    HistoryEntryNotFoundError,
    InputValidationError,
    TranslationUnavailableError,
)
from verihow.core.observability import record_analysis_result
from verihow.core.schemas import (
    AIDetectionResult,
    AnalysisMode,
    AnalysisResult,
    AnalysisState,
    HistoryEntry,
)
from verihow.gateway.gemini_client import ModelClient, Translator
from verihow.gateway.image_payload import parse_image_data
from verihow.parsing.extraction import build_analysis_result, extract_ai_detection
from verihow.store.history import HistoryStore, new_entry_id

logger = logging.getLogger(__name__)

EMPTY_INPUT_MESSAGE = "Please enter text or upload an image to analyze."
IMAGE_REQUIRED_MESSAGE = "Please upload an image for AI detection."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."
TRANSLATION_FAILED_NOTICE = "Translation failed."
HISTORY_SAVE_FAILED_NOTICE = "The analysis could not be saved to history."


@dataclass(frozen=True)
class SessionSnapshot:
    mode: AnalysisMode
    state: AnalysisState
    input_text: str
    image_data: Optional[str]
    result: Optional[AnalysisResult]
    ai_result: Optional[AIDetectionResult]
    error_message: Optional[str]
    notice: Optional[str]
    is_translating: bool

    def active_result(self) -> Optional[AnalysisResult | AIDetectionResult]:
        if self.mode == AnalysisMode.AI_DETECTOR:
            return self.ai_result
        return self.result


class AnalysisOrchestrator:
    def __init__(
        self,
        model: ModelClient,
        history: HistoryStore,
        translator: Optional[Translator] = None,
    ):
        self.model = model
        self.history = history
        self.translator = translator

        self.mode = AnalysisMode.FACT_CHECK
        self.state = AnalysisState.IDLE
        self.input_text = ""
        self.image_data: Optional[str] = None
        self.result: Optional[AnalysisResult] = None
        self.ai_result: Optional[AIDetectionResult] = None
        self.error_message: Optional[str] = None
        self.notice: Optional[str] = None
        self.is_translating = False

        # bumped on every transition that invalidates in-flight responses
        self._generation = 0

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            mode=self.mode,
            state=self.state,
            input_text=self.input_text,
            image_data=self.image_data,
            result=self.result,
            ai_result=self.ai_result,
            error_message=self.error_message,
            notice=self.notice,
            is_translating=self.is_translating,
        )

    def _invalidate_in_flight(self) -> None:
        self._generation += 1

    def _is_stale(self, generation: int, mode: AnalysisMode) -> bool:
        return generation != self._generation or mode != self.mode

    def set_input(self, text: Optional[str] = None, image_data: Optional[str] = None) -> SessionSnapshot:
        """
        Updates the input echo. ``None`` leaves a field unchanged, an empty
        string clears it.

        Raises:
            InputValidationError: image payload is not an acceptable image
        """
        if image_data:
            parse_image_data(image_data)
        if text is not None:
            self.input_text = text
        if image_data is not None:
            self.image_data = image_data or None
        return self.snapshot()

    def _validate_request(self) -> None:
        if self.state == AnalysisState.ANALYZING:
            raise AnalysisInProgressError("An analysis is already running.")
        if not self.input_text.strip() and not self.image_data:
            raise InputValidationError(EMPTY_INPUT_MESSAGE)
        if self.mode == AnalysisMode.AI_DETECTOR and not self.image_data:
            raise InputValidationError(IMAGE_REQUIRED_MESSAGE)

    async def _invoke_model(self, mode: AnalysisMode, text: str, image_data: Optional[str]):
        if mode == AnalysisMode.FACT_CHECK:
            response = await asyncio.to_thread(self.model.analyze_credibility, text, image_data)
            return build_analysis_result(response.text, response.citations)
        if not image_data:
            raise InputValidationError("Image required")
        response = await asyncio.to_thread(self.model.detect_ai_image, image_data)
        return extract_ai_detection(response.text)

    async def analyze(self) -> SessionSnapshot:
        """
        Runs one analysis for the active mode.

        The model collaborator is called exactly once. A response that
        arrives after a mode switch, session clear or history load is
        discarded.

        Raises:
            InputValidationError: nothing to analyze, or no image in AI_DETECTOR mode
            AnalysisInProgressError: an analysis is already outstanding
        """
        self._validate_request()

        mode = self.mode
        text = self.input_text
        image_data = self.image_data
        self._invalidate_in_flight()
        generation = self._generation

        self.state = AnalysisState.ANALYZING
        self.result = None
        self.ai_result = None
        self.error_message = None
        self.notice = None
        started = time.monotonic()

        try:
            outcome = await self._invoke_model(mode, text, image_data)
        except Exception as exc:
            duration_ms = int((time.monotonic() - started) * 1000)
            if self._is_stale(generation, mode):
                logger.info("Discarded stale analysis failure: mode=%s", mode.value)
                return self.snapshot()
            logger.exception("Analysis failed: mode=%s", mode.value)
            record_analysis_result(mode.value, duration_ms=duration_ms, ok=False)
            self.error_message = str(exc) or UNEXPECTED_ERROR_MESSAGE
            self.state = AnalysisState.ERROR
            return self.snapshot()

        duration_ms = int((time.monotonic() - started) * 1000)
        if self._is_stale(generation, mode):
            logger.info("Discarded stale analysis response: mode=%s", mode.value)
            return self.snapshot()

        timestamp = int(time.time() * 1000)
        entry = HistoryEntry(
            id=new_entry_id(timestamp),
            timestamp=timestamp,
            mode=mode,
            input_text=text or None,
            image_data=image_data,
        )
        if mode == AnalysisMode.FACT_CHECK:
            self.result = outcome
            self.ai_result = None
            entry = entry.model_copy(update={"fact_check_result": outcome})
        else:
            self.ai_result = outcome
            self.result = None
            entry = entry.model_copy(update={"ai_result": outcome})

        record_analysis_result(mode.value, duration_ms=duration_ms, ok=True)
        self.state = AnalysisState.COMPLETE
        logger.info(
            "Analysis complete: mode=%s verdict=%s score=%s duration_ms=%d",
            mode.value,
            outcome.verdict.value,
            outcome.score,
            duration_ms,
        )

        # session state is final before the write yields the loop
        try:
            await asyncio.to_thread(self.history.append, entry)
        except Exception:
            logger.exception("History persistence failed: id=%s", entry.id)
            if not self._is_stale(generation, mode):
                self.notice = HISTORY_SAVE_FAILED_NOTICE
        return self.snapshot()

    def switch_mode(self, mode: AnalysisMode) -> SessionSnapshot:
        """Clears results and errors; input text and image are kept."""
        self._invalidate_in_flight()
        self.mode = AnalysisMode(mode)
        self.result = None
        self.ai_result = None
        self.error_message = None
        self.notice = None
        self.state = AnalysisState.IDLE
        return self.snapshot()

    def clear_session(self) -> SessionSnapshot:
        self._invalidate_in_flight()
        self.input_text = ""
        self.image_data = None
        self.result = None
        self.ai_result = None
        self.error_message = None
        self.notice = None
        self.state = AnalysisState.IDLE
        return self.snapshot()

    def load_history_entry(self, entry_id: str) -> SessionSnapshot:
        """
        Restores a stored analysis without calling the model.

        Raises:
            HistoryEntryNotFoundError: unknown id or entry without a result for its mode
        """
        entry = self.history.get(entry_id)
        if entry is None:
            raise HistoryEntryNotFoundError(f"History entry {entry_id} cannot be loaded.")

        self._invalidate_in_flight()
        self.mode = entry.mode
        self.input_text = entry.input_text or ""
        self.image_data = entry.image_data or None
        self.error_message = None
        self.notice = None
        if entry.mode == AnalysisMode.FACT_CHECK:
            self.result = entry.fact_check_result
            self.ai_result = None
        else:
            self.ai_result = entry.ai_result
            self.result = None
        self.state = AnalysisState.COMPLETE
        return self.snapshot()

    async def translate(self, target_language: str) -> SessionSnapshot:
        """
        Replaces only the explanation of the active fact-check result.

        Raises:
            TranslationUnavailableError: no fact-check explanation or no translator
            InputValidationError: unsupported target language
            AnalysisInProgressError: a translation is already outstanding
        """
        if self.mode != AnalysisMode.FACT_CHECK or self.result is None or not self.result.explanation:
            raise TranslationUnavailableError("There is no fact-check result to translate.")
        if self.translator is None:
            raise TranslationUnavailableError("Translation is not configured.")
        language = resolve_language(target_language)
        if language is None:
            raise InputValidationError(f"Unsupported language: {target_language}")
        if self.is_translating:
            raise AnalysisInProgressError("A translation is already running.")

        source = self.result
        self.is_translating = True
        self.notice = None
        translated: Optional[str] = None
        try:
            translated = await asyncio.to_thread(self.translator.translate, source.explanation, language)
        except Exception:
            logger.exception("Translation failed: language=%s", language)
        finally:
            self.is_translating = False

        if translated is None:
            if self.result is source:
                self.notice = TRANSLATION_FAILED_NOTICE
            return self.snapshot()
        if self.result is not source:
            logger.info("Discarded stale translation: language=%s", language)
            return self.snapshot()
        self.result = source.model_copy(update={"explanation": translated})
        return self.snapshot()

    def history_entries(self) -> List[HistoryEntry]:
        return self.history.loadable_entries()

    async def clear_history(self) -> None:
        await asyncio.to_thread(self.history.clear)
