"""Active analysis session API."""

import logging

from fastapi import APIRouter, Depends

from verihow.api.deps import get_orchestrator
from verihow.core.errors import (
    ANALYSIS_IN_PROGRESS,
    INPUT_VALIDATION_FAILED,
    TRANSLATION_UNAVAILABLE,
    AnalysisInProgressError,
    InputValidationError,
    TranslationUnavailableError,
    to_http_exception,
)
from verihow.core.schemas import ModeSwitchRequest, SessionInputRequest, TranslateRequest
from verihow.orchestrator.service import AnalysisOrchestrator
from verihow.services.response_mapper import build_session_view

router = APIRouter(prefix="/session", tags=["session"])
logger = logging.getLogger(__name__)


@router.get("")
async def get_session(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)) -> dict:
    return build_session_view(orchestrator.snapshot())


@router.put("/input")
async def set_input(
    req: SessionInputRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
) -> dict:
    try:
        snapshot = orchestrator.set_input(text=req.text, image_data=req.image_data)
    except InputValidationError as e:
        raise to_http_exception(INPUT_VALIDATION_FAILED, str(e))
    return build_session_view(snapshot)


@router.post("/mode")
async def switch_mode(
    req: ModeSwitchRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
) -> dict:
    return build_session_view(orchestrator.switch_mode(req.mode))


@router.post("/analyze")
async def analyze(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)) -> dict:
    """
    Runs the analysis for the active mode.
    Collaborator failures come back as state ERROR with the message, not as HTTP errors.
    """
    try:
        snapshot = await orchestrator.analyze()
    except InputValidationError as e:
        raise to_http_exception(INPUT_VALIDATION_FAILED, str(e))
    except AnalysisInProgressError as e:
        raise to_http_exception(ANALYSIS_IN_PROGRESS, str(e))
    return build_session_view(snapshot)


@router.post("/translate")
async def translate(
    req: TranslateRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
) -> dict:
    try:
        snapshot = await orchestrator.translate(req.target_language)
    except TranslationUnavailableError as e:
        raise to_http_exception(TRANSLATION_UNAVAILABLE, str(e))
    except InputValidationError as e:
        raise to_http_exception(INPUT_VALIDATION_FAILED, str(e))
    except AnalysisInProgressError as e:
        raise to_http_exception(ANALYSIS_IN_PROGRESS, str(e))
    return build_session_view(snapshot)


@router.delete("")
async def clear_session(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)) -> dict:
    return build_session_view(orchestrator.clear_session())
