import logging

from fastapi import APIRouter, Depends

from verihow.api.deps import get_orchestrator
from verihow.core.errors import HISTORY_ENTRY_NOT_FOUND, HistoryEntryNotFoundError, to_http_exception
from verihow.orchestrator.service import AnalysisOrchestrator
from verihow.services.response_mapper import build_history_view, build_session_view

router = APIRouter(prefix="/history", tags=["history"])
logger = logging.getLogger(__name__)


@router.get("")
async def list_history(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)) -> dict:
    return build_history_view(orchestrator.history_entries())


@router.post("/{entry_id}/load")
async def load_history_entry(
    entry_id: str,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
) -> dict:
    try:
        snapshot = orchestrator.load_history_entry(entry_id)
    except HistoryEntryNotFoundError as e:
        logger.warning("History load rejected: %s", e)
        raise to_http_exception(HISTORY_ENTRY_NOT_FOUND)
    return build_session_view(snapshot)


@router.delete("")
async def clear_history(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)) -> dict:
    await orchestrator.clear_history()
    return build_history_view([])
