import logging
from threading import Lock
from typing import Optional

from verihow.core.settings import settings
from verihow.db.session import build_engine
from verihow.gateway.gemini_client import get_client
from verihow.orchestrator.service import AnalysisOrchestrator
from verihow.store.history import HistoryStore
from verihow.store.kv import InMemoryKeyValueStore, KeyValueStore, SqlKeyValueStore

logger = logging.getLogger(__name__)

_lock = Lock()
_orchestrator: Optional[AnalysisOrchestrator] = None


def build_kv_store() -> KeyValueStore:
    if settings.history_backend == "memory":
        return InMemoryKeyValueStore()
    return SqlKeyValueStore(build_engine())


def build_orchestrator() -> AnalysisOrchestrator:
    history = HistoryStore(build_kv_store())
    entries = history.load()
    logger.info("History loaded: %d entries (backend=%s)", len(entries), settings.history_backend)
    client = get_client()
    return AnalysisOrchestrator(model=client, history=history, translator=client)


def get_orchestrator() -> AnalysisOrchestrator:
    """FastAPI dependency: one session per process."""
    global _orchestrator
    with _lock:
        if _orchestrator is None:
            _orchestrator = build_orchestrator()
        return _orchestrator


def reset_orchestrator_for_test() -> None:
    global _orchestrator
    with _lock:
        _orchestrator = None
