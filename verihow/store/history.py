"""
History Store & Reconciler.

Owns the persisted log of past analyses: most-recent-first, bounded, written
as one JSON array under one key. Accepts current (nested) and legacy
(flattened) records and only ever hands normalized entries to callers.
"""

import json
import logging
import threading
import time
from typing import Any, List, Optional

from pydantic import ValidationError

from verihow.core.errors import HistoryIntegrityError
from verihow.core.observability import record_integrity_event
from verihow.core.schemas import AnalysisMode, AnalysisResult, HistoryEntry
from verihow.core.settings import settings
from verihow.store.kv import KeyValueStore

logger = logging.getLogger(__name__)

MAX_HISTORY_ITEMS = 50

_id_lock = threading.Lock()
_last_id_ms = 0
_id_suffix = 0


def new_entry_id(now_ms: Optional[int] = None) -> str:
    """Time-derived unique id; entries created in the same millisecond get a suffix."""
    global _last_id_ms, _id_suffix
    current = int(now_ms if now_ms is not None else time.time() * 1000)
    with _id_lock:
        if current == _last_id_ms:
            _id_suffix += 1
            return f"{current}-{_id_suffix}"
        _last_id_ms = current
        _id_suffix = 0
        return str(current)


def normalize(entry: HistoryEntry) -> HistoryEntry:
    """
    Canonical (nested) form of an entry.

    A nested result for the entry's mode wins. A FACT_CHECK entry that only
    carries the legacy flattened fields gets a synthesized ``AnalysisResult``.
    Anything else is returned unchanged and fails ``is_loadable``.
    """
    if entry.nested_result() is not None:
        return entry
    if entry.mode == AnalysisMode.FACT_CHECK and entry.has_legacy_fields():
        nested = AnalysisResult(
            verdict=entry.verdict,
            score=entry.score,
            explanation=entry.explanation,
            citations=[c.model_dump() for c in entry.citations or []],
        )
        return entry.model_copy(
            update={
                "fact_check_result": nested,
                "verdict": None,
                "score": None,
                "explanation": None,
                "citations": None,
            }
        )
    return entry


def is_loadable(entry: HistoryEntry) -> bool:
    return normalize(entry).nested_result() is not None


class HistoryStore:
    """Single writer of the persisted history log."""

    def __init__(
        self,
        kv: KeyValueStore,
        storage_key: Optional[str] = None,
        max_items: Optional[int] = None,
    ):
        self.kv = kv
        self.storage_key = storage_key or settings.history_storage_key
        self.max_items = max(1, int(max_items or settings.max_history_items or MAX_HISTORY_ITEMS))
        self._entries: List[HistoryEntry] = []
        # writers may run in worker threads; the list itself is swapped, never mutated
        self._write_lock = threading.Lock()

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def _decode(self, raw: str) -> List[Any]:
        try:
            payload = json.loads(raw)
        except (ValueError, TypeError) as e:
            raise HistoryIntegrityError(f"history payload is not valid JSON: {e}") from e
        if not isinstance(payload, list):
            raise HistoryIntegrityError(
                f"history payload must be a JSON array, got {type(payload).__name__}"
            )
        return payload

    def load(self) -> List[HistoryEntry]:
        """
        Reads the persisted log into memory.

        Missing key gives an empty history. A corrupt payload also gives an
        empty history; it is logged and reported, never raised.
        """
        raw = self.kv.get(self.storage_key)
        if raw is None:
            self._entries = []
            return []

        try:
            payload = self._decode(raw)
        except HistoryIntegrityError as e:
            logger.error("Failed to parse history: %s", e)
            record_integrity_event("history_corrupt", detail=str(e))
            self._entries = []
            return []

        entries: List[HistoryEntry] = []
        for position, item in enumerate(payload):
            try:
                entry = HistoryEntry.model_validate(item)
            except ValidationError as e:
                logger.warning("Dropped invalid history record at position %d: %s", position, e)
                record_integrity_event("history_record_invalid", detail=str(e))
                continue
            entries.append(normalize(entry))

        self._entries = entries[: self.max_items]
        for entry in self._entries:
            if not is_loadable(entry):
                logger.warning("History entry %s has no result for mode %s", entry.id, entry.mode.value)
                record_integrity_event(
                    "history_entry_malformed",
                    detail=f"mode={entry.mode.value}",
                    entry_id=entry.id,
                )
        return self.entries

    def append(self, entry: HistoryEntry) -> List[HistoryEntry]:
        with self._write_lock:
            updated = [normalize(entry), *self._entries][: self.max_items]
            serialized = json.dumps([item.to_storage() for item in updated], ensure_ascii=False)
            self.kv.set(self.storage_key, serialized)
            self._entries = updated
        logger.info("history.append id=%s mode=%s size=%d", entry.id, entry.mode.value, len(updated))
        return self.entries

    def loadable_entries(self) -> List[HistoryEntry]:
        return [entry for entry in self._entries if is_loadable(entry)]

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry if is_loadable(entry) else None
        return None

    def clear(self) -> None:
        with self._write_lock:
            self.kv.remove(self.storage_key)
            self._entries = []
        logger.info("history.clear key=%s", self.storage_key)
