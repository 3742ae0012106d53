"""
String-keyed local key-value persistence.

The History Store writes one JSON document under one fixed key; ``set``
replaces the whole value in a single transaction.
"""

import logging
from threading import Lock
from typing import Dict, Optional, Protocol

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from verihow.db.models import KeyValueEntry
from verihow.db.session import build_session_factory, init_db, transaction

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._data


class SqlKeyValueStore:
    """Key-value rows in the ``kv_entries`` table."""

    def __init__(self, engine: Engine, session_factory: Optional[sessionmaker] = None):
        self.engine = engine
        self.session_factory = session_factory or build_session_factory(engine)
        init_db(engine)

    def get(self, key: str) -> Optional[str]:
        session = self.session_factory()
        try:
            row = session.get(KeyValueEntry, key)
            return row.value if row is not None else None
        finally:
            session.close()

    def set(self, key: str, value: str) -> None:
        with transaction(self.session_factory) as session:
            row = session.get(KeyValueEntry, key)
            if row is None:
                session.add(KeyValueEntry(key=key, value=value))
            else:
                row.value = value
        logger.debug("kv.set key=%s bytes=%d", key, len(value))

    def remove(self, key: str) -> None:
        with transaction(self.session_factory) as session:
            row = session.get(KeyValueEntry, key)
            if row is not None:
                session.delete(row)
        logger.debug("kv.remove key=%s", key)
