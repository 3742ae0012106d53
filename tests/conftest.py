from __future__ import annotations

import pytest

from tests.fakes import FakeModelClient, FakeTranslator
from verihow.core.observability import reset_observability_for_test
from verihow.orchestrator.service import AnalysisOrchestrator
from verihow.store.history import HistoryStore
from verihow.store.kv import InMemoryKeyValueStore


@pytest.fixture(autouse=True)
def _reset_observability():
    reset_observability_for_test()
    yield
    reset_observability_for_test()


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def history_store(kv_store: InMemoryKeyValueStore) -> HistoryStore:
    store = HistoryStore(kv_store, storage_key="verihow_history", max_items=50)
    store.load()
    return store


@pytest.fixture
def model_client() -> FakeModelClient:
    return FakeModelClient()


@pytest.fixture
def translator() -> FakeTranslator:
    return FakeTranslator()


@pytest.fixture
def orchestrator(
    model_client: FakeModelClient,
    history_store: HistoryStore,
    translator: FakeTranslator,
) -> AnalysisOrchestrator:
    return AnalysisOrchestrator(model=model_client, history=history_store, translator=translator)
