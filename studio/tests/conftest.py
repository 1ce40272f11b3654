"""
Pytest configuration and fixtures for AI Builder Studio tests.
"""

from __future__ import annotations

import os

# Tests never reach a real model
os.environ.setdefault("USE_MOCK_LLM", "true")

import httpx  # noqa: E402
import pytest  # noqa: E402

from studio.kernel.ledger import VersionLedger  # noqa: E402
from studio.kernel.store import MemoryStore  # noqa: E402
from studio.services.generation import GenerationClient  # noqa: E402
from studio.services.github_import import GitHubImporter  # noqa: E402
from studio.services.mock_llm import MockLLM  # noqa: E402


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def tick(self, ms: int = 1) -> None:
        self.now += ms


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ledger(store: MemoryStore, clock: FakeClock) -> VersionLedger:
    return VersionLedger(store, clock=clock)


@pytest.fixture
def mock_llm() -> MockLLM:
    return MockLLM()


@pytest.fixture
def generation(mock_llm: MockLLM) -> GenerationClient:
    return GenerationClient(mock_llm, model="test-model", completion_model="test-completion", max_tokens=1000)


@pytest.fixture
def make_importer():
    """Build a GitHubImporter whose HTTP traffic is answered by handler(request)."""

    def _make(handler) -> GitHubImporter:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return GitHubImporter(client=client, api_url="https://api.github.com", host="github.com", token="")

    return _make
