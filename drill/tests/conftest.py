"""
Pytest fixtures for Drill tests.
"""

import pytest
from fastapi.testclient import TestClient

from ..config import DrillConfig
from ..engine_core.state import Word, Progress
from ..engine_core.reducer import Reducer
from ..api.app import create_app
from ..api.service import PracticeService
from ..session.repository import InMemorySessionRepository
from ..session.driver import PracticeDriver
from ..sync.client import LocalPracticeClient
from ..words.store import InMemoryWordStore

TOKENS = {"alice-token": "alice", "bob-token": "bob"}


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_words(*pairs: tuple[str, str], list_id: int = 1, start_id: int = 1) -> list[Word]:
    """Build words from (target, source) pairs."""
    return [
        Word(word_id=start_id + i, source_text=source, target_text=target, list_id=list_id)
        for i, (target, source) in enumerate(pairs)
    ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cat_dog() -> list[Word]:
    """The two-word list used across scenarios."""
    return make_words(("cat", "кот"), ("dog", "собака"))


@pytest.fixture
def word_store() -> InMemoryWordStore:
    """Alice owns two units, Bob owns one."""
    store = InMemoryWordStore()
    store.add_unit("alice", "Animals", [("cat", "кот"), ("dog", "собака"), ("bird", "птица")])
    store.add_unit("alice", "Colors", [("red", "красный"), ("blue", "синий")])
    store.add_unit("bob", "Food", [("bread", "хлеб")])
    return store


@pytest.fixture
def repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def service(repository, word_store) -> PracticeService:
    return PracticeService(repository=repository, word_store=word_store)


@pytest.fixture
def alice_client(service) -> LocalPracticeClient:
    return LocalPracticeClient(service, "alice")


@pytest.fixture
def make_driver(service, clock):
    """Factory for drivers sharing the same service and clock."""
    def _make(owner: str = "alice", client=None) -> PracticeDriver:
        return PracticeDriver(
            client or LocalPracticeClient(service, owner),
            reducer=Reducer(feedback_delay=2.0),
            clock=clock,
        )
    return _make


@pytest.fixture
def seeded_session(repository, cat_dog):
    """Alice's session on selector "1" with queue [cat, dog]."""
    return repository.create("alice", "1", cat_dog, Progress(total=2, done=0))


@pytest.fixture
def app(service):
    return create_app(service=service, config=DrillConfig(api_tokens=dict(TOKENS)))


@pytest.fixture
def http(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def alice_headers() -> dict[str, str]:
    return {"Authorization": "Bearer alice-token"}
