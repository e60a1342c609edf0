import pytest

from database import InMemoryDocumentStore
from services.state import ScoreboardState
from services.team_management import TeamManagementService


@pytest.fixture
def store():
    store = InMemoryDocumentStore()
    yield store
    store.close()


@pytest.fixture
def state(store):
    state = ScoreboardState(store)
    state.watch_teams()
    yield state
    state.close()


@pytest.fixture
def service(state):
    return TeamManagementService(state)
