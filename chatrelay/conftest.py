import pytest
from fastapi.testclient import TestClient

from chatrelay.app.main import create_app
from chatrelay.database import make_engine, create_db_and_tables
from chatrelay.provider import Configured
from chatrelay.store import HistoryStore


class StubClient:
    """Completion client double that records every message it is asked about."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def complete(self, message):
        self.calls.append(message)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return HistoryStore(engine)


@pytest.fixture
def stub_client():
    def factory(result=None, error=None):
        return StubClient(result=result, error=error)
    return factory


@pytest.fixture
def configured():
    return Configured(api_key="gsk_test", model="test-model", system_prompt=None)


@pytest.fixture
def make_client(engine, configured):
    """Start the app against the in-memory engine and the given stub."""
    def factory(client, provider_config=configured):
        app = create_app(engine=engine, provider_config=provider_config, client=client)
        return TestClient(app)
    return factory
