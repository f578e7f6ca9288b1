import os
import sys
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

# Add the project root to the path to allow importing the top-level modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Never touch the real data/ folder from tests
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["ENV"] = "dev"

from app import app as flask_app
from auth import SupabaseAuth
from models import Response, Selection
from storage import MemoryStorage, ResponseStore
from taxonomy import build_selection


FIXED_NOW = datetime(2024, 3, 5, 14, 7, 11, 123000, tzinfo=timezone.utc)


class FakeClock:
    """Returns a fixed time; tests move it explicitly."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(FIXED_NOW)


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def store(memory_storage, clock):
    return ResponseStore(memory_storage, clock=clock)


@pytest.fixture
def make_response():
    """Factory for stored-shape Response records."""
    counter = {"n": 0}

    def _make(timestamp=FIXED_NOW, selections=(), outros="", nome="Maria", telefone="(11) 99999-0000"):
        counter["n"] += 1
        sels = []
        for item in selections:
            if isinstance(item, Selection):
                sels.append(item)
            else:
                sels.append(build_selection(*item))
        return Response(
            id=f"r{counter['n']}",
            timestamp=timestamp,
            nome=nome,
            telefone=telefone,
            selections=sels,
            outros=outros,
        )

    return _make


@pytest.fixture
def mock_auth():
    provider = MagicMock(spec=SupabaseAuth)
    provider.sign_in.return_value = {
        "access_token": "token-123",
        "user": {"email": "admin@aec.com", "app_metadata": {"role": "admin"}},
    }
    return provider


@pytest.fixture
def client(store, mock_auth, monkeypatch):
    """Flask test client with an isolated store and a mocked identity provider (ENV=dev)."""
    monkeypatch.setitem(flask_app.config, "TESTING", True)
    monkeypatch.setitem(flask_app.config, "APP_ENV", "dev")
    monkeypatch.setitem(flask_app.config, "TIMEZONE", "UTC")
    monkeypatch.setitem(flask_app.extensions, "response_store", store)
    monkeypatch.setitem(flask_app.extensions, "auth_provider", mock_auth)
    with flask_app.test_client() as test_client:
        yield test_client


@pytest.fixture
def prod_client(client, monkeypatch):
    """Same client, but with the role gate active."""
    monkeypatch.setitem(flask_app.config, "APP_ENV", "prod")
    return client
