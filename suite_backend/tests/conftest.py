import os

import pytest
from fastapi.testclient import TestClient

# Default to the in-memory store so tests never reach the network
os.environ.setdefault("STORE_BACKEND", "memory")

from suite_api.main import app  # noqa: E402
from suite_api.settings import get_settings  # noqa: E402
from suite_api.store import InMemoryStore, get_store  # noqa: E402

TOKEN = "token-user-1"
USER_ID = "user-1"


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store():
    s = InMemoryStore()
    s.add_session(TOKEN, {"id": USER_ID, "email": "ada@example.com"})
    return s


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {TOKEN}"}
