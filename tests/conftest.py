from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

# Settings are read at import time; pin the environment before the app loads.
os.environ.setdefault("APP_ENV", "test")

import pytest
import respx
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import pkce_frontend` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pkce_frontend.api.login import login_attempt_repo  # noqa: E402
from pkce_frontend.core.config import SETTINGS  # noqa: E402
from pkce_frontend.main import app  # noqa: E402
from pkce_frontend.services.session_store import session_store  # noqa: E402

CLIENT_ID = "test-client-id"
CLIENT_SECRET = "test-client-secret"
ACCESS_TOKEN = "test-access-token-0123456789"

USER_JSON = {
    "id": "7d3f0c5e-user",
    "login": "alice",
    "name": "Alice",
    "authorized_clients": [
        {"id": CLIENT_ID, "name": "pkce-frontend"},
    ],
}


@pytest.fixture(autouse=True)
def reset_sessions() -> None:
    """Clear the module-level session store between tests."""
    session_store.clear()


@pytest.fixture(autouse=True)
def reset_login_attempts() -> None:
    """Drop pending login attempts between tests."""
    login_attempt_repo._by_state.clear()


@pytest.fixture
def client() -> Iterator[TestClient]:
    # Context manager so the lifespan (shared httpx client) runs
    with TestClient(app, follow_redirects=False) as c:
        yield c


@pytest.fixture
def upstream() -> Iterator[respx.MockRouter]:
    """Mocked authorization + resource servers.

    Outbound calls that match no route fail the test, so every test
    declares exactly the upstream endpoints it expects to hit.
    """
    with respx.mock(assert_all_called=False) as mock:
        yield mock


def mock_registration(upstream: respx.MockRouter, status_code: int = 200, **kwargs):
    if status_code == 200 and not kwargs:
        kwargs = {"json": {"client_id": CLIENT_ID, "client_secret": CLIENT_SECRET}}
    return upstream.post(SETTINGS.registration_url).respond(status_code, **kwargs)


def mock_token(upstream: respx.MockRouter, status_code: int = 200, **kwargs):
    if status_code == 200 and not kwargs:
        kwargs = {"json": {"access_token": ACCESS_TOKEN, "token_type": "bearer"}}
    return upstream.post(SETTINGS.token_url).respond(status_code, **kwargs)


def mock_user(upstream: respx.MockRouter, status_code: int = 200, **kwargs):
    if status_code == 200 and not kwargs:
        kwargs = {"json": USER_JSON}
    return upstream.get(SETTINGS.user_url).respond(status_code, **kwargs)
