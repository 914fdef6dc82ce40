"""Authorization Code + PKCE login, driven from the browser side.

The test plays the browser: it posts to /login, "visits" the
authorization server (mocked with respx, so the user consent step is
skipped), comes back to /authorize with a code, and then uses the
session cookie on /profile and /logout.

  POST /login        → 302 {auth_server}/oauth/authorize?...  (+ oauth_state cookie)
  GET  /authorize    → 302 /profile                           (+ session cookie)
  GET  /profile      → 200 profile page
  POST /profile      → 200 updated profile
  POST /logout       → 302 /                                  (cookie cleared)
"""

from __future__ import annotations

import json
from urllib.parse import parse_qs, urlparse

import httpx
import respx
from fastapi.testclient import TestClient

from pkce_frontend.core.config import SETTINGS
from pkce_frontend.services import pkce_service
from pkce_frontend.services.session_store import session_store
from tests.conftest import (
    ACCESS_TOKEN,
    CLIENT_ID,
    USER_JSON,
    mock_registration,
    mock_token,
    mock_user,
)


def _start_login(client: TestClient) -> dict[str, list[str]]:
    resp = client.post("/login")
    assert resp.status_code == 302
    location = resp.headers["location"]
    assert location.startswith(SETTINGS.authorize_url + "?")
    return parse_qs(urlparse(location).query)


def _log_in(client: TestClient, upstream: respx.MockRouter) -> str:
    mock_registration(upstream)
    mock_token(upstream)
    mock_user(upstream)
    query = _start_login(client)
    resp = client.get("/authorize", params={"code": "auth-code", "state": query["state"][0]})
    assert resp.status_code == 302
    return resp.cookies["session"]


def test_login_redirects_to_authorization_server(
    client: TestClient, upstream: respx.MockRouter
) -> None:
    mock_registration(upstream)

    query = _start_login(client)

    assert query["response_type"] == ["code"]
    assert query["client_id"] == [CLIENT_ID]
    assert query["redirect_uri"] == [SETTINGS.redirect_uri]
    assert query["scope"] == ["account:read"]
    assert query["code_challenge_method"] == ["S256"]
    assert len(query["code_challenge"][0]) == 43
    assert client.cookies.get("oauth_state") == query["state"][0]


def test_login_registration_failure_shows_error_page(
    client: TestClient, upstream: respx.MockRouter
) -> None:
    mock_registration(upstream, 500, text="database on fire")

    resp = client.post("/login")

    assert resp.status_code == 502
    assert "Unable to register" in resp.text
    assert "database on fire" not in resp.text


def test_full_login_flow_creates_session(
    client: TestClient, upstream: respx.MockRouter
) -> None:
    mock_registration(upstream)
    token_route = mock_token(upstream)
    user_route = mock_user(upstream)

    query = _start_login(client)
    resp = client.get(
        "/authorize", params={"code": "auth-code", "state": query["state"][0]}
    )

    assert resp.status_code == 302
    assert resp.headers["location"] == "/profile"

    # the verifier sent now hashes to the challenge sent in the redirect
    token_body = parse_qs(token_route.calls.last.request.content.decode())
    verifier = token_body["code_verifier"][0]
    assert pkce_service.compute_code_challenge(verifier) == query["code_challenge"][0]
    assert user_route.calls.last.request.headers["authorization"] == (
        f"Bearer {ACCESS_TOKEN}"
    )

    session_id = resp.cookies["session"]
    record = session_store.get(session_id)
    assert record is not None
    assert record.access_token == ACCESS_TOKEN
    assert record.user_info.login == USER_JSON["login"]


def test_session_cookie_attributes(
    client: TestClient, upstream: respx.MockRouter
) -> None:
    mock_registration(upstream)
    mock_token(upstream)
    mock_user(upstream)
    query = _start_login(client)

    resp = client.get(
        "/authorize", params={"code": "auth-code", "state": query["state"][0]}
    )

    set_cookies = resp.headers.get_list("set-cookie")
    session_cookie = next(c for c in set_cookies if c.startswith("session="))
    lowered = session_cookie.lower()
    assert "httponly" in lowered
    assert "samesite=strict" in lowered
    assert f"max-age={SETTINGS.session_max_age}" in lowered
    assert "path=/" in lowered
    # state cookie is cleared once used
    assert any(c.startswith("oauth_state=") and "Max-Age=0" in c for c in set_cookies)


def test_profile_shows_user_after_login(
    client: TestClient, upstream: respx.MockRouter
) -> None:
    _log_in(client, upstream)

    resp = client.get("/profile")

    assert resp.status_code == 200
    assert "alice" in resp.text
    assert "Alice" in resp.text
    assert "pkce-frontend" in resp.text  # authorized client listed


def test_profile_name_update_refreshes_session(
    client: TestClient, upstream: respx.MockRouter
) -> None:
    session_id = _log_in(client, upstream)
    update_route = upstream.post(SETTINGS.user_url).respond(200)
    upstream.get(SETTINGS.user_url).respond(200, json={**USER_JSON, "name": "Alicia"})

    resp = client.post("/profile", data={"name": "Alicia"})

    assert resp.status_code == 200
    assert "Name updated." in resp.text
    assert "Alicia" in resp.text
    assert json.loads(update_route.calls.last.request.content) == {"given_name": "Alicia"}
    record = session_store.get(session_id)
    assert record is not None
    assert record.user_info.name == "Alicia"


def test_profile_name_update_failure_shows_error(
    client: TestClient, upstream: respx.MockRouter
) -> None:
    session_id = _log_in(client, upstream)
    upstream.post(SETTINGS.user_url).respond(500)

    resp = client.post("/profile", data={"name": "Alicia"})

    assert resp.status_code == 502
    assert "Unable to set the user" in resp.text
    record = session_store.get(session_id)
    assert record is not None
    assert record.user_info.name == "Alice"


def test_logout_during_name_update_is_not_undone(
    client: TestClient, upstream: respx.MockRouter
) -> None:
    session_id = _log_in(client, upstream)

    def _logout_then_accept(request: httpx.Request) -> httpx.Response:
        # a /logout from another tab lands while the update is in flight
        session_store.delete(session_id)
        return httpx.Response(200)

    upstream.post(SETTINGS.user_url).mock(side_effect=_logout_then_accept)

    resp = client.post("/profile", data={"name": "Alicia"})

    assert resp.status_code == 302
    assert resp.headers["location"] == "/"
    assert session_store.get(session_id) is None
    assert len(session_store) == 0


def test_profile_blank_name_is_rejected(
    client: TestClient, upstream: respx.MockRouter
) -> None:
    _log_in(client, upstream)
    update_route = upstream.post(SETTINGS.user_url).respond(200)

    resp = client.post("/profile", data={"name": "   "})

    assert resp.status_code == 422
    assert update_route.call_count == 0


def test_logout_deletes_session_and_cookie(
    client: TestClient, upstream: respx.MockRouter
) -> None:
    session_id = _log_in(client, upstream)

    resp = client.post("/logout")

    assert resp.status_code == 302
    assert resp.headers["location"] == "/"
    assert session_store.get(session_id) is None
    assert "session" not in client.cookies

    resp = client.get("/profile")
    assert resp.status_code == 302
    assert resp.headers["location"] == "/"


def test_logout_without_session_is_harmless(client: TestClient) -> None:
    resp = client.post("/logout")
    assert resp.status_code == 302
    assert resp.headers["location"] == "/"


def test_interleaved_logins_keep_separate_verifiers(
    client: TestClient, upstream: respx.MockRouter
) -> None:
    """A second login started mid-flight must not clobber the first one's PKCE."""
    mock_registration(upstream)
    token_route = mock_token(upstream)
    mock_user(upstream)

    query_a = _start_login(client)
    query_b = _start_login(client)  # second browser tab; state cookie now B
    state_a = query_a["state"][0]
    state_b = query_b["state"][0]
    assert state_a != state_b

    # Browser A comes back with its own state cookie
    client.cookies.delete("oauth_state")
    client.cookies.set("oauth_state", state_a, path="/authorize")
    resp_a = client.get("/authorize", params={"code": "code-a", "state": state_a})
    verifier_a = parse_qs(token_route.calls.last.request.content.decode())[
        "code_verifier"
    ][0]

    client.cookies.delete("oauth_state")
    client.cookies.set("oauth_state", state_b, path="/authorize")
    resp_b = client.get("/authorize", params={"code": "code-b", "state": state_b})
    verifier_b = parse_qs(token_route.calls.last.request.content.decode())[
        "code_verifier"
    ][0]

    assert resp_a.status_code == 302
    assert resp_b.status_code == 302
    assert pkce_service.compute_code_challenge(verifier_a) == query_a["code_challenge"][0]
    assert pkce_service.compute_code_challenge(verifier_b) == query_b["code_challenge"][0]
    assert len(session_store) == 2
