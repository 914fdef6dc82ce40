from __future__ import annotations

import asyncio

import respx
from fastapi.testclient import TestClient

from pkce_frontend.services.session_store import session_store
from tests.conftest import ACCESS_TOKEN, mock_user


def _seed_session(upstream: respx.MockRouter, max_age: int = 3600) -> str:
    mock_user(upstream)
    return asyncio.run(session_store.create(ACCESS_TOKEN, max_age))


def test_landing_page_offers_login(client: TestClient) -> None:
    resp = client.get("/")
    assert resp.status_code == 200
    assert 'action="/login"' in resp.text
    assert "Log out" not in resp.text


def test_landing_page_greets_logged_in_user(
    client: TestClient, upstream: respx.MockRouter
) -> None:
    sid = _seed_session(upstream)
    client.cookies.set("session", sid)

    resp = client.get("/")

    assert resp.status_code == 200
    assert "Welcome back, Alice" in resp.text
    assert "Log out" in resp.text


def test_unknown_session_cookie_is_cleared(client: TestClient) -> None:
    client.cookies.set("session", "stale-session-id")

    resp = client.get("/")

    assert resp.status_code == 200
    assert 'action="/login"' in resp.text
    set_cookie = resp.headers.get("set-cookie", "")
    assert set_cookie.startswith("session=")
    assert "Max-Age=0" in set_cookie


def test_profile_without_session_redirects_home(client: TestClient) -> None:
    resp = client.get("/profile")
    assert resp.status_code == 302
    assert resp.headers["location"] == "/"


def test_profile_with_expired_session_redirects_home(
    client: TestClient, upstream: respx.MockRouter
) -> None:
    sid = _seed_session(upstream, max_age=-1)
    client.cookies.set("session", sid)

    resp = client.get("/profile")

    assert resp.status_code == 302
    assert resp.headers["location"] == "/"
    assert session_store.get(sid) is None
    assert len(session_store) == 0


def test_profile_post_without_session_redirects_home(client: TestClient) -> None:
    resp = client.post("/profile", data={"name": "Mallory"})
    assert resp.status_code == 302
    assert resp.headers["location"] == "/"


def test_degraded_profile_still_renders(
    client: TestClient, upstream: respx.MockRouter
) -> None:
    mock_user(upstream, 503)
    sid = asyncio.run(session_store.create(ACCESS_TOKEN, 3600))
    client.cookies.set("session", sid)

    resp = client.get("/profile")

    assert resp.status_code == 200
    assert "could not be loaded" in resp.text


def test_user_values_are_html_escaped(
    client: TestClient, upstream: respx.MockRouter
) -> None:
    mock_user(
        upstream,
        json={"id": "u", "login": "<script>x</script>", "name": "", "authorized_clients": []},
    )
    sid = asyncio.run(session_store.create(ACCESS_TOKEN, 3600))
    client.cookies.set("session", sid)

    resp = client.get("/profile")

    assert "<script>x</script>" not in resp.text
    assert "&lt;script&gt;" in resp.text
