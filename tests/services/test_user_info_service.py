from __future__ import annotations

import asyncio
import json

import httpx
import respx

from pkce_frontend.models.user_info import ClientInfo, UserInfo
from pkce_frontend.services.user_info_service import fetch_user_info, update_name

USER_URL = "http://resource.example/api/user"


def _fetch(token: str = "tok1") -> UserInfo:
    async def _run() -> UserInfo:
        async with httpx.AsyncClient() as http:
            return await fetch_user_info(http, token, user_url=USER_URL)

    return asyncio.run(_run())


def _update(name: str, token: str = "tok1") -> bool:
    async def _run() -> bool:
        async with httpx.AsyncClient() as http:
            return await update_name(http, token, name, user_url=USER_URL)

    return asyncio.run(_run())


def _assert_degraded(user: UserInfo) -> None:
    assert user.id == ""
    assert user.login == ""
    assert user.authorized_clients == ()
    assert user.is_degraded


# ---- fetch_user_info ----


def test_fetch_sends_bearer_token_and_parses_profile(
    upstream: respx.MockRouter,
) -> None:
    route = upstream.get(USER_URL).respond(
        200,
        json={
            "id": "u-1",
            "login": "alice",
            "name": "Alice",
            "authorized_clients": [{"id": "c-1", "name": "frontend"}],
        },
    )

    user = _fetch()

    assert route.calls.last.request.headers["authorization"] == "Bearer tok1"
    assert user == UserInfo(
        id="u-1",
        login="alice",
        name="Alice",
        authorized_clients=(ClientInfo(id="c-1", name="frontend"),),
    )
    assert not user.is_degraded


def test_fetch_keeps_client_order(upstream: respx.MockRouter) -> None:
    clients = [{"id": str(i), "name": f"client-{i}"} for i in range(5)]
    upstream.get(USER_URL).respond(
        200, json={"id": "u", "login": "l", "name": "n", "authorized_clients": clients}
    )

    user = _fetch()

    assert [c.name for c in user.authorized_clients] == [c["name"] for c in clients]


def test_fetch_tolerates_nulls_and_numeric_ids(upstream: respx.MockRouter) -> None:
    upstream.get(USER_URL).respond(
        200, json={"id": 42, "login": "bob", "name": None, "authorized_clients": None}
    )

    user = _fetch()

    assert user.id == "42"
    assert user.name == ""
    assert user.authorized_clients == ()


def test_fetch_server_error_returns_placeholder(upstream: respx.MockRouter) -> None:
    upstream.get(USER_URL).respond(500, text="boom")
    _assert_degraded(_fetch())


def test_fetch_unauthorized_returns_placeholder(upstream: respx.MockRouter) -> None:
    upstream.get(USER_URL).respond(401)
    _assert_degraded(_fetch())


def test_fetch_connection_error_returns_placeholder(
    upstream: respx.MockRouter,
) -> None:
    upstream.get(USER_URL).mock(side_effect=httpx.ConnectError("refused"))
    _assert_degraded(_fetch())


def test_fetch_non_json_returns_placeholder(upstream: respx.MockRouter) -> None:
    upstream.get(USER_URL).respond(200, text="<html></html>")
    _assert_degraded(_fetch())


def test_fetch_wrong_shape_returns_placeholder(upstream: respx.MockRouter) -> None:
    upstream.get(USER_URL).respond(200, json=["not", "an", "object"])
    _assert_degraded(_fetch())


# ---- update_name ----


def test_update_name_posts_given_name(upstream: respx.MockRouter) -> None:
    route = upstream.post(USER_URL).respond(200)

    assert _update("Alice") is True

    request = route.calls.last.request
    assert request.headers["authorization"] == "Bearer tok1"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {"given_name": "Alice"}


def test_update_name_rejected_returns_false(upstream: respx.MockRouter) -> None:
    upstream.post(USER_URL).respond(403)
    assert _update("Alice") is False


def test_update_name_transport_error_returns_false(
    upstream: respx.MockRouter,
) -> None:
    upstream.post(USER_URL).mock(side_effect=httpx.ConnectTimeout("slow"))
    assert _update("Alice") is False
