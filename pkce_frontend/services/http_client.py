"""Shared outbound HTTP client.

All calls to the authorization and resource servers go through one
httpx.AsyncClient so connections are pooled and every call carries the
same bounded timeout (HTTP_TIMEOUT, 10s by default).  No call is retried.

The client is opened by lifespan_http() on startup and closed on
shutdown.  get_http_client() also creates one on first use, so code
running outside the application lifespan (scripts, direct tests) works.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from pkce_frontend.core.config import SETTINGS

logger = logging.getLogger(__name__)

_client: httpx.AsyncClient | None = None


def build_http_client(timeout: float | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout if timeout is not None else SETTINGS.http_timeout),
        headers={"User-Agent": f"{SETTINGS.oauth_client_name}/0.1"},
        follow_redirects=False,
    )


def get_http_client() -> httpx.AsyncClient:
    global _client
    if _client is None or _client.is_closed:
        _client = build_http_client()
    return _client


@asynccontextmanager
async def lifespan_http() -> AsyncIterator[httpx.AsyncClient]:
    global _client
    client = _client = build_http_client()
    logger.info(
        "HTTP client ready  auth_server=%s resource_server=%s timeout=%ss",
        SETTINGS.auth_server_url,
        SETTINGS.resource_server_url,
        SETTINGS.http_timeout,
    )
    try:
        yield client
    finally:
        await client.aclose()
        if _client is client:
            _client = None
        logger.info("HTTP client closed")
