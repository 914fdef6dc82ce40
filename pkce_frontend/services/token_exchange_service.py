from __future__ import annotations

import base64
import logging

import httpx

from pkce_frontend.core.errors import TokenExchangeError
from pkce_frontend.core.logging import mask_secret
from pkce_frontend.core.metrics import UPSTREAM_REQUESTS

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Token Exchange Gateway
#
#   POST {auth_server}/oauth/token   (application/x-www-form-urlencoded)
#        Authorization: Basic base64(client_id:client_secret)
#        grant_type=authorization_code, redirect_uri, code_verifier, code
#   ->   {"access_token": ..., ...}
#
# Exactly one attempt.  Authorization codes are single-use, so a retry after
# an ambiguous failure would be rejected by a conforming server anyway.
# ---------------------------------------------------------------------------


def basic_auth_header(client_id: str, client_secret: str) -> str:
    raw = f"{client_id}:{client_secret}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


async def exchange_code(
    http: httpx.AsyncClient,
    code: str,
    verifier: str,
    client_id: str,
    client_secret: str,
    *,
    token_url: str,
    redirect_uri: str,
) -> str:
    # Never log code_verifier or the raw code
    logger.info(
        "LOGIN FLOW [token] exchanging authorization code  client_id=%s code=%s",
        client_id,
        mask_secret(code),
    )
    try:
        response = await http.post(
            token_url,
            data={
                "grant_type": "authorization_code",
                "redirect_uri": redirect_uri,
                "code_verifier": verifier,
                "code": code,
            },
            headers={
                "Authorization": basic_auth_header(client_id, client_secret),
                "Accept": "application/json",
            },
        )
    except httpx.HTTPError as e:
        UPSTREAM_REQUESTS.labels(call="token", outcome="transport_error").inc()
        logger.warning(
            "LOGIN FLOW [token] FAIL: transport error: %s",
            e,
            extra={"upstream": "token"},
        )
        raise TokenExchangeError(f"token request failed: {e}") from e

    if not response.is_success:
        UPSTREAM_REQUESTS.labels(call="token", outcome="http_error").inc()
        logger.warning(
            "LOGIN FLOW [token] FAIL: status=%d body=%r",
            response.status_code,
            response.text[:500],
            extra={"upstream": "token"},
        )
        raise TokenExchangeError(
            f"token endpoint returned status {response.status_code}",
            status=response.status_code,
            body=response.text,
        )

    try:
        payload = response.json()
    except ValueError as e:
        UPSTREAM_REQUESTS.labels(call="token", outcome="invalid_response").inc()
        logger.warning("LOGIN FLOW [token] FAIL: response is not JSON")
        raise TokenExchangeError(
            "token response is not JSON",
            status=response.status_code,
            body=response.text,
        ) from e

    access_token = payload.get("access_token") if isinstance(payload, dict) else None
    if not isinstance(access_token, str) or not access_token:
        UPSTREAM_REQUESTS.labels(call="token", outcome="invalid_response").inc()
        logger.warning("LOGIN FLOW [token] FAIL: response has no access_token")
        raise TokenExchangeError(
            "token response missing access_token", status=response.status_code
        )

    UPSTREAM_REQUESTS.labels(call="token", outcome="ok").inc()
    logger.info(
        "LOGIN FLOW [token] access token received  token=%s  ✓",
        mask_secret(access_token),
    )
    return access_token
