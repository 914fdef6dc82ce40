from __future__ import annotations

import logging

import httpx

from pkce_frontend.core.errors import RegistrationError
from pkce_frontend.core.metrics import UPSTREAM_REQUESTS
from pkce_frontend.models.client_credential import ClientCredential

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Client Registry Gateway
#
#   POST {auth_server}/oauth/client   (application/x-www-form-urlencoded)
#        name, redirect_uri, type  ->  {"client_id": ..., "client_secret": ...}
#
# Registration state lives on the authorization server; nothing is kept here.
# ---------------------------------------------------------------------------


async def register_client(
    http: httpx.AsyncClient,
    *,
    name: str,
    redirect_uri: str,
    client_type: str,
    registration_url: str,
) -> ClientCredential:
    logger.info(
        "LOGIN FLOW [register] registering client  name=%s type=%s redirect_uri=%s",
        name,
        client_type,
        redirect_uri,
    )
    try:
        response = await http.post(
            registration_url,
            data={"name": name, "redirect_uri": redirect_uri, "type": client_type},
            headers={"Accept": "application/json"},
        )
    except httpx.HTTPError as e:
        UPSTREAM_REQUESTS.labels(call="register", outcome="transport_error").inc()
        logger.warning(
            "LOGIN FLOW [register] FAIL: transport error: %s",
            e,
            extra={"upstream": "register"},
        )
        raise RegistrationError(f"registration request failed: {e}") from e

    if not response.is_success:
        UPSTREAM_REQUESTS.labels(call="register", outcome="http_error").inc()
        logger.warning(
            "LOGIN FLOW [register] FAIL: status=%d body=%r",
            response.status_code,
            response.text[:500],
            extra={"upstream": "register"},
        )
        raise RegistrationError(
            f"registration rejected with status {response.status_code}",
            body=response.text,
        )

    try:
        payload = response.json()
    except ValueError as e:
        UPSTREAM_REQUESTS.labels(call="register", outcome="invalid_response").inc()
        logger.warning("LOGIN FLOW [register] FAIL: response is not JSON")
        raise RegistrationError(
            "registration response is not JSON", body=response.text
        ) from e

    if not isinstance(payload, dict):
        payload = {}
    client_id = payload.get("client_id")
    client_secret = payload.get("client_secret")
    if not (isinstance(client_id, str) and client_id) or not (
        isinstance(client_secret, str) and client_secret
    ):
        UPSTREAM_REQUESTS.labels(call="register", outcome="invalid_response").inc()
        logger.warning("LOGIN FLOW [register] FAIL: response lacks client credentials")
        raise RegistrationError(
            "registration response missing client credentials", body=response.text
        )
    credential = ClientCredential(client_id=client_id, client_secret=client_secret)

    UPSTREAM_REQUESTS.labels(call="register", outcome="ok").inc()
    logger.info(
        "LOGIN FLOW [register] client registered  client_id=%s  ✓",
        credential.client_id,
    )
    return credential
