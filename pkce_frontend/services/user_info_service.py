"""User Info Gateway -- reads and edits the profile on the resource server.

Both calls are forgiving by contract:

  fetch_user_info  -> UserInfo.degraded() on ANY failure (transport,
                      non-2xx, non-JSON, unexpected shape)
  update_name      -> False on ANY failure

The caller therefore cannot tell "no such user" from "resource server
down".  Pages still render with a placeholder user rather than erroring,
and the failure is visible in the logs and in
oauth_upstream_requests_total.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from pkce_frontend.core.metrics import UPSTREAM_REQUESTS
from pkce_frontend.models.user_info import UserInfo

logger = logging.getLogger(__name__)


def _bearer(access_token: str) -> dict[str, str]:
    return {
        "Accept": "application/json",
        "Authorization": f"Bearer {access_token}",
    }


async def fetch_user_info(
    http: httpx.AsyncClient, access_token: str, *, user_url: str
) -> UserInfo:
    try:
        response = await http.get(user_url, headers=_bearer(access_token))
    except httpx.HTTPError as e:
        UPSTREAM_REQUESTS.labels(call="userinfo", outcome="transport_error").inc()
        logger.warning(
            "User info fetch failed, using placeholder: %s",
            e,
            extra={"upstream": "userinfo"},
        )
        return UserInfo.degraded()

    if not response.is_success:
        UPSTREAM_REQUESTS.labels(call="userinfo", outcome="http_error").inc()
        logger.warning(
            "User info fetch returned status=%d, using placeholder",
            response.status_code,
        )
        return UserInfo.degraded()

    try:
        user_info = UserInfo.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        UPSTREAM_REQUESTS.labels(call="userinfo", outcome="invalid_response").inc()
        logger.warning("User info response unusable, using placeholder: %s", e)
        return UserInfo.degraded()

    UPSTREAM_REQUESTS.labels(call="userinfo", outcome="ok").inc()
    logger.debug("User info fetched  id=%s login=%s", user_info.id, user_info.login)
    return user_info


async def update_name(
    http: httpx.AsyncClient, access_token: str, name: str, *, user_url: str
) -> bool:
    try:
        response = await http.post(
            user_url,
            json={"given_name": name},
            headers=_bearer(access_token),
        )
    except httpx.HTTPError as e:
        UPSTREAM_REQUESTS.labels(call="update_name", outcome="transport_error").inc()
        logger.warning("Name update failed: %s", e, extra={"upstream": "update_name"})
        return False

    if not response.is_success:
        UPSTREAM_REQUESTS.labels(call="update_name", outcome="http_error").inc()
        logger.warning(
            "Name update rejected  status=%d reason=%s",
            response.status_code,
            response.reason_phrase,
        )
        return False

    UPSTREAM_REQUESTS.labels(call="update_name", outcome="ok").inc()
    logger.info("Name updated on resource server")
    return True
