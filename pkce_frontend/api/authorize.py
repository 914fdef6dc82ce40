"""GET /authorize -- the redirect URI registered with the authorization server.

The authorization server sends the browser back here with ?code&state
(or ?error).  A valid callback ends with a session cookie and a redirect
to /profile; anything else raises a LoginFlowError, which the handler in
main.py renders as an error page.
"""

from __future__ import annotations

import logging
from typing import Annotated

import httpx
from fastapi import APIRouter, Cookie, Depends, Query, status
from fastapi.responses import RedirectResponse

from pkce_frontend.api.dependencies import (
    STATE_COOKIE,
    clear_state_cookie,
    set_session_cookie,
)
from pkce_frontend.api.login import login_attempt_repo
from pkce_frontend.core.config import SETTINGS
from pkce_frontend.core.errors import LoginFlowError
from pkce_frontend.services import login_service
from pkce_frontend.services.http_client import get_http_client
from pkce_frontend.services.session_store import session_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["login"])


@router.get("/authorize")
async def authorize_callback(
    http: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    code: Annotated[str, Query()] = "",
    state: Annotated[str, Query()] = "",
    error: Annotated[str | None, Query()] = None,
    error_description: Annotated[str | None, Query()] = None,
    oauth_state: Annotated[str | None, Cookie(alias=STATE_COOKIE)] = None,
) -> RedirectResponse:
    if error is not None:
        # Consume the attempt so the state can't be replayed
        login_attempt_repo.consume(state)
        logger.warning(
            "LOGIN FLOW [finish] authorization server returned error=%s description=%s",
            error,
            error_description,
        )
        raise LoginFlowError(
            f"authorization denied: {error}",
            message="The authorization server did not grant access.",
        )

    if not code:
        raise LoginFlowError(
            "callback without authorization code",
            message="The authorization server did not return a code.",
        )

    session_id = await login_service.finish_login(
        http,
        SETTINGS,
        login_attempt_repo,
        session_store,
        code=code,
        state=state,
        cookie_state=oauth_state,
    )

    response = RedirectResponse(url="/profile", status_code=status.HTTP_302_FOUND)
    set_session_cookie(response, session_id, SETTINGS.session_max_age)
    clear_state_cookie(response)
    logger.info("LOGIN FLOW [finish] session established  ✓")
    return response
