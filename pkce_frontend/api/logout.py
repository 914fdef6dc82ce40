"""POST /logout -- drops the server-side session and the cookie.

Idempotent: without a cookie, or with one for an already-deleted
session, it still answers with the redirect to /.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Cookie, status
from fastapi.responses import RedirectResponse

from pkce_frontend.api.dependencies import SESSION_COOKIE, clear_session_cookie
from pkce_frontend.services.session_store import session_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["login"])


@router.post("/logout")
def logout(
    session: Annotated[str | None, Cookie(alias=SESSION_COOKIE)] = None,
) -> RedirectResponse:
    if session:
        session_store.delete(session)
    else:
        logger.info("Logout without a session cookie")

    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    clear_session_cookie(response)
    return response
