"""Profile pages.

GET  /profile  -- show the cached profile of the session's user
POST /profile  -- change the user's name on the resource server, then
                  refresh the session so the page shows the new value
"""

from __future__ import annotations

import logging
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import HTMLResponse, RedirectResponse

from pkce_frontend.api import pages
from pkce_frontend.api.dependencies import (
    clear_session_cookie,
    optional_session,
    session_cookie_is_stale,
    set_session_cookie,
)
from pkce_frontend.core.config import SETTINGS
from pkce_frontend.models.session import SessionRecord
from pkce_frontend.services import user_info_service
from pkce_frontend.services.http_client import get_http_client
from pkce_frontend.services.session_store import session_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["profile"])


def _to_landing(stale: bool) -> RedirectResponse:
    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    if stale:
        clear_session_cookie(response)
    return response


@router.get("/profile", response_model=None)
def get_profile(
    record: Annotated[SessionRecord | None, Depends(optional_session)],
    stale: Annotated[bool, Depends(session_cookie_is_stale)],
) -> HTMLResponse | RedirectResponse:
    if record is None:
        return _to_landing(stale)
    return HTMLResponse(pages.profile_page(record.user_info))


@router.post("/profile", response_model=None)
async def update_profile(
    http: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    record: Annotated[SessionRecord | None, Depends(optional_session)],
    stale: Annotated[bool, Depends(session_cookie_is_stale)],
    name: Annotated[str, Form()] = "",
) -> HTMLResponse | RedirectResponse:
    if record is None:
        return _to_landing(stale)

    name = name.strip()
    if not name:
        return HTMLResponse(
            pages.profile_page(record.user_info, error="Name must not be empty."),
            status_code=422,
        )

    updated = await user_info_service.update_name(
        http, record.access_token, name, user_url=SETTINGS.user_url
    )
    if not updated:
        return HTMLResponse(
            pages.profile_page(
                record.user_info,
                error="Unable to set the user's name. Check the logs for details.",
            ),
            status_code=502,
        )

    refreshed = await session_store.refresh(
        record.session_id, record.access_token, SETTINGS.session_max_age
    )
    if refreshed is None:
        # Logged out (or expired) while the name update was in flight
        return _to_landing(stale=True)

    logger.info("Profile name changed  user=%s", refreshed.user_info.login)
    response = HTMLResponse(pages.profile_page(refreshed.user_info, notice="Name updated."))
    # The server-side expiry was just reset; keep the cookie in step
    set_session_cookie(response, refreshed.session_id, SETTINGS.session_max_age)
    return response
