"""Landing page -- greets a logged-in user or offers the log-in button."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from pkce_frontend.api import pages
from pkce_frontend.api.dependencies import (
    clear_session_cookie,
    optional_session,
    session_cookie_is_stale,
)
from pkce_frontend.models.session import SessionRecord

router = APIRouter(tags=["pages"])


@router.get("/", response_class=HTMLResponse)
def index(
    record: Annotated[SessionRecord | None, Depends(optional_session)],
    stale: Annotated[bool, Depends(session_cookie_is_stale)],
) -> HTMLResponse:
    user = record.user_info if record is not None else None
    response = HTMLResponse(pages.landing_page(user))
    if stale:
        clear_session_cookie(response)
    return response
