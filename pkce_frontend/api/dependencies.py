from __future__ import annotations

from typing import Annotated

from fastapi import Cookie, Depends
from fastapi.responses import Response

from pkce_frontend.core.config import SETTINGS
from pkce_frontend.models.session import SessionRecord
from pkce_frontend.services.session_store import session_store


SESSION_COOKIE = "session"
STATE_COOKIE = "oauth_state"


def optional_session(
    session: Annotated[str | None, Cookie(alias=SESSION_COOKIE)] = None,
) -> SessionRecord | None:
    """Resolve the session cookie to a live SessionRecord, if any."""
    if not session:
        return None
    return session_store.get(session)


def session_cookie_is_stale(
    session: Annotated[str | None, Cookie(alias=SESSION_COOKIE)] = None,
    record: Annotated[SessionRecord | None, Depends(optional_session)] = None,
) -> bool:
    """True when the browser sent a session id we no longer know."""
    return bool(session) and record is None


def set_session_cookie(response: Response, session_id: str, max_age: int) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session_id,
        path="/",
        httponly=True,
        samesite="strict",
        secure=SETTINGS.is_prod,
        max_age=max_age,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        SESSION_COOKIE,
        path="/",
        httponly=True,
        samesite="strict",
        secure=SETTINGS.is_prod,
    )


def set_state_cookie(response: Response, state: str, max_age: int) -> None:
    # Lax, not strict: the browser arrives at /authorize from the
    # authorization server's origin and must still send this cookie.
    response.set_cookie(
        key=STATE_COOKIE,
        value=state,
        path="/authorize",
        httponly=True,
        samesite="lax",
        secure=SETTINGS.is_prod,
        max_age=max_age,
    )


def clear_state_cookie(response: Response) -> None:
    response.delete_cookie(
        STATE_COOKIE,
        path="/authorize",
        httponly=True,
        samesite="lax",
        secure=SETTINGS.is_prod,
    )
