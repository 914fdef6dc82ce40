"""POST /login -- starts the Authorization Code + PKCE handshake.

  1. client credentials: configured ones, or a fresh registration
  2. PKCE verifier + S256 challenge and a random state, kept server-side
     in a LoginAttempt keyed by that state
  3. state also goes into a short-lived cookie so /authorize can check the
     callback belongs to this browser
  4. 302 to the authorization server's /oauth/authorize
"""

from __future__ import annotations

import logging
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from pkce_frontend.api.dependencies import set_state_cookie
from pkce_frontend.core.config import SETTINGS
from pkce_frontend.models.login_attempt import LOGIN_ATTEMPT_TTL_SEC
from pkce_frontend.repos.login_attempt_repo import InMemoryLoginAttemptRepo
from pkce_frontend.services import login_service
from pkce_frontend.services.http_client import get_http_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["login"])

# Module-level singleton, shared with the /authorize callback
login_attempt_repo = InMemoryLoginAttemptRepo()


@router.post("/login")
async def login(
    http: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> RedirectResponse:
    attempt, authorization_url = await login_service.start_login(
        http, SETTINGS, login_attempt_repo
    )
    response = RedirectResponse(url=authorization_url, status_code=status.HTTP_302_FOUND)
    set_state_cookie(response, attempt.state, LOGIN_ATTEMPT_TTL_SEC)
    return response
