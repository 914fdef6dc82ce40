"""Liveness probe.

Reports the process as alive plus two numbers an operator usually wants
first: how many sessions are held and how many login attempts are
waiting for their /authorize callback.  The upstream servers are not
probed; a frontend that can't reach them can still render its landing
page.
"""

from __future__ import annotations

from fastapi import APIRouter

from pkce_frontend.api.login import login_attempt_repo
from pkce_frontend.core.config import SETTINGS
from pkce_frontend.services.session_store import session_store

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {
        "status": "ok",
        "env": SETTINGS.app_env,
        "sessions": len(session_store),
        "pending_logins": len(login_attempt_repo),
    }
