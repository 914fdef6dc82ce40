"""Builds the browser redirect to the authorization server's /oauth/authorize."""

from __future__ import annotations

import secrets
from urllib.parse import urlencode

CODE_CHALLENGE_METHOD = "S256"


def new_state() -> str:
    """Fresh anti-CSRF state value, one per authorization attempt."""
    return secrets.token_urlsafe(24)


def build_authorization_url(
    client_id: str,
    code_challenge: str,
    state: str,
    *,
    authorize_url: str,
    redirect_uri: str,
    scope: str,
) -> str:
    params = {
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "client_id": client_id,
        "scope": scope,
        "code_challenge": code_challenge,
        "code_challenge_method": CODE_CHALLENGE_METHOD,
        "state": state,
    }
    return f"{authorize_url}?{urlencode(params)}"
