"""The two halves of the browser login, independent of FastAPI.

  start_login   POST /login      credentials + PKCE + state -> authorize URL
  finish_login  GET /authorize   state check -> code exchange -> session id

Each attempt carries its own client credentials, PKCE pair and state in
a LoginAttempt, so concurrent logins from different browsers never see
each other's verifier.
"""

from __future__ import annotations

import hmac
import logging

import httpx

from pkce_frontend.core.config import Settings
from pkce_frontend.core.errors import StateMismatchError
from pkce_frontend.core.logging import mask_secret
from pkce_frontend.models.client_credential import ClientCredential
from pkce_frontend.models.login_attempt import LoginAttempt
from pkce_frontend.repos.login_attempt_repo import LoginAttemptRepo
from pkce_frontend.services import (
    authorization_service,
    pkce_service,
    registration_service,
    token_exchange_service,
)
from pkce_frontend.services.session_store import SessionStore

logger = logging.getLogger(__name__)


async def obtain_client_credential(
    http: httpx.AsyncClient, settings: Settings
) -> ClientCredential:
    """Configured credentials when present, otherwise a fresh registration."""
    if settings.has_static_client:
        return ClientCredential(
            client_id=settings.oauth_client_id,  # type: ignore[arg-type]
            client_secret=settings.oauth_client_secret,  # type: ignore[arg-type]
        )
    return await registration_service.register_client(
        http,
        name=settings.oauth_client_name,
        redirect_uri=settings.redirect_uri,
        client_type=settings.oauth_client_type,
        registration_url=settings.registration_url,
    )


async def start_login(
    http: httpx.AsyncClient,
    settings: Settings,
    attempts: LoginAttemptRepo,
) -> tuple[LoginAttempt, str]:
    credential = await obtain_client_credential(http, settings)
    attempt = LoginAttempt.new(
        state=authorization_service.new_state(),
        credential=credential,
        pkce=pkce_service.new_pkce_pair(),
    )
    attempts.add(attempt)

    url = authorization_service.build_authorization_url(
        credential.client_id,
        attempt.pkce.challenge,
        attempt.state,
        authorize_url=settings.authorize_url,
        redirect_uri=settings.redirect_uri,
        scope=settings.oauth_scope,
    )
    logger.info(
        "LOGIN FLOW [start] attempt created  client_id=%s state=%s",
        credential.client_id,
        mask_secret(attempt.state),
    )
    return attempt, url


def check_state(returned_state: str, cookie_state: str | None) -> None:
    """The state in the callback must be the one this browser was given."""
    if not returned_state or not cookie_state:
        raise StateMismatchError("state missing from callback or cookie")
    # bytes: compare_digest rejects non-ASCII str
    if not hmac.compare_digest(returned_state.encode(), cookie_state.encode()):
        raise StateMismatchError("state does not match the browser's state cookie")


async def finish_login(
    http: httpx.AsyncClient,
    settings: Settings,
    attempts: LoginAttemptRepo,
    sessions: SessionStore,
    *,
    code: str,
    state: str,
    cookie_state: str | None,
) -> str:
    check_state(state, cookie_state)

    attempt = attempts.consume(state)
    if attempt is None:
        raise StateMismatchError("no pending login attempt for this state")
    logger.info(
        "LOGIN FLOW [finish] state verified  client_id=%s  ✓",
        attempt.credential.client_id,
    )

    access_token = await token_exchange_service.exchange_code(
        http,
        code,
        attempt.pkce.verifier,
        attempt.credential.client_id,
        attempt.credential.client_secret,
        token_url=settings.token_url,
        redirect_uri=settings.redirect_uri,
    )
    return await sessions.create(access_token, settings.session_max_age)
