from __future__ import annotations

import time
from dataclasses import dataclass

from pkce_frontend.models.client_credential import ClientCredential
from pkce_frontend.models.pkce import PkcePair

# How long a user may spend on the authorization server's pages before the
# pending attempt is discarded.
LOGIN_ATTEMPT_TTL_SEC = 600


@dataclass(frozen=True, slots=True)
class LoginAttempt:
    """Everything one authorization attempt needs between /login and /authorize."""

    state: str
    credential: ClientCredential
    pkce: PkcePair
    created_at: float

    @staticmethod
    def new(
        *,
        state: str,
        credential: ClientCredential,
        pkce: PkcePair,
        created_at: float | None = None,
    ) -> LoginAttempt:
        return LoginAttempt(
            state=state,
            credential=credential,
            pkce=pkce,
            created_at=time.time() if created_at is None else created_at,
        )

    def is_expired(self, now: float, ttl: float = LOGIN_ATTEMPT_TTL_SEC) -> bool:
        return now - self.created_at > ttl
