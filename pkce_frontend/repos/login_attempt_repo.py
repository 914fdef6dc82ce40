from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Protocol

from pkce_frontend.models.login_attempt import LOGIN_ATTEMPT_TTL_SEC, LoginAttempt


class LoginAttemptRepo(Protocol):
    def add(self, attempt: LoginAttempt) -> None: ...
    def consume(self, state: str) -> LoginAttempt | None: ...


class InMemoryLoginAttemptRepo:
    """Pending authorization attempts, keyed by their state value.

    consume() removes the attempt whether or not it is still fresh, so a
    state value is good for exactly one /authorize callback.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = LOGIN_ATTEMPT_TTL_SEC,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._by_state: dict[str, LoginAttempt] = {}

    def __len__(self) -> int:
        return len(self._by_state)

    def add(self, attempt: LoginAttempt) -> None:
        with self._lock:
            self._prune_locked()
            self._by_state[attempt.state] = attempt

    def consume(self, state: str) -> LoginAttempt | None:
        with self._lock:
            attempt = self._by_state.pop(state, None)
        if attempt is None or attempt.is_expired(self._clock(), self._ttl):
            return None
        return attempt

    def _prune_locked(self) -> None:
        # Abandoned attempts (user never came back) are dropped on the next add
        now = self._clock()
        stale = [s for s, a in self._by_state.items() if a.is_expired(now, self._ttl)]
        for s in stale:
            del self._by_state[s]
