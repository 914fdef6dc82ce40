"""Server-side browser sessions.

The browser only ever holds an opaque session id (a UUID in the
``session`` cookie).  Everything else -- the access token and the cached
profile -- stays here, in process memory.

LIFECYCLE
---------
  absent --create--> active --(expires_at passes)--> expired --get--> absent
                       |                                  |
                       +-----------delete----------------+--> absent

Expiry is lazy: nothing runs in the background by default.  A record
whose expires_at is in the past is removed the next time get() sees it.
A session that is never read again after it expires stays in memory
until purge_expired() runs (see the optional sweep in main.py).

CONCURRENCY
-----------
One threading.Lock guards the map.  The lock is never held across an
await: the upstream profile fetch happens first, and only the id
allocation plus insert run under the lock, so two concurrent create()
calls can never hand out the same id.  A deployment with several worker
processes needs a shared backing store instead; this class assumes one
process.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections.abc import Awaitable, Callable

from pkce_frontend.core.config import SETTINGS
from pkce_frontend.core.metrics import ACTIVE_SESSIONS, SESSION_EVENTS
from pkce_frontend.models.session import SessionRecord
from pkce_frontend.models.user_info import UserInfo
from pkce_frontend.services import user_info_service
from pkce_frontend.services.http_client import get_http_client

logger = logging.getLogger(__name__)

UserInfoFetcher = Callable[[str], Awaitable[UserInfo]]
Clock = Callable[[], float]
IdFactory = Callable[[], str]


def _new_session_id() -> str:
    return str(uuid.uuid4())


class SessionStore:
    def __init__(
        self,
        fetch_user_info: UserInfoFetcher,
        *,
        clock: Clock = time.time,
        id_factory: IdFactory = _new_session_id,
    ) -> None:
        self._fetch_user_info = fetch_user_info
        self._clock = clock
        self._id_factory = id_factory
        self._lock = threading.Lock()
        self._sessions: dict[str, SessionRecord] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def create(self, access_token: str, max_age: float) -> str:
        """Start a session for *access_token* and return its new id."""
        user_info = await self._fetch_user_info(access_token)

        with self._lock:
            session_id = self._id_factory()
            while session_id in self._sessions:
                logger.warning("Session id collision, drawing a new id")
                session_id = self._id_factory()
            self._sessions[session_id] = SessionRecord(
                session_id=session_id,
                access_token=access_token,
                user_info=user_info,
                expires_at=self._clock() + max_age,
            )
            ACTIVE_SESSIONS.set(len(self._sessions))

        SESSION_EVENTS.labels(event="created").inc()
        logger.info(
            "Session created  session=%s… user=%s max_age=%ss",
            session_id[:8],
            user_info.login or "<unknown>",
            max_age,
        )
        return session_id

    def get(self, session_id: str) -> SessionRecord | None:
        """Return the live record for *session_id*, or None.

        An expired record is deleted on the way out.
        """
        with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                logger.debug("Session not found  session=%s…", session_id[:8])
                return None
            if not record.is_expired(self._clock()):
                return record
            del self._sessions[session_id]
            ACTIVE_SESSIONS.set(len(self._sessions))

        SESSION_EVENTS.labels(event="expired").inc()
        logger.info("Expired session removed  session=%s…", session_id[:8])
        return None

    async def update(
        self, session_id: str, access_token: str, max_age: float
    ) -> SessionRecord:
        """Re-read the profile and restart the expiry clock.

        Writes the record whether or not *session_id* is currently stored.
        Use refresh() where a logged-out or expired session must stay gone.
        """
        user_info = await self._fetch_user_info(access_token)
        record = SessionRecord(
            session_id=session_id,
            access_token=access_token,
            user_info=user_info,
            expires_at=self._clock() + max_age,
        )
        with self._lock:
            self._sessions[session_id] = record
            ACTIVE_SESSIONS.set(len(self._sessions))

        SESSION_EVENTS.labels(event="updated").inc()
        logger.debug("Session refreshed  session=%s…", session_id[:8])
        return record

    async def refresh(
        self, session_id: str, access_token: str, max_age: float
    ) -> SessionRecord | None:
        """Like update(), but only while *session_id* is still live.

        The liveness check happens under the lock after the profile fetch,
        so a delete() that lands while the fetch is in flight wins.
        """
        user_info = await self._fetch_user_info(access_token)
        with self._lock:
            current = self._sessions.get(session_id)
            if current is None or current.is_expired(self._clock()):
                logger.info(
                    "Session gone before refresh, not restoring  session=%s…",
                    session_id[:8],
                )
                return None
            record = SessionRecord(
                session_id=session_id,
                access_token=access_token,
                user_info=user_info,
                expires_at=self._clock() + max_age,
            )
            self._sessions[session_id] = record

        SESSION_EVENTS.labels(event="updated").inc()
        logger.debug("Session refreshed  session=%s…", session_id[:8])
        return record

    def delete(self, session_id: str) -> None:
        with self._lock:
            removed = self._sessions.pop(session_id, None)
            ACTIVE_SESSIONS.set(len(self._sessions))

        if removed is not None:
            SESSION_EVENTS.labels(event="deleted").inc()
            logger.info("Session deleted  session=%s…", session_id[:8])

    def purge_expired(self) -> int:
        """Drop every expired record; returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [sid for sid, r in self._sessions.items() if r.is_expired(now)]
            for sid in expired:
                del self._sessions[sid]
            ACTIVE_SESSIONS.set(len(self._sessions))

        if expired:
            SESSION_EVENTS.labels(event="expired").inc(len(expired))
            logger.info("Session sweep removed %d expired session(s)", len(expired))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
            ACTIVE_SESSIONS.set(0)


# ---------------------------------------------------------------------------
# Module-level singleton wired to the resource server
# ---------------------------------------------------------------------------


async def _fetch_from_resource_server(access_token: str) -> UserInfo:
    return await user_info_service.fetch_user_info(
        get_http_client(), access_token, user_url=SETTINGS.user_url
    )


session_store = SessionStore(_fetch_from_resource_server)
