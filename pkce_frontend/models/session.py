from __future__ import annotations

from dataclasses import dataclass

from pkce_frontend.models.user_info import UserInfo


@dataclass(frozen=True, slots=True)
class SessionRecord:
    session_id: str
    access_token: str
    user_info: UserInfo
    expires_at: float  # unix seconds

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at

    def __repr__(self) -> str:
        return (
            f"SessionRecord(session_id={self.session_id!r}, access_token='***', "
            f"user_info={self.user_info!r}, expires_at={self.expires_at!r})"
        )
