from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClientInfo(BaseModel):
    """An OAuth client the user has authorized on the authorization server."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str
    name: str


class UserInfo(BaseModel):
    """Profile as served by the resource server's /api/user.

    Local copy only; the resource server stays authoritative.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    id: str = ""
    login: str = ""
    name: str = ""
    authorized_clients: tuple[ClientInfo, ...] = Field(default_factory=tuple)

    @field_validator("id", "login", "name", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("authorized_clients", mode="before")
    @classmethod
    def _null_to_no_clients(cls, value: Any) -> Any:
        return () if value is None else value

    @classmethod
    def degraded(cls) -> UserInfo:
        """Placeholder used when the resource server can't be read."""
        return cls()

    @property
    def is_degraded(self) -> bool:
        return not self.id and not self.login
