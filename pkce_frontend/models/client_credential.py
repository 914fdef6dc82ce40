from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ClientCredential:
    client_id: str
    client_secret: str

    def __repr__(self) -> str:
        # Keep the secret out of tracebacks and log lines
        return f"ClientCredential(client_id={self.client_id!r}, client_secret='***')"
