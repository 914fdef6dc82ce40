from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PkcePair:
    """A PKCE code_verifier and its S256 code_challenge.

    The verifier stays on this server until the token exchange; only the
    challenge travels to the authorization server in the browser redirect.
    """

    verifier: str
    challenge: str

    def __repr__(self) -> str:
        return f"PkcePair(verifier='***', challenge={self.challenge!r})"
