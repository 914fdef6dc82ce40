from __future__ import annotations

import base64
import hashlib
import secrets

from pkce_frontend.models.pkce import PkcePair

# Client half of PKCE (RFC 7636).  The login route sends the challenge to
# /oauth/authorize and keeps the verifier until the /oauth/token call.
# Only S256 is supported; "plain" would put the verifier in the browser URL.

VERIFIER_BYTES = 32


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


# 32 random bytes -> 43 base64url chars, the minimum verifier length
def generate_code_verifier() -> str:
    return _b64url(secrets.token_bytes(VERIFIER_BYTES))


def compute_code_challenge(code_verifier: str) -> str:
    digest = hashlib.sha256(code_verifier.encode("utf-8")).digest()
    return _b64url(digest)


def new_pkce_pair() -> PkcePair:
    verifier = generate_code_verifier()
    return PkcePair(verifier=verifier, challenge=compute_code_challenge(verifier))
