"""Demo: walk the PKCE login flow against a fake authorization server.

The authorization and resource servers are simulated with respx, and the
fake token endpoint really checks the PKCE verifier against the
challenge the browser carried to /oauth/authorize.

respx is only declared in the test extra, so install that first:
    pip install -e ".[test]"
    python scripts/demo_login_flow.py
"""

from __future__ import annotations

import secrets
from urllib.parse import parse_qs, urlencode, urlparse

import httpx
import respx
from fastapi.testclient import TestClient

from pkce_frontend.core.config import SETTINGS
from pkce_frontend.main import app
from pkce_frontend.services import pkce_service

CLIENT_ID = "demo-client"
CLIENT_SECRET = "demo-secret"
ACCESS_TOKEN = "demo-access-token"

# code -> challenge, filled in when the fake server "approves" a request
_issued_codes: dict[str, str] = {}


def _token_endpoint(request: httpx.Request) -> httpx.Response:
    form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
    challenge = _issued_codes.pop(form.get("code", ""), None)
    if challenge is None:
        return httpx.Response(400, json={"error": "invalid_grant"})
    if pkce_service.compute_code_challenge(form.get("code_verifier", "")) != challenge:
        return httpx.Response(400, json={"error": "invalid_grant", "error_description": "PKCE"})
    return httpx.Response(200, json={"access_token": ACCESS_TOKEN, "token_type": "bearer"})


def _approve(authorize_location: str) -> str:
    """Play the user clicking "Allow": return the redirect back to the app."""
    query = {k: v[0] for k, v in parse_qs(urlparse(authorize_location).query).items()}
    code = secrets.token_urlsafe(16)
    _issued_codes[code] = query["code_challenge"]
    callback = urlparse(query["redirect_uri"]).path
    return f"{callback}?{urlencode({'code': code, 'state': query['state']})}"


def main() -> None:
    with respx.mock(assert_all_called=False) as upstream:
        upstream.post(SETTINGS.registration_url).respond(
            200, json={"client_id": CLIENT_ID, "client_secret": CLIENT_SECRET}
        )
        upstream.post(SETTINGS.token_url).mock(side_effect=_token_endpoint)
        upstream.get(SETTINGS.user_url).respond(
            200,
            json={
                "id": "demo-user",
                "login": "demo",
                "name": "Demo User",
                "authorized_clients": [{"id": CLIENT_ID, "name": "pkce-frontend"}],
            },
        )

        with TestClient(app, follow_redirects=False) as client:
            # ── Step 1: landing page ────────────────────────────────
            r = client.get("/")
            print(f"1. GET  /                  → {r.status_code}  (login button)")

            # ── Step 2: start login ─────────────────────────────────
            r = client.post("/login")
            location = r.headers["location"]
            print(f"2. POST /login             → {r.status_code}  Location: {location[:60]}...")

            # ── Step 3: the authorization server approves ───────────
            callback = _approve(location)
            print(f"3. auth server approves    → redirect to {callback[:50]}...")

            # ── Step 4: callback ────────────────────────────────────
            r = client.get(callback)
            print(
                f"4. GET  /authorize         → {r.status_code}  "
                f"session cookie set: {bool(r.cookies.get('session'))}"
            )

            # ── Step 5: profile ─────────────────────────────────────
            r = client.get("/profile")
            print(f"5. GET  /profile           → {r.status_code}  greets Demo User: {'Demo User' in r.text}")

            # ── Step 6: replay the callback ─────────────────────────
            r = client.get(callback)
            print(f"6. GET  /authorize (replay) → {r.status_code}  (state already used)")

            # ── Step 7: logout ──────────────────────────────────────
            r = client.post("/logout")
            print(f"7. POST /logout            → {r.status_code}  Location: {r.headers['location']}")
            r = client.get("/profile")
            print(f"8. GET  /profile           → {r.status_code}  (back to landing)")

    print("\nAll steps completed.")


if __name__ == "__main__":
    main()
