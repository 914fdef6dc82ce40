"""Failures that abort a login attempt.

Each carries the HTTP status the error page is rendered with and a
message that is safe to show to the user.  Upstream details (response
bodies, status codes) stay on the exception for logging only.

Absence of a session is not an error anywhere in this service: the
session store returns None and routes redirect to the landing page.
"""

from __future__ import annotations


class LoginFlowError(Exception):
    status_code: int = 500
    message: str = "Login failed."

    def __init__(self, detail: str, *, message: str | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if message is not None:
            self.message = message


class RegistrationError(LoginFlowError):
    """The authorization server refused (or never answered) client registration."""

    status_code = 502
    message = "Unable to register this application with the authorization server."

    def __init__(self, detail: str, *, body: str = "") -> None:
        super().__init__(detail)
        self.body = body


class TokenExchangeError(LoginFlowError):
    """The authorization code could not be traded for an access token."""

    status_code = 502
    message = "Unable to complete login with the authorization server."

    def __init__(
        self, detail: str, *, status: int | None = None, body: str = ""
    ) -> None:
        super().__init__(detail)
        self.status = status
        self.body = body


class StateMismatchError(LoginFlowError):
    """The returned state was not issued to this browser (possible CSRF)."""

    status_code = 400
    message = "Authorization state does not match. Aborting."
