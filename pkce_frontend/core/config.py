from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


def _getenv_url(name: str, default: str) -> str:
    return _getenv(name, default).rstrip("/")


def _getenv_int(name: str, default: str, *, minimum: int = 0) -> int:
    raw = _getenv(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum} (got {value})")
    return value


def _getenv_float(name: str, default: str) -> float:
    raw = _getenv(name, default)
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number (got {raw!r})") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive (got {value})")
    return value


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    auth_server_url: str
    resource_server_url: str
    redirect_uri: str
    oauth_scope: str
    oauth_client_name: str
    oauth_client_type: str
    oauth_client_id: str | None
    oauth_client_secret: str | None
    session_max_age: int
    http_timeout: float
    session_sweep_interval: int

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    # Endpoints on the authorization server
    @property
    def registration_url(self) -> str:
        return f"{self.auth_server_url}/oauth/client"

    @property
    def authorize_url(self) -> str:
        return f"{self.auth_server_url}/oauth/authorize"

    @property
    def token_url(self) -> str:
        return f"{self.auth_server_url}/oauth/token"

    # Endpoint on the resource server
    @property
    def user_url(self) -> str:
        return f"{self.resource_server_url}/api/user"

    @property
    def has_static_client(self) -> bool:
        return bool(self.oauth_client_id and self.oauth_client_secret)


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    if log_json_raw not in ("true", "false", "1", "0"):
        raise ValueError(f"LOG_JSON must be true|false (got {log_json_raw!r})")

    oauth_client_type = _getenv("OAUTH_CLIENT_TYPE", "confidential").lower()
    if oauth_client_type not in ("confidential", "public"):
        raise ValueError(
            f"OAUTH_CLIENT_TYPE must be confidential|public (got {oauth_client_type!r})"
        )

    oauth_client_id = _getenv("OAUTH_CLIENT_ID", "") or None
    oauth_client_secret = _getenv("OAUTH_CLIENT_SECRET", "") or None
    if (oauth_client_id is None) != (oauth_client_secret is None):
        raise ValueError("OAUTH_CLIENT_ID and OAUTH_CLIENT_SECRET must be set together")

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json_raw in ("true", "1"),
        port=_getenv_int("PORT", "5173", minimum=1),
        auth_server_url=_getenv_url("AUTH_SERVER_URL", "http://localhost:3000"),
        resource_server_url=_getenv_url("RESOURCE_SERVER_URL", "http://localhost:3000"),
        redirect_uri=_getenv("REDIRECT_URI", "http://localhost:5173/authorize"),
        oauth_scope=_getenv("OAUTH_SCOPE", "account:read"),
        oauth_client_name=_getenv("OAUTH_CLIENT_NAME", "pkce-frontend"),
        oauth_client_type=oauth_client_type,
        oauth_client_id=oauth_client_id,
        oauth_client_secret=oauth_client_secret,
        session_max_age=_getenv_int("SESSION_MAX_AGE", str(60 * 60 * 24 * 30), minimum=1),
        http_timeout=_getenv_float("HTTP_TIMEOUT", "10"),
        session_sweep_interval=_getenv_int("SESSION_SWEEP_INTERVAL", "0"),
    )


SETTINGS = load_settings()
