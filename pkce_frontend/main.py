from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse

from pkce_frontend.api import pages
from pkce_frontend.api.authorize import router as authorize_router
from pkce_frontend.api.dependencies import clear_state_cookie
from pkce_frontend.api.health import router as health_router
from pkce_frontend.api.index import router as index_router
from pkce_frontend.api.login import router as login_router
from pkce_frontend.api.logout import router as logout_router
from pkce_frontend.api.metrics_endpoint import router as metrics_router
from pkce_frontend.api.profile import router as profile_router
from pkce_frontend.core.config import SETTINGS
from pkce_frontend.core.errors import LoginFlowError, StateMismatchError
from pkce_frontend.core.logging import setup_logging
from pkce_frontend.middleware.metrics import MetricsMiddleware
from pkce_frontend.middleware.request_context import (
    RequestContextMiddleware,
    install_request_context_filter,
)
from pkce_frontend.services.http_client import lifespan_http
from pkce_frontend.services.session_store import session_store

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
install_request_context_filter()

logger = logging.getLogger(__name__)


async def _sweep_sessions(interval: int) -> None:
    while True:
        await asyncio.sleep(interval)
        session_store.purge_expired()


@asynccontextmanager
async def lifespan_session_sweep() -> AsyncGenerator[None, None]:
    """Periodic purge of expired sessions, only when SESSION_SWEEP_INTERVAL > 0."""
    if SETTINGS.session_sweep_interval <= 0:
        yield
        return

    task = asyncio.create_task(_sweep_sessions(SETTINGS.session_sweep_interval))
    logger.info("Session sweep every %ds", SETTINGS.session_sweep_interval)
    try:
        yield
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    async with lifespan_http():
        async with lifespan_session_sweep():
            yield


app = FastAPI(
    title="pkce-frontend",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Last-added runs first: RequestContext → Metrics → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)


@app.exception_handler(LoginFlowError)
async def login_flow_error_handler(request: Request, exc: LoginFlowError) -> HTMLResponse:
    logger.warning(
        "Login aborted  error=%s detail=%s", type(exc).__name__, exc.detail
    )
    response = HTMLResponse(
        pages.error_page(exc.message, exc.status_code), status_code=exc.status_code
    )
    # The attempt behind this callback is finished. A mismatched state may
    # belong to someone else, so this browser's own pending cookie stays.
    if request.url.path == "/authorize" and not isinstance(exc, StateMismatchError):
        clear_state_cookie(response)
    return response


app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(index_router)
app.include_router(login_router)
app.include_router(authorize_router)
app.include_router(profile_router)
app.include_router(logout_router)

logger.info(
    "pkce-frontend started  env=%s log_level=%s port=%d auth_server=%s docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    SETTINGS.auth_server_url,
    "on" if SETTINGS.is_dev else "off",
)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "pkce_frontend.main:app",
        host="0.0.0.0",
        port=SETTINGS.port,
        log_level=SETTINGS.log_level,
    )
