from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from spotify_relay.api.check_tokens import router as check_tokens_router
from spotify_relay.api.health import router as health_router
from spotify_relay.api.login import router as login_router
from spotify_relay.api.logout import router as logout_router
from spotify_relay.api.metrics_endpoint import router as metrics_router
from spotify_relay.api.refresh import router as refresh_router
from spotify_relay.api.resource import router as resource_router
from spotify_relay.core.config import Settings, load_settings
from spotify_relay.core.errors import RelayError, UpstreamError
from spotify_relay.core.logging import setup_logging
from spotify_relay.middleware.metrics import MetricsMiddleware
from spotify_relay.middleware.request_context import RequestContextMiddleware

logger = logging.getLogger(__name__)


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    if isinstance(exc, UpstreamError):
        logger.warning(
            "%s %s failed upstream  status=%d upstream_status=%s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.upstream_status,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


def create_app(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the relay app.

    Settings are loaded from the environment when not given; a missing
    OAuth credential raises ConfigurationError here and the process never
    starts.  *transport* replaces the network layer of the shared httpx
    client (tests pass an httpx.MockTransport).
    """
    if settings is None:
        settings = load_settings()

    setup_logging(settings.log_level, json_format=settings.log_json)

    http_client = httpx.AsyncClient(
        timeout=settings.upstream_timeout,
        transport=transport,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
        yield
        await http_client.aclose()
        logger.info("Upstream HTTP client closed")

    app = FastAPI(
        title="spotify-relay",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_dev else None,
        redoc_url="/redoc" if settings.is_dev else None,
    )
    app.state.settings = settings
    app.state.http_client = http_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Middleware execution order: last-added runs first (outermost layer).
    # RequestContext (outermost) → Metrics → CORS → route handler
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(RelayError, relay_error_handler)  # type: ignore[arg-type]

    app.include_router(metrics_router)
    app.include_router(health_router)
    app.include_router(login_router)
    app.include_router(refresh_router)
    app.include_router(check_tokens_router)
    app.include_router(logout_router)
    app.include_router(resource_router)

    logger.info(
        "spotify-relay configured  env=%s log_level=%s port=%d origin=%s "
        "cookie_secure=%s cookie_samesite=%s",
        settings.app_env,
        settings.log_level,
        settings.port,
        settings.cors_origin,
        settings.cookie_secure,
        settings.cookie_samesite,
    )
    return app


def run() -> None:
    """Console entry point: load settings, build the app, serve it."""
    settings = load_settings()
    uvicorn.run(
        create_app(settings),
        host="0.0.0.0",
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
