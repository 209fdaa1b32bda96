"""
FastAPI application initialization and configuration.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import RelayConfig, parse_origins
from errors import RelayError
from oauth import OAuthEndpoints
from .middleware import log_requests_middleware
from .endpoints import auth_router, chat_router, health_router
from .services import RelayServices

logger = logging.getLogger(__name__)


async def relay_error_handler(request: Request, exc: RelayError):
    """Map relay error variants to HTTP responses"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed ({exc.kind}): {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected ({exc.kind}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app(
    config: Optional[RelayConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
    endpoints: Optional[OAuthEndpoints] = None,
) -> FastAPI:
    """
    Create the relay application.

    Args:
        config: Runtime configuration; built from settings at startup when None
        client: HTTP client to use instead of creating one
        endpoints: Pre-resolved OAuth endpoints; skips discovery when given

    OAuth discovery runs during startup. If it fails the lifespan raises and
    the server refuses to start.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        runtime_config = config or RelayConfig.from_settings()
        services = await RelayServices.start(runtime_config, client=client, endpoints=endpoints)
        app.state.services = services
        logger.debug("Relay services started")
        try:
            yield
        finally:
            if client is None:
                await services.aclose()

    app = FastAPI(title="DevAssist Relay", version="1.0.0", lifespan=lifespan)

    if config is not None:
        origins = config.cors_allow_origins
    else:
        import settings
        origins = parse_origins(settings.CORS_ALLOW_ORIGINS)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.middleware("http")(log_requests_middleware)
    app.add_exception_handler(RelayError, relay_error_handler)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(chat_router)

    logger.debug("FastAPI application initialized with all routers and middleware")
    return app


app = create_app()
