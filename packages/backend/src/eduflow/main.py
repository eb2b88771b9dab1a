"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (logging, Redis, database).
Middleware, CORS, error handlers, and routers are all registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eduflow import __version__
from eduflow.api import api_router
from eduflow.config import settings
from eduflow.errors import install_error_handlers
from eduflow.logging_config import setup_logging
from eduflow.middleware.rate_limit import RateLimitMiddleware
from eduflow.middleware.request_id import RequestIdMiddleware
from eduflow.middleware.security import SecurityHeadersMiddleware
from eduflow.redis_client import close_redis, init_redis

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    setup_logging(settings)
    logger.info(
        "eduflow.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    try:
        await init_redis()
        logger.info("eduflow.redis_connected", url=settings.redis_url)
    except Exception as e:
        # Redis is optional; without it there is no rate limiting
        logger.warning("eduflow.redis_unavailable", error=str(e))

    yield

    logger.info("eduflow.shutdown")
    await close_redis()

    from eduflow.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="EduFlow",
        description="Multi-tenant education management backend",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → RateLimit → CORS → handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    install_error_handlers(app)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: eduflow.main:app)
app = create_app()
