"""
Social Graph API — entry point.

Startup sequence:
  1. Configure logging
  2. Build the DB engine + session factory
  3. Configure OTel tracing (→ Jaeger via OTLP), when enabled
  4. Create tables if not present
  5. Build the services and keep them on app.state
  6. Expose Prometheus /metrics endpoint

Run with:  uvicorn socialapi.main:create_app --factory
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from prometheus_client import make_asgi_app

from socialapi import __version__
from socialapi.config import Settings, get_settings
from socialapi.context import build_services
from socialapi.database import build_engine, build_session_factory, init_db
from socialapi.errors import register_exception_handlers
from socialapi.routers import feed, follow, posts, users
from socialapi.telemetry import instrument_app, setup_tracing, shutdown_tracing

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    engine = build_engine(settings)
    sessions = build_session_factory(engine)

    provider = setup_tracing(settings, engine) if settings.tracing_enabled else None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create tables, wire services, dispose the pool on shutdown."""
        logger.info("Starting Social Graph API (env=%s)", settings.environment)

        await init_db(engine)
        app.state.services = build_services(sessions, settings)

        logger.info("Database connected. API ready.")
        yield

        logger.info("Shutting down...")
        await engine.dispose()
        if provider is not None:
            shutdown_tracing(provider)

    app = FastAPI(
        title="Social Graph API",
        description="Accounts, follow graph, posts and a follow-based timeline.",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Routers ────────────────────────────────────────────────────────────
    app.include_router(users.router, prefix="/users", tags=["Users"])
    app.include_router(follow.router, prefix="/users", tags=["Follow"])
    app.include_router(posts.router, prefix="/posts", tags=["Posts"])
    app.include_router(feed.router, prefix="/timeline", tags=["Timeline"])

    register_exception_handlers(app)

    # ── Prometheus metrics endpoint ────────────────────────────────────────
    app.mount("/metrics", make_asgi_app())

    if provider is not None:
        instrument_app(app, provider)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok", "service": settings.service_name}

    return app
