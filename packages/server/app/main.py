"""
Fanclub API Server

Entry point for the FastAPI application.
"""

from __future__ import annotations

from typing import Optional

import sqlalchemy as sa
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import router as api_v1_router
from app.core.config import Settings, get_settings
from app.core.database import StorageContext
from app.core.http_errors import register_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import SecurityHeadersMiddleware
from app.services.container import ServiceContainer

log = structlog.get_logger()


def create_app(
    storage: Optional[StorageContext] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``storage`` lets tests hand in their own database; by default one is built
    from settings.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)
    storage = storage or StorageContext.from_settings(settings)

    app = FastAPI(
        title="Fanclub",
        description="Membership-gated fanclub platform.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.storage = storage
    app.state.services = ServiceContainer(storage)

    # Middleware (order matters — outermost first)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(app)

    # API routes
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Liveness check: the process is up and serving requests."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check: the database answers a trivial query."""
        async with storage.reader() as session:
            await session.execute(sa.text("SELECT 1"))
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("fanclub.starting", database=storage.dialect)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("fanclub.shutting_down")
        await storage.dispose()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(app, host=_settings.host, port=_settings.port)
