"""
Shutterclub API Server

Entry point for the FastAPI application.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import router as api_router
from app.core.config import Settings, get_settings
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from app.storage import Storage, build_storage

log = structlog.get_logger()


def create_app(
    settings: Optional[Settings] = None, storage: Optional[Storage] = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Passing *storage* skips building one from settings; the caller then owns
    its lifecycle.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = getattr(app.state, "storage", None) is None
        if owned:
            app.state.storage = await build_storage(settings)
        log.info("shutterclub.starting", backend=app.state.storage.backend)
        try:
            yield
        finally:
            log.info("shutterclub.stopping")
            if owned:
                await app.state.storage.close()
                app.state.storage = None

    app = FastAPI(
        title="Shutterclub",
        description="Photo sharing, galleries and organization-run photo competitions.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.storage = storage

    # Middleware (order matters — last added is outermost)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )
    app.add_middleware(RequestContextMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check(request: Request):
        """Readiness check endpoint; reports the storage backing in use."""
        storage = request.app.state.storage
        if storage is None:
            return JSONResponse(status_code=503, content={"status": "starting", "storage": None})
        return {"status": "ready", "storage": storage.backend}

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn (the `shutterclub` console script)."""
    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.debug)
