"""FastAPI application factory for the read-only analytics API.

Usage::

    uvicorn humane_logistics.api.main:app

Tests build their own app with an injected orchestrator::

    app = create_app(orchestrator)
"""

from __future__ import annotations

import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from humane_logistics import __version__
from humane_logistics.config.settings import get_settings
from humane_logistics.core.logging_config import configure_logging
from humane_logistics.pipeline.factory import build_orchestrator
from humane_logistics.pipeline.orchestrator import AnalysisOrchestrator

logger = structlog.get_logger(__name__)


def create_app(orchestrator: AnalysisOrchestrator | None = None) -> FastAPI:
    """Build and configure the FastAPI application.

    Args:
        orchestrator: Pre-built orchestrator to serve.  When ``None``, one is
            built from settings at startup and closed at shutdown.

    Returns:
        A fully configured ``FastAPI`` instance.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(application: FastAPI) -> AsyncIterator[None]:
        owned = application.state.orchestrator is None
        if owned:
            application.state.orchestrator = await build_orchestrator(settings)
        logger.info(
            "application_startup",
            app_name=settings.app_name,
            repositories=list(application.state.orchestrator.repositories),
        )
        try:
            yield
        finally:
            if owned:
                await application.state.orchestrator.aclose()
                application.state.orchestrator = None
            logger.info("application_shutdown")

    application = FastAPI(
        title=settings.app_name,
        description="Sentiment and damage-type analytics for disaster-response media coverage.",
        version=__version__,
        lifespan=lifespan,
    )
    application.state.orchestrator = orchestrator

    # ---- Middleware --------------------------------------------------------

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def request_logging_middleware(request: Request, call_next: Callable) -> Response:
        """Log each request with a ``request_id`` bound into the structlog context."""
        request_id = str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        start = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("unhandled_exception", exc_info=exc)
            raise
        finally:
            elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = getattr(response, "status_code", 500)
            log_fn = logger.warning if status_code >= 400 else logger.info
            log_fn("request_complete", status_code=status_code, elapsed_ms=elapsed_ms)
        response.headers["X-Request-ID"] = request_id
        return response

    # ---- Routers -----------------------------------------------------------

    from humane_logistics.api.routes import health, topics  # noqa: PLC0415

    application.include_router(health.router)
    application.include_router(topics.router)

    return application


app = create_app()
