"""
mindreport/api/main.py — FastAPI application entry point.

Configures logging and middleware, mounts the reports router, and sets up
the lifespan context (reports directory at startup, engine disposal at
shutdown).
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from mindreport.api.deps import limiter
from mindreport.api.routers import reports
from mindreport.config import get_settings
from mindreport.db.session import engine

logger = structlog.get_logger()
settings = get_settings()

VERSION = "1.0.0"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: runs at startup and shutdown."""
    logger.info("event", message="Starting MindTracking report API", env=settings.environment)
    settings.reports_dir.mkdir(parents=True, exist_ok=True)
    if not settings.logo_path.is_file():
        logger.warning("event", message="Branding image missing", path=str(settings.logo_path))

    yield

    await engine.dispose()
    logger.info("event", message="Shutting down API")


def create_app() -> FastAPI:
    configure_logging(settings.log_level)

    app = FastAPI(
        title="MindTracking Health Report API",
        description="Generates downloadable PDF health reports from patient records.",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # ── Middleware ────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(o).rstrip("/") for o in settings.cors_origins],
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # ── Routers ───────────────────────────────────────────────────────────────
    API_PREFIX = "/api/v1"
    app.include_router(reports.router, prefix=f"{API_PREFIX}/reports", tags=["Reports"])

    # ── Health Check ──────────────────────────────────────────────────────────
    @app.get("/health", tags=["System"])
    async def health_check() -> dict:
        return {"status": "healthy", "version": VERSION, "environment": settings.environment}

    return app


app = create_app()
