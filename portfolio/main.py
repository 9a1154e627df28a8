"""
Portfolio Blog API

Thin FastAPI backend serving the markdown blog posts of the portfolio site.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from portfolio.config import get_settings
from portfolio.middleware import (
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
    configure_logging,
)
from portfolio.routers import blog
from portfolio.services.diagrams import build_renderer

logger = logging.getLogger(__name__)

settings = get_settings()
configure_logging(settings.log_level)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: own the outbound HTTP client for diagram rendering."""
    s = get_settings()
    async with httpx.AsyncClient(timeout=s.diagram_render_timeout) as client:
        app.state.diagram_renderer = build_renderer(s, client)
        logger.info("Diagram renderer: %s", s.diagram_renderer)
        yield


app = FastAPI(
    title="Portfolio Blog API",
    description="Markdown blog posts with highlighted code and rendered diagrams",
    version=VERSION,
    lifespan=lifespan,
)

# Request IDs, security headers
app.add_middleware(RequestIDMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)

# Routers
app.include_router(blog.router, prefix="/api")


def _check_content_dir() -> str:
    """Verify the content directory is present. Returns 'ok' or 'fail'."""
    if Path(get_settings().content_dir).is_dir():
        return "ok"
    return "fail"


def _run_health_checks() -> dict[str, Any]:
    """Run all health checks, returning the full response body."""
    checks = {"content_dir": _check_content_dir()}
    failed = [k for k, v in checks.items() if v != "ok"]

    if failed:
        # Zero posts is still a valid site
        overall = "degraded"
        logger.warning("Health check degraded, failed: %s", ", ".join(failed))
    else:
        overall = "ok"

    return {
        "status": overall,
        "service": "portfolio-blog-api",
        "version": VERSION,
        "checks": checks,
    }


@app.get("/api/health")
async def health_check() -> JSONResponse:
    """Health check verifying service dependencies.

    Always 200: a missing content directory only degrades the site.
    """
    result = _run_health_checks()
    return JSONResponse(content=result)
