"""
Blogpress API

FastAPI backend for the blog: accounts, posts, threaded comments and likes.
"""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from blogpress.config import DEFAULT_JWT_SECRET, get_settings
from blogpress.errors import BlogpressError, ValidationFailed
from blogpress.middleware import (
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
    configure_logging,
    request_id_var,
)
from blogpress.routers import auth, comments, posts
from blogpress.services.store import check_storage_connectivity

logger = logging.getLogger(__name__)

settings = get_settings()
configure_logging(settings.log_level)

# Health check cache: (result_dict, timestamp)
_health_cache: tuple[dict[str, Any], float] | None = None
_HEALTH_CACHE_TTL = 30  # seconds


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown."""
    logger.info(
        "Starting Blogpress API (%s, storage=%s)",
        settings.environment,
        settings.storage_backend,
    )
    yield


app = FastAPI(
    title="Blogpress API",
    description="Blogging platform: posts, threaded comments and likes",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(SecurityHeadersMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
)

# Request ID (added last, so it is the outermost middleware)
app.add_middleware(RequestIDMiddleware)

# Routers
app.include_router(auth.router, prefix="/api")
app.include_router(posts.router, prefix="/api")
app.include_router(comments.router, prefix="/api")


def _error_body(message: str, errors: list[dict[str, str]] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"message": message}
    if errors:
        body["errors"] = errors
    return body


@app.exception_handler(BlogpressError)
async def blogpress_error_handler(request: Request, exc: BlogpressError) -> JSONResponse:
    errors = exc.errors if isinstance(exc, ValidationFailed) else None
    return JSONResponse(
        status_code=exc.status_code, content=_error_body(exc.message, errors)
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed requests as 400 with one entry per offending field."""
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0]),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400, content=_error_body("Validation failed", errors)
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        extra={"request_id": request_id_var.get()},
    )
    return JSONResponse(status_code=500, content=_error_body("Server error"))


def _check_config() -> str:
    """Verify required configuration is loaded. Returns 'ok' or 'fail'."""
    s = get_settings()
    if s.storage_backend == "blob" and not (
        s.azure_storage_account and s.azure_storage_container
    ):
        return "fail"
    if s.environment == "production" and s.jwt_secret == DEFAULT_JWT_SECRET:
        return "fail"
    return "ok"


def _run_health_checks() -> dict[str, Any]:
    """Run all health checks, returning the full response body."""
    global _health_cache
    now = time.time()
    if _health_cache is not None:
        cached_result, cached_at = _health_cache
        if now - cached_at < _HEALTH_CACHE_TTL:
            return cached_result

    config_status = _check_config()
    storage_status = "ok" if check_storage_connectivity() else "fail"

    checks = {"config": config_status, "storage": storage_status}
    failed = [k for k, v in checks.items() if v != "ok"]

    if failed:
        overall = "degraded"
        logger.warning("Health check degraded, failed: %s", ", ".join(failed))
    else:
        overall = "ok"

    result: dict[str, Any] = {
        "status": overall,
        "service": "blogpress-api",
        "version": "0.1.0",
        "checks": checks,
    }
    _health_cache = (result, now)
    return result


@app.get("/api/health")
async def health_check() -> JSONResponse:
    """Health check verifying service dependencies."""
    result = _run_health_checks()
    status_code = 200 if result["status"] in ("ok", "degraded") else 503
    return JSONResponse(content=result, status_code=status_code)
