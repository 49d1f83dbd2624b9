from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from mediacheck.api.deps import get_request_id
from mediacheck.api.routes.articles import router as articles_router
from mediacheck.core.config import get_settings
from mediacheck.core.errors import (
    AIReplyWaitTimeout,
    MediacheckError,
    NotFound,
    PersistenceFailure,
    Unauthorized,
)
from mediacheck.core.logging import setup_logging
from mediacheck.core.middleware import RequestContextMiddleware
from mediacheck.db.base import Base
from mediacheck.db.session import AsyncSessionLocal, engine
from mediacheck.schemas.common import APIError, APIErrorEnvelope, HealthCheckResponse

settings = get_settings()
setup_logging(logging.DEBUG if settings.debug else logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version=settings.app_version)
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    max_age=3600,
)

app_start_time = time.time()

ERROR_STATUS_CODES: dict[type[MediacheckError], int] = {
    NotFound: 404,
    Unauthorized: 401,
    PersistenceFailure: 503,
    AIReplyWaitTimeout: 504,
}


@app.on_event("startup")
async def on_startup() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Application startup complete")


def _error_response(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    envelope = APIErrorEnvelope(error=APIError(code=code, message=message, request_id=get_request_id(request)))
    return JSONResponse(status_code=status_code, content=envelope.model_dump())


@app.exception_handler(MediacheckError)
async def mediacheck_exception_handler(request: Request, exc: MediacheckError):
    status_code = ERROR_STATUS_CODES.get(type(exc), 500)
    if status_code >= 500:
        logger.error("Request failed: %s", exc, exc_info=exc, extra={"request_id": get_request_id(request)})
    return _error_response(request, status_code, exc.code, str(exc))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception", extra={"request_id": get_request_id(request)})
    return _error_response(request, 500, "INTERNAL_SERVER_ERROR", "Unexpected server error")


@app.get("/health", response_model=HealthCheckResponse)
async def health() -> HealthCheckResponse:
    uptime = int(time.time() - app_start_time)
    return HealthCheckResponse(
        status="healthy",
        version=settings.app_version,
        uptime_seconds=uptime,
        checks={"application": {"status": "healthy"}},
    )


@app.get("/health/ready")
async def health_ready() -> JSONResponse:
    uptime = int(time.time() - app_start_time)
    checks: dict[str, dict] = {}
    http_status = 200

    db_latency_ms = 0
    db_status = "healthy"
    db_start = time.time()
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        db_latency_ms = int((time.time() - db_start) * 1000)
    except Exception:
        logger.warning("Readiness database check failed", exc_info=True)
        db_status = "unhealthy"
        http_status = 503

    checks["database"] = {"status": db_status, "latency_ms": db_latency_ms}
    # Without a key every AI reply ends up in ERROR, but the service still answers.
    checks["completion_api"] = {"status": "healthy" if settings.openai_api_key else "degraded"}

    overall = "healthy" if http_status == 200 else "unhealthy"
    return JSONResponse(
        status_code=http_status,
        content={
            "status": overall,
            "version": settings.app_version,
            "uptime_seconds": uptime,
            "checks": checks,
        },
    )


app.include_router(articles_router, prefix=settings.api_prefix)
