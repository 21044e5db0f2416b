"""
WordPress Modernization Audit - FastAPI Application Entry Point.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wpaudit.api.middleware import RequestLoggingMiddleware
from wpaudit.api.routes import router
from wpaudit.core.config import settings
from wpaudit.core.exceptions import AuditError, PageSpeedError, ValidationError
from wpaudit.core.logging import get_logger, setup_logging

# Setup logging before anything else
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan - startup and shutdown."""
    logger.info("Starting application", name=settings.APP_NAME, version=settings.APP_VERSION)
    yield
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    description=(
        "Audits WordPress sites for performance, SEO, security and "
        "modernization readiness, and returns a 0-100 modernization score."
    ),
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request logging
app.add_middleware(RequestLoggingMiddleware)


# ============================================================
# Global Exception Handlers
# ============================================================

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "status_code": exc.status_code,
            "path": str(request.url.path),
        },
    )


ERROR_STATUS = {
    ValidationError: 400,
    PageSpeedError: 502,
}


def status_for(exc: AuditError) -> int:
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


@app.exception_handler(AuditError)
async def audit_exception_handler(request: Request, exc: AuditError):
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log("Audit error", error=exc.message, detail=exc.detail, path=str(request.url.path))
    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.message,
            "detail": exc.detail if settings.DEBUG or status_code < 500 else None,
            "status_code": status_code,
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception", error=str(exc), exc_info=True, path=str(request.url.path))
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.DEBUG else "An unexpected error occurred",
            "status_code": 500,
        },
    )


# ============================================================
# Health & System Endpoints
# ============================================================

@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.APP_ENV,
        "pagespeed_enabled": bool(settings.PAGESPEED_API_KEY),
        "timestamp": time.time(),
    }


@app.get("/", tags=["System"])
async def root():
    """API root endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs" if settings.DEBUG else "Disabled in production",
        "endpoints": [
            "POST /api/v1/audit",
            "POST /api/v1/score",
        ],
    }


app.include_router(router, prefix="/api/v1")


def serve() -> None:
    import uvicorn
    uvicorn.run(
        "wpaudit.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        workers=1 if settings.DEBUG else settings.API_WORKERS,
        reload=settings.DEBUG,
        log_config=None,  # Use our structlog config
    )


if __name__ == "__main__":
    serve()
