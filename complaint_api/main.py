"""Complaint Management API - Main FastAPI application."""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import make_asgi_app
from sqlalchemy import text

from complaint_api.exceptions import ComplaintSystemError, PersistenceError
from complaint_api.middleware.correlation import CorrelationIDMiddleware
from complaint_api.routes import auth, categories, complaints
from complaint_api.settings import get_settings

settings = get_settings()

LOG_FORMATS = {
    "json": '{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s", "module": "%(name)s"}',
    "text": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
}

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format=LOG_FORMATS.get(settings.log_format.lower(), LOG_FORMATS["json"]),
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting Complaint Management API...")
    try:
        settings.validate_production_settings()

        from complaint_api.storage.service import get_attachment_store
        store = get_attachment_store()
        logger.info(f"Attachment store initialized: {store.backend}")
    except Exception as e:
        logger.error(f"Configuration validation failed: {e}")
        raise ValueError(f"Invalid configuration: {e}") from e

    yield
    logger.info("Shutting down Complaint Management API...")


async def complaint_error_handler(request: Request, exc: ComplaintSystemError) -> JSONResponse:
    """Convert domain errors to JSON; 500-class details stay server-side."""
    correlation_id = getattr(request.state, "correlation_id", None)
    if isinstance(exc, PersistenceError):
        logger.error(
            f"Persistence failure: {exc.__cause__ or exc}",
            extra={"correlation_id": correlation_id, "path": request.url.path},
        )
    else:
        logger.info(
            f"Request rejected: {exc.message}",
            extra={
                "correlation_id": correlation_id,
                "path": request.url.path,
                "status_code": exc.status_code,
            },
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies and parameters as 400."""
    errors = exc.errors()
    fields = ", ".join(
        ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        for error in errors
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": f"Invalid request: {fields}" if fields else "Invalid request"},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unhandled errors with traceback and return a generic 500."""
    logger.error(
        f"Unhandled exception: {exc}",
        exc_info=True,
        extra={
            "correlation_id": getattr(request.state, "correlation_id", None),
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Create FastAPI app
app = FastAPI(
    title="Complaint Management API",
    description="Complaint submission, tracking, and resolution",
    version=VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)
app.add_middleware(CorrelationIDMiddleware)

# Exception handlers
app.add_exception_handler(ComplaintSystemError, complaint_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Prometheus metrics
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# Uploaded attachments (local backend)
if settings.storage_backend == "local":
    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

# Register routers
app.include_router(auth.router)
app.include_router(categories.router)
app.include_router(complaints.router)


@app.get("/health")
async def health_check():
    """Health check endpoint (basic liveness)."""
    return {
        "status": "healthy",
        "service": "complaint-api",
        "version": VERSION,
    }


@app.get("/ready")
async def readiness_check():
    """Readiness check endpoint (verifies dependencies)."""
    from complaint_api.db.session import SessionLocal
    from complaint_api.storage.service import get_attachment_store

    checks = {
        "database": False,
        "attachment_store": False,
    }

    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception as e:
        logger.error(f"Database check failed: {e}")
    finally:
        db.close()

    try:
        checks["attachment_store"] = get_attachment_store().is_available()
    except Exception as e:
        logger.error(f"Attachment store check failed: {e}")

    all_ready = all(checks.values())
    return JSONResponse(
        content={
            "status": "ready" if all_ready else "not_ready",
            "checks": checks,
        },
        status_code=status.HTTP_200_OK if all_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "Complaint Management API",
        "version": VERSION,
        "docs": "/docs",
        "health": "/health",
    }
