"""Main FastAPI application entry point.

Provides CORS, error envelopes, health checks and the course, enrollment,
progress and generation routers.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import os
import subprocess
from datetime import datetime, timezone

from prephub.errors import ServiceError, TextGenerationError
from prephub.routers import courses, enrollments, generation, health

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Application metadata
APP_NAME = "PrepHub Courses API"
VERSION = os.getenv("APP_VERSION", "1.0.0")
DESCRIPTION = """
Course authoring and learning-progress backend for PrepHub.

## Features

* **Courses**: author, list, search and read courses with ordered chapters
* **Enrollment**: enroll/unenroll with per-chapter completion tracking
* **Bookmarks**: per-user course bookmarks
* **Generation**: LLM-generated outlines and chapter content
"""

# Initialize FastAPI app
app = FastAPI(
    title=APP_NAME,
    description=DESCRIPTION,
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# CORS middleware configuration
cors_origins = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173"
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Global exception handlers


def _error_body(request: Request, message, kind: str, **extra) -> dict:
    return {
        "success": False,
        "error": message,
        "kind": kind,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": str(request.url),
        **extra,
    }


@app.exception_handler(TextGenerationError)
async def generation_exception_handler(request: Request, exc: TextGenerationError):
    """Generation failures pass the backend's message through as ``details``"""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.message, exc.kind, details=exc.details),
    )


@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError):
    """Map the service error taxonomy onto HTTP responses"""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.message, exc.kind),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with consistent error format"""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.detail, "http_error"),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=_error_body(
            request,
            "Invalid request",
            "validation_error",
            details=jsonable_errors(exc),
        ),
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=_error_body(request, "Internal server error", "server_error"),
    )

# Include routers
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(generation.router, prefix="/api/v1")
app.include_router(courses.router, prefix="/api/v1")
app.include_router(enrollments.router, prefix="/api/v1")


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "name": APP_NAME,
        "version": VERSION,
        "status": "running",
        "environment": os.getenv("ENVIRONMENT", "development"),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "docs": "/docs",
        "health": "/api/v1/health"
    }


@app.on_event("startup")
async def startup_event():
    """Application startup tasks"""
    logger.info(f"Starting {APP_NAME} v{VERSION}")
    logger.info(f"Environment: {os.getenv('ENVIRONMENT', 'development')}")
    logger.info(f"CORS Origins: {cors_origins}")
    if os.getenv("AUTO_MIGRATE", "false").lower() in {"1", "true", "yes"}:
        run_migrations()


def run_migrations() -> None:
    """Run ``alembic upgrade head`` from the project root"""
    logger.info("AUTO_MIGRATE enabled: running 'alembic upgrade head'")
    try:
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            cwd=os.path.join(os.path.dirname(__file__), ".."),
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        logger.error("Alembic not found - ensure it's installed in the environment")
        return
    if result.returncode != 0:
        logger.error(
            "Alembic upgrade failed (code %s): %s\n%s",
            result.returncode,
            result.stdout,
            result.stderr,
        )
    else:
        logger.info("Alembic migration applied successfully")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown tasks"""
    logger.info(f"Shutting down {APP_NAME}")


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    host = os.getenv("HOST", "0.0.0.0")

    uvicorn.run(
        "prephub.main:app",
        host=host,
        port=port,
        reload=True,
        log_level="info"
    )
