"""
FastAPI Application Entry Point.

This module creates and configures the FastAPI application instance.
It handles:
1. Application initialization
2. Router registration
3. Middleware configuration (audit & security headers)
4. Exception handlers (CollabDocsException hierarchy)
5. Startup/shutdown events (table creation, default seeding)

Run with: uvicorn collabdocs.api.main:app --reload
"""
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from collabdocs import __version__
from collabdocs.api.routes import (
    assistant_router,
    database_router,
    documents_router,
    health_router,
    keybindings_router,
    preferences_router,
    projects_router,
    users_router,
)
from collabdocs.core.audit import AuditMiddleware, SecurityHeadersMiddleware
from collabdocs.core.config import get_settings
from collabdocs.core.exceptions import CollabDocsException, DatabaseError, RateLimitExceeded
from collabdocs.core.logging_config import get_logger, setup_logging


# Initialize logging before anything else
settings = get_settings()
setup_logging(settings.log_level, settings.log_dir)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - Startup: create missing tables, seed default commands/preferences
    - Shutdown: dispose of the connection pool
    """
    logger.info(f"Starting {settings.app_name} {__version__} in {settings.app_env} mode")
    logger.info(f"LLM Model: {settings.llm_model} (fallback: {settings.llm_model_fallback})")
    logger.info(f"Rate Limit: {settings.rate_limit_per_minute} AI req/min per user")
    logger.info(f"Audit Logging: {settings.enable_audit_logging}")

    from collabdocs.database import init_tables, seed_defaults
    try:
        init_tables()
        seed_defaults()
    except SQLAlchemyError as e:
        # Keep serving; /health/ready reports the database as unreachable
        logger.error(f"Failed to initialize database: {e}")

    if not settings.groq_api_key and not settings.google_api_key:
        logger.warning("No LLM API key configured; writing assistant calls will fail with 503")

    yield  # Application runs here

    logger.info(f"Shutting down {settings.app_name}")

    from collabdocs.database import reset_database
    reset_database()


# Create FastAPI application
app = FastAPI(
    title="CollabDocs API",
    description="""
    Backend for a collaborative document editor.

    ## Features

    - **Documents & Projects**: CRUD, star/trash, role-based sharing (viewer / editor / owner)
    - **Customization**: Keybinding overrides, editor preferences, background images
    - **Writing Assistant**: Chat grounded in your documents (RAG) and one-shot
      editing commands, paid for with AI credits

    Authentication uses the HttpOnly `auth-token` cookie set by `POST /api/login`.
    """,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ============================================================
# Middleware Configuration (Order matters!)
# ============================================================

app.add_middleware(SecurityHeadersMiddleware)

if settings.enable_audit_logging:
    app.add_middleware(AuditMiddleware)
    logger.info("Audit logging middleware enabled")

if settings.is_development():
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=".*",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.warning("CORS configured for development (all origins allowed)")


# ============================================================
# Exception Handlers
# ============================================================

@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers={"Retry-After": str(exc.retry_after)}
    )


@app.exception_handler(CollabDocsException)
async def collabdocs_exception_handler(request: Request, exc: CollabDocsException):
    """Handle every application error with its own status code."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    error = DatabaseError()
    if settings.is_development():
        error.details = str(exc)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Handle uncaught exceptions globally.

    Detailed error information is only included in development mode.
    """
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "details": str(exc) if settings.is_development() else None,
            "timestamp": datetime.utcnow().isoformat()
        }
    )


# ============================================================
# Routers
# ============================================================

app.include_router(health_router)
app.include_router(users_router)
app.include_router(documents_router)
app.include_router(projects_router)
app.include_router(keybindings_router)
app.include_router(preferences_router)
app.include_router(assistant_router)
app.include_router(database_router)


# ============================================================
# Root Endpoint
# ============================================================

@app.get("/", include_in_schema=False)
async def root():
    return {
        "message": "CollabDocs API",
        "version": __version__,
        "documentation": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "collabdocs.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development()
    )
