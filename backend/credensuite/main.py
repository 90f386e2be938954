"""
CredenSuite API application.

Run with ``credensuite serve`` or ``uvicorn credensuite.main:app``.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from credensuite.api.v1.router import api_router
from credensuite.core.config import settings
from credensuite.core.database import close_db, get_session_local, init_db
from credensuite.core.exceptions import (
    CredenSuiteError,
    StorageUnavailableError,
    ValidationError,
    error_response,
)
from credensuite.core.logging_config import logger
from credensuite.core.middleware import (
    RequestLoggingMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)
from credensuite.core.rate_limiter import limiter, rate_limit_exceeded_handler
from credensuite.schemas.common import error_entries
from credensuite.services.settings_service import settings_service
from credensuite.services.template_service import template_service

APP_VERSION = "1.0.0"


def check_startup_config() -> None:
    """Refuse to start on settings that would break every request"""
    problems = []
    if not settings.DATABASE_URL:
        problems.append("DATABASE_URL is empty")
    if not settings.MEMBER_ID_PREFIX:
        problems.append("MEMBER_ID_PREFIX is empty")
    if settings.PDF_RENDER_TIMEOUT_SECONDS <= 0:
        problems.append("PDF_RENDER_TIMEOUT_SECONDS must be positive")
    if problems:
        for problem in problems:
            logger.critical(f"[Startup] {problem}")
        raise RuntimeError(f"Invalid configuration: {'; '.join(problems)}")

    if settings.ENVIRONMENT == "production" and settings.DATABASE_URL.startswith("sqlite"):
        logger.warning("[Startup] SQLite in production; writes are serialized on the database file")


async def seed_defaults() -> None:
    """Organization settings row and default card template, when absent"""
    async with get_session_local()() as session:
        await settings_service.ensure_default_settings(session)
        await template_service.ensure_default_template(session)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} {APP_VERSION} ({settings.ENVIRONMENT})")
    check_startup_config()
    Path(settings.UPLOADS_DIR).mkdir(parents=True, exist_ok=True)
    await init_db()
    await seed_defaults()
    logger.info("[Startup] Database ready, defaults seeded")

    yield

    logger.info(f"Stopping {settings.APP_NAME}")
    await close_db()


def register_exception_handlers(app: FastAPI) -> None:
    """Every error leaves the API as ``{"success": false, "error": {...}}``"""

    @app.exception_handler(CredenSuiteError)
    async def credensuite_error_handler(request: Request, exc: CredenSuiteError):
        if exc.status_code >= 500:
            logger.error(
                f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
                exc_info=exc.__cause__ or exc,
                extra={"event_type": "internal_error", "error_code": exc.code, "error_details": exc.details},
            )
        return JSONResponse(status_code=exc.status_code, content=error_response(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = ValidationError(errors=error_entries(exc))
        return JSONResponse(status_code=error.status_code, content=error_response(error))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.log_error_with_context(exc, f"{request.method} {request.url.path}")
        error = StorageUnavailableError()
        return JSONResponse(status_code=error.status_code, content=error_response(error))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.log_error_with_context(exc, f"{request.method} {request.url.path}")
        error = CredenSuiteError(str(exc))
        return JSONResponse(status_code=500, content=error_response(error, expose_internal=settings.DEBUG))


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Member registry and ID card generation for small organizations",
        version=APP_VERSION,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    register_exception_handlers(app)

    # Last added runs first: CORS, size cap, security headers, request logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time", "Content-Disposition"],
    )

    @app.get("/", tags=["Root"])
    async def root():
        return {"name": settings.APP_NAME, "version": APP_VERSION, "docs": "/docs", "api": "/api/v1"}

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "healthy", "version": APP_VERSION, "environment": settings.ENVIRONMENT}

    app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")

    # Photos, logos and signatures referenced as /uploads/<name>
    app.mount("/uploads", StaticFiles(directory=settings.UPLOADS_DIR, check_dir=False), name="uploads")
    return app


app = create_app()
