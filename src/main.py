import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, get_settings
from .database import Database
from .exceptions import (
    CalculatorAPIError,
    InvalidCalculationError,
    InvalidCalculationIdError,
    CalculationNotFoundError,
    PersistenceError,
    DatabaseUnavailableError,
)
from .health import router as health_router, available_endpoints
from .logging_config import configure_logging
from .middleware import RequestLoggingMiddleware
from src.calculations.router import router as calculations_router
from src.calculations.models import Calculation  # noqa: F401 - Import so Base.metadata sees it

logger = structlog.get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    # Startup: a handle injected by create_app (tests) wins over settings
    database = getattr(app.state, "database", None) or Database.from_settings(settings)
    app.state.database = database

    if settings.DB_AUTO_CREATE:
        await database.create_tables()

    logger.info(
        "app_started",
        app=settings.APP_NAME,
        environment=settings.ENVIRONMENT,
        api_prefix=settings.API_PREFIX,
    )

    yield

    # Shutdown: in-flight requests have drained, release the pool
    await database.dispose()
    logger.info("app_stopped")


def _error_content(
    request: Request,
    message: str,
    code: str | None = None,
    **extra,
) -> dict:
    """Build the failure envelope; codes are only exposed outside production."""
    content = {
        "success": False,
        "message": message,
        "data": None,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
        "method": request.method,
    }
    if code and not request.app.state.settings.is_production:
        content["code"] = code
    content.update(extra)
    return content


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvalidCalculationError)
    async def invalid_calculation_handler(request: Request, exc: InvalidCalculationError):
        return JSONResponse(
            status_code=400,
            content=_error_content(request, exc.message, exc.code),
        )

    @app.exception_handler(InvalidCalculationIdError)
    async def invalid_id_handler(request: Request, exc: InvalidCalculationIdError):
        return JSONResponse(
            status_code=400,
            content=_error_content(request, exc.message, exc.code),
        )

    @app.exception_handler(CalculationNotFoundError)
    async def not_found_handler(request: Request, exc: CalculationNotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_content(request, exc.message, exc.code),
        )

    @app.exception_handler(DatabaseUnavailableError)
    async def database_unavailable_handler(request: Request, exc: DatabaseUnavailableError):
        logger.error("database_unavailable", error=exc.message, path=request.url.path)
        return JSONResponse(
            status_code=503,
            content=_error_content(request, "Database connection failed", exc.code),
        )

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        logger.error("persistence_error", error=exc.message, path=request.url.path)
        settings: Settings = request.app.state.settings
        message = "Internal Server Error" if settings.is_production else exc.message
        return JSONResponse(
            status_code=500,
            content=_error_content(request, message, exc.code),
        )

    @app.exception_handler(CalculatorAPIError)
    async def api_error_handler(request: Request, exc: CalculatorAPIError):
        return JSONResponse(
            status_code=400,
            content=_error_content(request, exc.message, exc.code),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"] if part != "body"),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        logger.warning("request_validation_failed", errors=errors)
        return JSONResponse(
            status_code=400,
            content=_error_content(request, "Validation error", "VALIDATION_ERROR", errors=errors),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            logger.warning("route_not_found", method=request.method, path=request.url.path)
            settings: Settings = request.app.state.settings
            return JSONResponse(
                status_code=404,
                content=_error_content(
                    request,
                    f"Route {request.method} {request.url.path} not found",
                    "ROUTE_NOT_FOUND",
                    availableEndpoints=available_endpoints(settings.API_PREFIX),
                ),
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_content(request, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            method=request.method,
            path=request.url.path,
            exc_info=exc,
        )
        settings: Settings = request.app.state.settings
        if settings.is_production:
            return JSONResponse(
                status_code=500,
                content=_error_content(request, "Internal Server Error"),
            )
        return JSONResponse(
            status_code=500,
            content=_error_content(
                request,
                str(exc) or "Internal Server Error",
                type(exc).__name__,
                stack=traceback.format_exception(type(exc), exc, exc.__traceback__),
            ),
        )


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Settings to use; defaults to the cached environment settings.
        database: Pre-built database handle; built from settings at startup
            when omitted.

    Returns:
        The configured FastAPI app.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan,
        debug=settings.DEBUG,
    )
    app.state.settings = settings
    if database is not None:
        app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept", "X-Request-ID"],
        expose_headers=["Content-Length", "X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    _register_exception_handlers(app)

    @app.get("/")
    async def root():
        return {
            "success": True,
            "message": "Calculator API is running",
            "version": settings.APP_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": {
                "health": f"{settings.API_PREFIX}/health",
                "calculations": f"{settings.API_PREFIX}/calculations",
            },
        }

    # Include routers
    app.include_router(health_router, prefix=settings.API_PREFIX)
    app.include_router(calculations_router, prefix=settings.API_PREFIX)

    return app


app = create_app()
