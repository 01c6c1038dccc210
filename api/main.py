"""FastAPI application for the Estate API."""

import asyncio
import logging
from contextlib import asynccontextmanager

import fastapi
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import get_settings
from core.database import (
    create_engine,
    create_session_maker,
    create_tables,
    dispose_engine,
    init_db,
)
from core.errors import AppError, ErrorCode
from core.logger import configure_logging, get_logger
from core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from core.responses import api_error
from resources import build_resources
from routes import (
    clients_router,
    documents_crud_router,
    documents_router,
    health_router,
    properties_router,
    users_router,
)

configure_logging()
logger = logging.getLogger(__name__)

_HTTP_ERROR_CODES = {
    400: ErrorCode.INVALID_INPUT,
    401: ErrorCode.AUTH_REQUIRED,
    403: ErrorCode.PERMISSION_DENIED,
    404: ErrorCode.RESOURCE_NOT_FOUND,
    405: ErrorCode.INVALID_INPUT,
    409: ErrorCode.RESOURCE_CONFLICT,
}


async def app_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """AppErrors raised outside a controller (e.g. from a dependency)."""
    if not isinstance(exc, AppError):
        return await global_exception_handler(request, exc)

    details = exc.details if exc.status_code == 400 else None
    if exc.status_code >= 500:
        logger.error(
            "app_error.server",
            extra={"path": request.url.path, "code": int(exc.code)},
        )
        return JSONResponse(
            status_code=500,
            content=api_error("An unexpected error occurred", exc.code),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=api_error(exc.message, exc.code, details),
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Routing 404/405 and explicit HTTPExceptions, in the response envelope."""
    if not isinstance(exc, StarletteHTTPException):
        return await global_exception_handler(request, exc)

    code = _HTTP_ERROR_CODES.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    return JSONResponse(
        status_code=exc.status_code,
        content=api_error(str(exc.detail), code),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handler for request validation errors."""
    if not isinstance(exc, RequestValidationError):
        return await global_exception_handler(request, exc)

    errors = exc.errors()
    logger.warning(
        "request.validation_error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(errors),
        },
    )
    first = errors[0] if errors else {"loc": (), "msg": "Invalid request"}
    field = ".".join(str(part) for part in first["loc"]) or "input"
    return JSONResponse(
        status_code=400,
        content=api_error(
            f"Validation failed for {field}: {first['msg']}",
            ErrorCode.VALIDATION_FAILED,
            {"field": field},
        ),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for unhandled exceptions."""
    logger.exception(
        "unhandled.exception",
        extra={
            "exc_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=500,
        content=api_error(
            "An unexpected error occurred. Please try again.",
            ErrorCode.INTERNAL_ERROR,
        ),
    )


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Create DB engine and resources at startup, dispose on shutdown."""
    settings = get_settings()
    app.state.engine = create_engine(settings)
    app.state.session_maker = create_session_maker(app.state.engine)

    try:
        async with asyncio.timeout(60):
            await init_db(app.state.engine)
            if settings.create_tables_on_startup:
                await create_tables(app.state.engine)
    except TimeoutError:
        logger.error(
            "init.timeout",
            extra={"hint": "Startup hung - check DB connectivity"},
        )
        await dispose_engine(app.state.engine)
        raise RuntimeError("Application startup timed out")
    except Exception as e:
        logger.error("init.failed", extra={"error": str(e)}, exc_info=True)
        await dispose_engine(app.state.engine)
        raise

    app.state.resources = build_resources(
        app.state.session_maker, get_logger("estate"), settings
    )
    logger.info("init.complete")

    try:
        yield
    finally:
        await dispose_engine(app.state.engine)


_settings = get_settings()

app = fastapi.FastAPI(
    title="Estate API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if _settings.enable_docs or _settings.debug else None,
    redoc_url="/redoc" if _settings.enable_docs or _settings.debug else None,
    openapi_url=("/openapi.json" if _settings.enable_docs or _settings.debug else None),
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(SecurityHeadersMiddleware)

if _settings.allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-Duration-Ms", "X-Request-ID"],
        max_age=600,
    )

# Outermost user middleware: the request id is bound before anything logs.
app.add_middleware(RequestContextMiddleware)

app.include_router(health_router)
app.include_router(documents_router)
app.include_router(properties_router)
app.include_router(clients_router)
app.include_router(documents_crud_router)
app.include_router(users_router)
