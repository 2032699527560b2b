"""FastAPI application factory."""

import logging
from http import HTTPStatus
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortlinks.exceptions import CodeConflictError, RequestValidationFailed
from shortlinks.service import ShortlinkService

from .api import api_router
from .web import web_router
from .middleware.headers import ForwardedHeadersMiddleware
from .middleware.logging import LoggingMiddleware


def _format_validation_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI, logger: logging.Logger) -> None:
    """Render every error as a JSON body with an ``error`` key."""

    @app.exception_handler(RequestValidationFailed)
    async def validation_failed_handler(request: Request, exc: RequestValidationFailed):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation failed", "details": exc.errors},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [_format_validation_error(error) for error in exc.errors()]
        logger.warning(f"Malformed request at {request.url.path}: {details}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation failed", "details": details},
        )

    @app.exception_handler(CodeConflictError)
    async def code_conflict_handler(request: Request, exc: CodeConflictError):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "error": "Shortcode already exists",
                "message": f"The shortcode '{exc.shortcode}' is already in use",
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict):
            content = exc.detail
        else:
            content = {
                "error": HTTPStatus(exc.status_code).phrase,
                "message": str(exc.detail),
            }
        logger.warning(f"HTTP {exc.status_code} at {request.method} {request.url.path}: {content}")
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(Exception)
    async def internal_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error at {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred",
            },
        )


def create_app(
    service: ShortlinkService,
    config,
    logger: Optional[logging.Logger] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        service: Service instance wrapping the registry store
        config: Configuration instance
        logger: Optional logger for gateway errors

    Returns:
        Configured FastAPI app
    """
    logger = logger or logging.getLogger("shortlinks.web")

    app = FastAPI(
        title="Shortlinks",
        description="URL shortening service with click analytics",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # Store instances in app state for access in routes
    app.state.service = service
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(ForwardedHeadersMiddleware)
    app.add_middleware(LoggingMiddleware)

    register_exception_handlers(app, logger)

    # API first so /shorturls is never taken for a shortcode
    app.include_router(api_router, tags=["Short URLs"])
    app.include_router(web_router, tags=["Web"])

    return app
