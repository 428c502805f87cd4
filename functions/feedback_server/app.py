"""
FastAPI application entry point for the feedback service.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from feedback_server.config import Settings, get_settings
from feedback_server.dependencies import build_kv_store, get_kv_store
from feedback_server.errors import FeedbackServerError
from feedback_server.kv_store import KvStore
from feedback_server.middleware import add_cors, log_requests
from feedback_server.routes import router
from feedback_server.schemas import ErrorResponse

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
    )


async def handle_service_error(request: Request, exc: FeedbackServerError) -> JSONResponse:
    if exc.status_code == 401:
        logger.info("Unauthorized %s %s: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message)


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Field locations only; inputs may carry passwords.
    locations = [error.get("loc") or () for error in exc.errors()]
    logger.warning("Invalid request for %s at %s", request.url.path, locations)
    if any(loc and loc[0] == "body" for loc in locations):
        return _error(500, "Invalid request body")
    return _error(500, "Invalid request")


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Internal server error")


def create_app(
    settings: Settings | None = None, store: KvStore | None = None
) -> FastAPI:
    """
    Build the application.

    ``settings`` and ``store`` replace the environment-derived defaults for
    every request handled by this app instance.
    """
    if settings is not None and store is None:
        store = build_kv_store(settings)
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    app = FastAPI(title="Feedback Service", version="0.1.0")
    app.add_exception_handler(FeedbackServerError, handle_service_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.middleware("http")(log_requests)
    add_cors(app, settings.cors_allow_origins)

    app.include_router(router, prefix=settings.api_prefix)

    app.dependency_overrides[get_settings] = lambda: settings
    if store is not None:
        app.dependency_overrides[get_kv_store] = lambda: store
    return app


app = create_app()
