"""FastAPI application factory and error-envelope handlers."""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from booking_portal import errors
from booking_portal.config import Settings
from booking_portal.pipeline import BookingPipeline
from booking_portal.store.message_store import MessageStore, SQLiteMessageStore
from booking_portal.store.user_store import InMemoryUserStore, UserStore

from .routes import router

logger = logging.getLogger(__name__)

# Most specific first.
_STATUS_BY_ERROR: list[tuple[type[errors.PortalError], int]] = [
    (errors.ValidationError, 400),
    (errors.NotFound, 404),
    (errors.UpstreamEmpty, 404),
    (errors.UpstreamCancelled, 504),
    (errors.UpstreamUnreachable, 502),
    (errors.NormalizationError, 502),
]


def status_for(exc: errors.PortalError) -> int:
    for error_cls, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return status
    return 500


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(errors.PortalError)
    async def portal_error(request: Request, exc: errors.PortalError) -> JSONResponse:
        status = status_for(exc)
        if status >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return _error(status, str(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, "Invalid request body")

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error")


def create_app(
    pipeline: BookingPipeline,
    user_store: UserStore,
    message_store: MessageStore,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Build the API around injected collaborators."""
    app = FastAPI(title="Booking Portal", version="0.1.0")
    app.state.pipeline = pipeline
    app.state.user_store = user_store
    app.state.message_store = message_store
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _install_error_handlers(app)
    app.include_router(router)
    return app


def create_app_from_settings(settings: Settings) -> FastAPI:
    """Wire default collaborators (YAML users, sqlite messages) from settings."""
    if settings.users_path is not None:
        user_store: UserStore = InMemoryUserStore.from_yaml(settings.users_path)
    else:
        logger.warning("BOOKING_PORTAL_USERS not set; no user can authenticate")
        user_store = InMemoryUserStore()
    return create_app(
        BookingPipeline.from_settings(settings),
        user_store,
        SQLiteMessageStore(settings.db_path),
        settings=settings,
    )
