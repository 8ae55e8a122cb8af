"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from examcell import __version__
from examcell.api.dependencies import (
    close_settings,
    close_state_store,
    init_settings,
    init_state_store,
)
from examcell.api.models import APIResponse, HealthResponse
from examcell.api.routes import (
    auth,
    bonafide,
    contact,
    dashboard,
    marks,
    queries,
    results,
    student,
    students,
    subjects,
    teacher,
)
from examcell.auth import AccessDeniedError, GateDecision, InvalidCredentialsError, redirect_target
from examcell.config import Settings, get_settings
from examcell.state_store import (
    DuplicateError,
    InvalidStateTransitionError,
    NotFoundError,
    StateStoreError,
    ValidationError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger("examcell.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    settings: Settings = app.state.settings
    db_path = app.state.db_path if hasattr(app.state, "db_path") else settings.database_path
    init_settings(settings)
    init_state_store(db_path)
    logger.info("examcell API started (db=%s)", db_path)

    yield
    # Shutdown
    close_state_store()
    close_settings()


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse[None](data=None, error=message).model_dump(),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors to HTTP responses in the APIResponse envelope."""

    @app.exception_handler(AccessDeniedError)
    async def access_denied_handler(_request: Request, exc: AccessDeniedError) -> JSONResponse:
        target = redirect_target(exc.decision)  # type: ignore[arg-type]
        headers = {"Location": target} if target else None
        if exc.decision is GateDecision.REDIRECT_LOGIN:
            headers = {**(headers or {}), "WWW-Authenticate": "Bearer"}
            return _error(status.HTTP_401_UNAUTHORIZED, "Not authenticated", headers)
        return _error(status.HTTP_403_FORBIDDEN, "Access denied", headers)

    @app.exception_handler(InvalidCredentialsError)
    async def invalid_credentials_handler(
        _request: Request, _exc: InvalidCredentialsError
    ) -> JSONResponse:
        return _error(status.HTTP_401_UNAUTHORIZED, "Invalid email or password")

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc))

    @app.exception_handler(DuplicateError)
    async def duplicate_handler(_request: Request, exc: DuplicateError) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(InvalidStateTransitionError)
    async def invalid_transition_handler(
        _request: Request, exc: InvalidStateTransitionError
    ) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(ValidationError)
    async def validation_handler(_request: Request, exc: ValidationError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(StateStoreError)
    async def state_store_error_handler(_request: Request, exc: StateStoreError) -> JSONResponse:
        logger.error("Unhandled state store error: %s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def include_routers(app: FastAPI) -> None:
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(dashboard.router, prefix="/api/v1")
    app.include_router(students.router, prefix="/api/v1")
    app.include_router(subjects.router, prefix="/api/v1")
    app.include_router(marks.router, prefix="/api/v1")
    app.include_router(student.router, prefix="/api/v1")
    app.include_router(teacher.router, prefix="/api/v1")
    app.include_router(queries.router, prefix="/api/v1")
    app.include_router(bonafide.router, prefix="/api/v1")
    app.include_router(results.router, prefix="/api/v1")
    app.include_router(contact.router, prefix="/api/v1")


def create_app(settings: Settings | None = None, db_path: str | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use. Defaults to the environment.
        db_path: Database path, overriding ``settings.database_path``.
    """
    settings = settings or get_settings()
    app = FastAPI(
        title="examcell API",
        description="REST API for the college examination cell portal",
        version=__version__,
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings
    if db_path is not None:
        app.state.db_path = db_path

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    include_routers(app)

    @app.get("/health", response_model=APIResponse[HealthResponse])
    def health() -> APIResponse[HealthResponse]:
        return APIResponse(data=HealthResponse(status="ok", version=__version__))

    return app
