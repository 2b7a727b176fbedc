"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coursegate.api.dependencies import close_engine, init_engine
from coursegate.api.models import APIResponse, CourseRefResponse
from coursegate.api.routes import courses, enrollments, students
from coursegate.config import load_settings
from coursegate.exceptions import (
    ConcurrencyError,
    ConflictError,
    CoursegateError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from coursegate.ledger import CapacityExceededError, PrerequisitesNotMetError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from coursegate.config import Settings

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = "1"
UNPROCESSABLE_STATUS = 422


def error_response(
    status_code: int,
    exc: CoursegateError,
    data: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the JSON error body for a coursegate error."""
    return JSONResponse(
        status_code=status_code,
        content=APIResponse[Any](data=data, error=str(exc), code=exc.code).model_dump(),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Translate the coursegate error taxonomy into HTTP responses."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(_request: Request, exc: ValidationError) -> JSONResponse:
        return error_response(status.HTTP_400_BAD_REQUEST, exc)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
        return error_response(status.HTTP_404_NOT_FOUND, exc)

    @app.exception_handler(CapacityExceededError)
    async def capacity_exceeded_handler(
        _request: Request, exc: CapacityExceededError
    ) -> JSONResponse:
        return error_response(
            status.HTTP_409_CONFLICT, exc, data={"course_id": exc.course_id}
        )

    @app.exception_handler(ConflictError)
    async def conflict_handler(_request: Request, exc: ConflictError) -> JSONResponse:
        return error_response(status.HTTP_409_CONFLICT, exc)

    @app.exception_handler(PrerequisitesNotMetError)
    async def prerequisites_not_met_handler(
        _request: Request, exc: PrerequisitesNotMetError
    ) -> JSONResponse:
        missing = [CourseRefResponse.model_validate(ref).model_dump() for ref in exc.missing]
        return error_response(
            UNPROCESSABLE_STATUS, exc, data={"missing_prerequisites": missing}
        )

    @app.exception_handler(PreconditionError)
    async def precondition_handler(_request: Request, exc: PreconditionError) -> JSONResponse:
        return error_response(UNPROCESSABLE_STATUS, exc)

    @app.exception_handler(ConcurrencyError)
    async def concurrency_handler(_request: Request, exc: ConcurrencyError) -> JSONResponse:
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            exc,
            headers={"Retry-After": RETRY_AFTER_SECONDS},
        )

    @app.exception_handler(CoursegateError)
    async def coursegate_error_handler(_request: Request, exc: CoursegateError) -> JSONResponse:
        logger.error("Unhandled coursegate error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=APIResponse[None](data=None, error="Internal server error").model_dump(),
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    settings = app.state.settings if app.state.settings is not None else load_settings()
    init_engine(settings)
    logger.info("coursegate API started (db=%s)", settings.db_path)

    yield
    # Shutdown
    close_engine()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Runtime settings. Loaded from the environment at startup
            when omitted.
    """
    app = FastAPI(
        title="coursegate API",
        description="REST API for coursegate - capacity-safe course enrollment",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(courses.router, prefix="/api/v1")
    app.include_router(enrollments.router, prefix="/api/v1")
    app.include_router(students.router, prefix="/api/v1")

    return app


# Default app instance
app = create_app()
