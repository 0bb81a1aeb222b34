"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from payroll_admin import __version__
from payroll_admin.api.routes import (
    brackets_router,
    dashboard_router,
    departments_router,
    employees_router,
    health_router,
    job_grades_router,
    payroll_router,
    reports_router,
    thresholds_router,
)
from payroll_admin.config import get_settings
from payroll_admin.database import create_schema, dispose_db, init_db
from payroll_admin.exceptions import (
    BusinessRuleViolationError,
    DuplicatePeriodError,
    NotFoundError,
    PayrollAdminError,
    ValidationFailure,
)
from payroll_admin.logging_config import configure_logging

logger = logging.getLogger(__name__)

# Checked in order; the first matching class wins
ERROR_STATUS: list[tuple[type[PayrollAdminError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationFailure, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (DuplicatePeriodError, status.HTTP_409_CONFLICT),
    (BusinessRuleViolationError, status.HTTP_409_CONFLICT),
]


def status_for(exc: PayrollAdminError) -> int:
    for error_type, code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings = get_settings()
    configure_logging(settings.log_level)
    engine, _ = init_db()
    if settings.auto_create_schema:
        await create_schema(engine)
    yield
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Payroll Administration API",
        description="Employee administration and monthly gross-pay snapshots",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(PayrollAdminError)
    async def domain_error_handler(
        request: Request, exc: PayrollAdminError
    ) -> JSONResponse:
        """Map domain errors to 4xx responses."""
        return JSONResponse(
            status_code=status_for(exc),
            content={"detail": str(exc), "code": exc.code, "context": exc.context},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    for router in (
        payroll_router,
        brackets_router,
        thresholds_router,
        departments_router,
        job_grades_router,
        employees_router,
        reports_router,
        dashboard_router,
    ):
        app.include_router(router, prefix="/api")

    return app


# Default app instance for uvicorn
app = create_app()
