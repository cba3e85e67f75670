"""FastAPI application setup."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from coopreg.api.dependencies import (
    close_identity_client,
    close_store,
    init_identity_client,
    init_store,
)
from coopreg.api.models import APIResponse
from coopreg.api.routes import (
    admin_classrooms,
    admin_events,
    admin_families,
    admin_fees,
    admin_overrides,
    admin_requests,
    admin_schedule,
    admin_session_jobs,
    admin_sessions,
    admin_users,
    admin_volunteer_jobs,
    auth,
    events,
    family,
    me,
    registration,
    schedule_comments,
    sessions,
    teaching_requests,
)
from coopreg.config import Settings, load_settings
from coopreg.identity import (
    AuthenticationError,
    AuthorizationError,
    IdentityRequestError,
    IdentityServiceError,
    IdentityTimeoutError,
)
from coopreg.logging import (
    bind_request_id,
    current_request_id,
    get_logger,
    reset_request_id,
)
from coopreg.registration import (
    RegistrationClosedError,
    RegistrationConflictError,
    RegistrationRejectedError,
    VolunteerRequirementError,
)
from coopreg.store import NotFoundError, StateConflictError, StoreError, ValidationError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from starlette.responses import Response

logger = get_logger("api")
REQUEST_ID_HEADER = "X-Request-ID"


def _error(status_code: int, message: str, data: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse[Any](data=data, error=message).model_dump(mode="json"),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    settings: Settings = app.state.settings
    init_store(app.state.db_path or settings.db_path)
    identity = init_identity_client(settings.identity)
    if not settings.identity.is_configured:
        logger.warning("Identity provider is not configured; authenticated routes will fail")
    logger.info("coopreg API started (identity provider: %s)", identity.base_url or "none")

    yield
    # Shutdown
    close_identity_client()
    close_store()


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain exceptions to enveloped JSON error responses."""

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
        else:
            message = "Invalid request"
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, message)

    @app.exception_handler(AuthenticationError)
    async def authentication_handler(_request: Request, exc: AuthenticationError) -> JSONResponse:
        return _error(status.HTTP_401_UNAUTHORIZED, str(exc))

    @app.exception_handler(AuthorizationError)
    async def authorization_handler(_request: Request, exc: AuthorizationError) -> JSONResponse:
        return _error(status.HTTP_403_FORBIDDEN, str(exc))

    @app.exception_handler(IdentityRequestError)
    async def identity_request_handler(
        _request: Request, exc: IdentityRequestError
    ) -> JSONResponse:
        return _error(exc.status_code, str(exc))

    @app.exception_handler(IdentityTimeoutError)
    async def identity_timeout_handler(
        _request: Request, exc: IdentityTimeoutError
    ) -> JSONResponse:
        logger.error("Identity provider timed out: %s", exc)
        return _error(status.HTTP_504_GATEWAY_TIMEOUT, "Identity provider timed out")

    @app.exception_handler(IdentityServiceError)
    async def identity_service_handler(
        _request: Request, exc: IdentityServiceError
    ) -> JSONResponse:
        logger.error("Identity provider unavailable: %s", exc)
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "Identity provider unavailable")

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, f"{exc.entity} not found")

    @app.exception_handler(ValidationError)
    async def validation_handler(_request: Request, exc: ValidationError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(StateConflictError)
    async def state_conflict_handler(_request: Request, exc: StateConflictError) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(RegistrationRejectedError)
    async def registration_rejected_handler(
        _request: Request, exc: RegistrationRejectedError
    ) -> JSONResponse:
        conflicts = [
            {
                "type": str(c.type),
                "message": c.message,
                "child_id": c.child_id,
                "guardian_id": c.guardian_id,
                "schedule_id": c.schedule_id,
            }
            for c in exc.conflicts
        ]
        return _error(status.HTTP_400_BAD_REQUEST, str(exc), data={"conflicts": conflicts})

    @app.exception_handler(VolunteerRequirementError)
    async def volunteer_requirement_handler(
        _request: Request, exc: VolunteerRequirementError
    ) -> JSONResponse:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            str(exc),
            data={
                "required_hours": exc.required_hours,
                "fulfilled_hours": exc.fulfilled_hours,
            },
        )

    @app.exception_handler(RegistrationClosedError)
    async def registration_closed_handler(
        _request: Request, exc: RegistrationClosedError
    ) -> JSONResponse:
        return _error(status.HTTP_403_FORBIDDEN, str(exc))

    @app.exception_handler(RegistrationConflictError)
    async def registration_conflict_handler(
        _request: Request, exc: RegistrationConflictError
    ) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(StoreError)
    async def store_error_handler(_request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Store error: %s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Database error: %s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_middleware(app: FastAPI) -> None:
    """Tag each request with an id that appears in its log lines and response."""

    @app.middleware("http")
    async def request_context(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        token = bind_request_id(request.headers.get(REQUEST_ID_HEADER) or uuid4().hex[:12])
        try:
            response = await call_next(request)
            logger.debug(
                "%s %s -> %d", request.method, request.url.path, response.status_code
            )
            response.headers[REQUEST_ID_HEADER] = current_request_id()
            return response
        finally:
            reset_request_id(token)


def create_app(db_path: str | None = None, settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_path: SQLite database path; overrides the configured path
        settings: Service settings. Loaded from coopreg.yaml and the
            environment when None.
    """
    app = FastAPI(
        title="coopreg API",
        description="REST API for coopreg - Homeschool Cooperative Registration",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.db_path = db_path
    app.state.settings = settings if settings is not None else load_settings()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Include routers
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(me.router, prefix="/api/v1")
    app.include_router(family.router, prefix="/api/v1")
    app.include_router(sessions.router, prefix="/api/v1")
    app.include_router(teaching_requests.router, prefix="/api/v1")
    app.include_router(schedule_comments.router, prefix="/api/v1")
    app.include_router(events.router, prefix="/api/v1")
    app.include_router(registration.router, prefix="/api/v1")
    app.include_router(admin_sessions.router, prefix="/api/v1")
    app.include_router(admin_classrooms.router, prefix="/api/v1")
    app.include_router(admin_requests.router, prefix="/api/v1")
    app.include_router(admin_schedule.router, prefix="/api/v1")
    app.include_router(admin_overrides.router, prefix="/api/v1")
    app.include_router(admin_fees.router, prefix="/api/v1")
    app.include_router(admin_volunteer_jobs.router, prefix="/api/v1")
    app.include_router(admin_session_jobs.router, prefix="/api/v1")
    app.include_router(admin_events.router, prefix="/api/v1")
    app.include_router(admin_families.router, prefix="/api/v1")
    app.include_router(admin_users.router, prefix="/api/v1")

    return app
