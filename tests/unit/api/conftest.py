"""Fixtures for API route tests."""

from datetime import date
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from coopreg.api.app import register_exception_handlers, register_middleware
from coopreg.api.dependencies import get_identity_client, get_store, get_today
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
from coopreg.identity import Role
from coopreg.store import CoopStore


@pytest.fixture
def identity() -> MagicMock:
    """Mock identity provider client; every caller is an admin unless changed."""
    client = MagicMock()
    client.get_role.return_value = Role.ADMIN
    return client


@pytest.fixture
def app(store: CoopStore, identity: MagicMock, today: date) -> FastAPI:
    """Create a test FastAPI app with mocked dependencies."""
    app = FastAPI()

    def override_get_store():
        yield store

    def override_get_identity_client():
        yield identity

    app.dependency_overrides[get_store] = override_get_store
    app.dependency_overrides[get_identity_client] = override_get_identity_client
    app.dependency_overrides[get_today] = lambda: today

    register_exception_handlers(app)
    register_middleware(app)

    for module in (
        auth,
        me,
        family,
        sessions,
        teaching_requests,
        schedule_comments,
        events,
        registration,
        admin_sessions,
        admin_classrooms,
        admin_requests,
        admin_schedule,
        admin_overrides,
        admin_fees,
        admin_volunteer_jobs,
        admin_session_jobs,
        admin_events,
        admin_families,
        admin_users,
    ):
        app.include_router(module.router, prefix="/api/v1")

    return app


@pytest.fixture
def client(app: FastAPI):
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def headers_for():
    """Factory for request headers identifying a caller."""

    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {user_id}-token", "X-User-Id": user_id}

    return _headers
