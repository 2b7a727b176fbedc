"""Fixtures for route tests."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from coursegate.api.app import register_exception_handlers
from coursegate.api.dependencies import get_engine
from coursegate.api.routes import courses, enrollments, students
from coursegate.engine import EnrollmentEngine


@pytest.fixture
def app(engine: EnrollmentEngine) -> FastAPI:
    """Create a test FastAPI app backed by the in-memory engine."""
    app = FastAPI()

    # Override engine dependency
    def override_get_engine():
        yield engine

    app.dependency_overrides[get_engine] = override_get_engine

    register_exception_handlers(app)

    # Include routes
    app.include_router(courses.router, prefix="/api/v1")
    app.include_router(enrollments.router, prefix="/api/v1")
    app.include_router(students.router, prefix="/api/v1")

    return app


@pytest.fixture
def client(app: FastAPI):
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def course(engine: EnrollmentEngine):
    """A two-seat course."""
    return engine.catalog.create_course(
        title="Calculus", capacity=2, owner_id="prof-1", course_id="CALC"
    )
