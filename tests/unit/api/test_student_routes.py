"""Unit tests for student routes."""

import pytest
from fastapi.testclient import TestClient

from coursegate.engine import EnrollmentEngine


@pytest.mark.unit
class TestMyEnrollments:
    """Tests for GET /students/{id}/enrollments."""

    def test_list_with_course(self, client: TestClient, engine: EnrollmentEngine, course) -> None:
        """Each entry carries the enrollment and its course."""
        engine.ledger.enroll("s1", "CALC")

        response = client.get("/api/v1/students/s1/enrollments")

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["enrollment"]["status"] == "active"
        assert data[0]["course"]["title"] == "Calculus"

    def test_status_filter(self, client: TestClient, engine: EnrollmentEngine, course) -> None:
        engine.ledger.enroll("s1", "CALC")
        engine.ledger.drop("s1", "CALC")

        active = client.get("/api/v1/students/s1/enrollments?status=active").json()["data"]
        dropped = client.get("/api/v1/students/s1/enrollments?status=dropped").json()["data"]

        assert active == []
        assert len(dropped) == 1

    def test_invalid_status(self, client: TestClient) -> None:
        response = client.get("/api/v1/students/s1/enrollments?status=bogus")

        assert response.status_code == 422


@pytest.mark.unit
class TestEligibilityRoute:
    """Tests for GET /students/{id}/eligibility/{course_id}."""

    def test_eligible(self, client: TestClient, course) -> None:
        data = client.get("/api/v1/students/s1/eligibility/CALC").json()["data"]

        assert data == {"can_enroll": True, "reasons": [], "missing_prerequisites": []}

    def test_not_eligible(self, client: TestClient, engine: EnrollmentEngine, course) -> None:
        """Reasons use their human-readable text."""
        engine.catalog.create_course(title="Algebra", capacity=3, owner_id="p", course_id="ALG")
        engine.prerequisites.set_prerequisites("CALC", ["ALG"])

        data = client.get("/api/v1/students/s1/eligibility/CALC").json()["data"]

        assert data["can_enroll"] is False
        assert data["reasons"] == ["missing prerequisites"]
        assert data["missing_prerequisites"] == [{"id": "ALG", "title": "Algebra"}]

    def test_closed(self, client: TestClient, engine: EnrollmentEngine, course) -> None:
        engine.catalog.close_enrollment("CALC")

        data = client.get("/api/v1/students/s1/eligibility/CALC").json()["data"]

        assert data["reasons"] == ["course is closed"]

    def test_unknown_course(self, client: TestClient) -> None:
        assert client.get("/api/v1/students/s1/eligibility/missing").status_code == 404


@pytest.mark.unit
class TestStatisticsRoute:
    """Tests for GET /students/{id}/statistics."""

    def test_statistics(self, client: TestClient, engine: EnrollmentEngine, course) -> None:
        engine.ledger.enroll("s1", "CALC")

        data = client.get("/api/v1/students/s1/statistics").json()["data"]

        assert data["student_id"] == "s1"
        assert data["active_courses"] == 1
        assert data["completed_courses"] == 0
        assert data["total_enrollments"] == 1

    def test_unknown_student(self, client: TestClient) -> None:
        data = client.get("/api/v1/students/nobody/statistics").json()["data"]

        assert data["total_enrollments"] == 0
