"""Unit tests for registration and session lookup routes."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from coopreg.api.dependencies import get_today


def _batch(session_id: str, registrations: list, volunteers: list | None = None, **extra) -> dict:
    return {
        "session_id": session_id,
        "registrations": registrations,
        "volunteer_assignments": volunteers or [],
        **extra,
    }


@pytest.mark.unit
class TestSessionLookup:
    """Tests for /api/v1/sessions."""

    def test_active_session(self, client: TestClient, coop_session, headers_for) -> None:
        response = client.get("/api/v1/sessions/active", headers=headers_for("parent-1"))

        assert response.status_code == 200
        assert response.json()["data"]["id"] == coop_session.id
        assert response.json()["data"]["registration_start_date"] == "2026-03-01"

    def test_no_active_session(self, client: TestClient, headers_for) -> None:
        response = client.get("/api/v1/sessions/active", headers=headers_for("parent-1"))

        assert response.status_code == 404

    def test_session_by_id(self, client: TestClient, coop_session, headers_for) -> None:
        response = client.get(f"/api/v1/sessions/{coop_session.id}", headers=headers_for("p"))

        assert response.json()["data"]["name"] == "Spring 2026"


@pytest.mark.unit
class TestAvailableClasses:
    """Tests for GET /api/v1/registration/{session_id}/schedules."""

    def test_lists_published_classes(
        self, client: TestClient, coop_session, make_class, headers_for
    ) -> None:
        make_class(name="Art", max_students=12, fee_amount=15.0, requires_fee=True)
        make_class(name="Drafty", period="second", publish=False)

        response = client.get(
            f"/api/v1/registration/{coop_session.id}/schedules", headers=headers_for("parent-1")
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert [c["class_name"] for c in data] == ["Art"]
        art = data[0]
        assert art["seats_available"] == 12
        assert art["teacher_name"] == "Tina Teach"


@pytest.mark.unit
class TestSubmitBatch:
    """Tests for POST /api/v1/registration/batch."""

    def test_commits_batch(
        self, client: TestClient, coop_session, family, children, make_class, headers_for
    ) -> None:
        art = make_class(name="Art")
        body = _batch(
            coop_session.id,
            [{"child_id": children[0].id, "schedule_id": art.id}],
            [{"guardian_id": "parent-1", "volunteer_type": "helper", "schedule_id": art.id}],
        )

        response = client.post(
            "/api/v1/registration/batch", json=body, headers=headers_for("parent-1")
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "completed"
        assert data["required_hours"] == 1
        assert data["fulfilled_hours"] == 1
        assert len(data["registration_ids"]) == 1
        assert len(data["assignment_ids"]) == 1

    def test_conflicts_reported(
        self, client: TestClient, coop_session, family, children, make_class, headers_for
    ) -> None:
        art = make_class(name="Art", max_students=1, helpers_needed=0)
        body = _batch(
            coop_session.id,
            [{"child_id": c.id, "schedule_id": art.id} for c in children[:2]],
            request_admin_override=True,
        )

        response = client.post(
            "/api/v1/registration/batch", json=body, headers=headers_for("parent-1")
        )

        assert response.status_code == 400
        conflicts = response.json()["data"]["conflicts"]
        assert [c["type"] for c in conflicts] == ["class_full"]
        assert conflicts[0]["child_id"] == children[1].id

    def test_volunteer_shortfall(
        self, client: TestClient, coop_session, family, children, make_class, headers_for
    ) -> None:
        art = make_class(name="Art")
        body = _batch(coop_session.id, [{"child_id": children[0].id, "schedule_id": art.id}])

        response = client.post(
            "/api/v1/registration/batch", json=body, headers=headers_for("parent-1")
        )

        assert response.status_code == 400
        assert response.json()["data"] == {"required_hours": 1, "fulfilled_hours": 0}

    def test_override_parks_batch(
        self, client: TestClient, coop_session, family, children, make_class, headers_for
    ) -> None:
        art = make_class(name="Art")
        body = _batch(
            coop_session.id,
            [{"child_id": children[0].id, "schedule_id": art.id}],
            request_admin_override=True,
        )

        first = client.post(
            "/api/v1/registration/batch", json=body, headers=headers_for("parent-1")
        )
        again = client.post(
            "/api/v1/registration/batch", json=body, headers=headers_for("parent-1")
        )

        assert first.status_code == 201
        assert first.json()["data"]["status"] == "admin_override"
        assert first.json()["data"]["pending_override"] is True
        assert again.status_code == 409

    def test_registration_closed(
        self, client: TestClient, app, coop_session, family, children, make_class, headers_for
    ) -> None:
        art = make_class(name="Art")
        app.dependency_overrides[get_today] = lambda: date(2026, 4, 2)
        body = _batch(coop_session.id, [{"child_id": children[0].id, "schedule_id": art.id}])

        response = client.post(
            "/api/v1/registration/batch", json=body, headers=headers_for("parent-1")
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Registration closed on 2026-03-31"

    def test_empty_batch(self, client: TestClient, coop_session, family, headers_for) -> None:
        response = client.post(
            "/api/v1/registration/batch",
            json=_batch(coop_session.id, []),
            headers=headers_for("parent-1"),
        )

        assert response.status_code == 400

    def test_bad_period_rejected(
        self, client: TestClient, coop_session, family, headers_for
    ) -> None:
        body = _batch(
            coop_session.id,
            [],
            [{"guardian_id": "parent-1", "volunteer_type": "volunteer_job", "period": "fifth"}],
        )

        response = client.post(
            "/api/v1/registration/batch", json=body, headers=headers_for("parent-1")
        )

        assert response.status_code == 422


@pytest.mark.unit
class TestRegistrationStatus:
    """Tests for GET /api/v1/registration/{session_id}/status."""

    def test_not_started(self, client: TestClient, coop_session, family, headers_for) -> None:
        response = client.get(
            f"/api/v1/registration/{coop_session.id}/status", headers=headers_for("parent-1")
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "not_started"
        assert data["registrations"] == []

    def test_after_submission(
        self, client: TestClient, coop_session, family, children, make_class, headers_for
    ) -> None:
        art = make_class(name="Art")
        client.post(
            "/api/v1/registration/batch",
            json=_batch(
                coop_session.id,
                [{"child_id": children[0].id, "schedule_id": art.id}],
                [{"guardian_id": "parent-1", "volunteer_type": "helper", "schedule_id": art.id}],
            ),
            headers=headers_for("parent-1"),
        )

        response = client.get(
            f"/api/v1/registration/{coop_session.id}/status", headers=headers_for("parent-1")
        )

        data = response.json()["data"]
        assert data["status"] == "completed"
        assert data["volunteer_requirements_met"] is True
        assert [r["period"] for r in data["registrations"]] == ["first"]
        assert [a["volunteer_type"] for a in data["assignments"]] == ["helper"]

    def test_unknown_session(self, client: TestClient, family, headers_for) -> None:
        response = client.get(
            "/api/v1/registration/missing/status", headers=headers_for("parent-1")
        )

        assert response.status_code == 404
