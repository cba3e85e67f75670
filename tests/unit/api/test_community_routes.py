"""Unit tests for the calendar, schedule comment and volunteer job listing routes."""

from datetime import date
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from coopreg.identity import Role
from coopreg.store import CoopStore


@pytest.fixture
def approved_teacher(store: CoopStore, coop_session, teacher):
    """teacher-1 with an approved class proposal."""
    request = store.create_teaching_request(
        session_id=coop_session.id,
        guardian_id=teacher.id,
        class_name="Art",
        description="Paint and clay",
        grade_range="K-5",
    )
    store.review_teaching_request(request.id, reviewer_id="admin-1", status="approved")
    return teacher


@pytest.mark.unit
class TestCalendar:
    """Tests for GET /api/v1/events."""

    def test_public_events_and_session_dates(
        self, client: TestClient, store: CoopStore, identity: MagicMock, coop_session, headers_for
    ) -> None:
        identity.get_role.return_value = Role.USER
        store.create_event("Picnic", date(2026, 7, 4), created_by="admin-1")
        store.create_event("Board meeting", date(2026, 7, 1), created_by="admin-1", is_public=False)

        response = client.get("/api/v1/events", headers=headers_for("parent-1"))

        assert response.status_code == 200
        entries = response.json()["data"]
        assert entries[0]["title"] == "Picnic"
        assert "Board meeting" not in [e["title"] for e in entries]
        assert f"registration-{coop_session.id}" in [e["id"] for e in entries]

    def test_requires_sign_in(self, client: TestClient) -> None:
        assert client.get("/api/v1/events").status_code == 401


@pytest.mark.unit
class TestScheduleComments:
    """Tests for /api/v1/teaching/schedule/{session_id}/comments."""

    def test_teacher_posts_and_reads(
        self, client: TestClient, identity: MagicMock, coop_session, approved_teacher, headers_for
    ) -> None:
        identity.get_role.return_value = Role.MEMBER
        path = f"/api/v1/teaching/schedule/{coop_session.id}/comments"

        posted = client.post(
            path, json={"comment": "Art needs a sink"}, headers=headers_for("teacher-1")
        )
        listed = client.get(path, headers=headers_for("teacher-1"))

        assert posted.status_code == 201
        assert posted.json()["data"]["author_name"] == "Tina Teach"
        assert posted.json()["data"]["is_public"] is False
        assert [c["comment"] for c in listed.json()["data"]] == ["Art needs a sink"]

    def test_non_teacher_denied(
        self, client: TestClient, identity: MagicMock, coop_session, family, headers_for
    ) -> None:
        identity.get_role.return_value = Role.MEMBER

        response = client.get(
            f"/api/v1/teaching/schedule/{coop_session.id}/comments",
            headers=headers_for("parent-1"),
        )

        assert response.status_code == 403
        assert "approved teachers" in response.json()["error"]

    def test_private_comments_hidden_from_other_teachers(
        self,
        client: TestClient,
        store: CoopStore,
        identity: MagicMock,
        coop_session,
        approved_teacher,
        family,
        headers_for,
    ) -> None:
        identity.get_role.return_value = Role.MEMBER
        request = store.create_teaching_request(
            session_id=coop_session.id,
            guardian_id="parent-1",
            class_name="Chess",
            description="Openings",
            grade_range="3-6",
        )
        store.review_teaching_request(request.id, reviewer_id="admin-1", status="approved")
        path = f"/api/v1/teaching/schedule/{coop_session.id}/comments"
        client.post(path, json={"comment": "Private note"}, headers=headers_for("teacher-1"))
        client.post(
            path,
            json={"comment": "Public note", "is_public": True},
            headers=headers_for("teacher-1"),
        )

        as_other_teacher = client.get(path, headers=headers_for("parent-1"))
        identity.get_role.return_value = Role.MODERATOR
        as_moderator = client.get(path, headers=headers_for("mod-1"))

        assert [c["comment"] for c in as_other_teacher.json()["data"]] == ["Public note"]
        assert {c["comment"] for c in as_moderator.json()["data"]} == {
            "Private note",
            "Public note",
        }

    def test_blank_comment_rejected(
        self, client: TestClient, coop_session, approved_teacher, headers_for
    ) -> None:
        response = client.post(
            f"/api/v1/teaching/schedule/{coop_session.id}/comments",
            json={"comment": "   "},
            headers=headers_for("teacher-1"),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Comment is required"


@pytest.mark.unit
class TestAvailableVolunteerJobs:
    """Tests for GET /api/v1/registration/{session_id}/volunteer-jobs."""

    def test_lists_session_offers(
        self, client: TestClient, store: CoopStore, coop_session, family, headers_for
    ) -> None:
        store.create_volunteer_job(title="Cleanup", description="Sweep", created_by="a")
        store.create_volunteer_job(
            title="Setup",
            description="Chairs",
            created_by="a",
            quantity_available=4,
            session_id=coop_session.id,
        )

        response = client.get(
            f"/api/v1/registration/{coop_session.id}/volunteer-jobs",
            headers=headers_for("parent-1"),
        )

        assert response.status_code == 200
        assert [(j["title"], j["quantity_available"]) for j in response.json()["data"]] == [
            ("Setup", 4)
        ]

    def test_falls_back_to_active_jobs(
        self, client: TestClient, store: CoopStore, coop_session, family, headers_for
    ) -> None:
        store.create_volunteer_job(title="Cleanup", description="Sweep", created_by="a")

        response = client.get(
            f"/api/v1/registration/{coop_session.id}/volunteer-jobs",
            headers=headers_for("parent-1"),
        )

        assert [j["title"] for j in response.json()["data"]] == ["Cleanup"]
