"""Integration test for a session from planning to paid registration."""

import tempfile
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from coopreg.api.app import create_app
from coopreg.api.dependencies import get_identity_client, get_today
from coopreg.config import Settings
from coopreg.identity import Role


@pytest.fixture
def temp_db_path() -> str:
    """Create a temporary database path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        return f.name


@pytest.fixture
def clock() -> dict[str, date]:
    """Mutable current date seen by the app."""
    return {"today": date(2026, 2, 20)}


@pytest.fixture
def identity() -> MagicMock:
    """Identity provider that knows admin-1 as an admin and everyone else as a member."""
    client = MagicMock()
    client.get_role.side_effect = lambda user_id, _token: (
        Role.ADMIN if user_id == "admin-1" else Role.MEMBER
    )
    return client


@pytest.fixture
def client(temp_db_path: str, clock: dict[str, date], identity: MagicMock):
    """Create a test client with a temporary database."""
    app = create_app(temp_db_path, settings=Settings())

    def override_get_identity_client():
        yield identity

    app.dependency_overrides[get_identity_client] = override_get_identity_client
    app.dependency_overrides[get_today] = lambda: clock["today"]

    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
    # Cleanup
    Path(temp_db_path).unlink(missing_ok=True)
    Path(f"{temp_db_path}-wal").unlink(missing_ok=True)
    Path(f"{temp_db_path}-shm").unlink(missing_ok=True)


def _as(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {user_id}-token", "X-User-Id": user_id}


def _family(name: str, guardian_first: str, children: list[str]) -> dict:
    return {
        "family": {
            "name": name,
            "address": "1 Main St",
            "phone": "555-0100",
            "email": f"{name.lower()}@example.com",
        },
        "guardian": {
            "first_name": guardian_first,
            "last_name": name,
            "email": f"{guardian_first.lower()}@example.com",
        },
        "children": [{"first_name": c, "last_name": name} for c in children],
    }


@pytest.mark.integration
class TestRegistrationFlow:
    """Planning, registration and payment through the public API."""

    def test_full_flow(self, client: TestClient, clock: dict[str, date]) -> None:
        admin = _as("admin-1")

        # 1. Admin opens a session with fees
        created = client.post(
            "/api/v1/admin/sessions",
            json={
                "name": "Spring 2026",
                "start_date": "2026-04-01",
                "end_date": "2026-06-30",
                "registration_start_date": "2026-03-01",
                "registration_end_date": "2026-03-31",
                "teacher_registration_start_date": "2026-02-15",
                "is_active": True,
            },
            headers=admin,
        )
        assert created.status_code == 201
        session_id = created.json()["data"]["id"]

        fees = client.put(
            f"/api/v1/admin/sessions/{session_id}/fees",
            json={"first_child_fee": 50, "additional_child_fee": 25, "due_date": "2026-04-15"},
            headers=admin,
        )
        assert fees.status_code == 200

        room = client.post("/api/v1/admin/classrooms", json={"name": "Room A"}, headers=admin)
        room_id = room.json()["data"]["id"]

        # 2. A teacher's family proposes a class before registration opens
        teacher = _as("teacher-1")
        assert client.post(
            "/api/v1/family", json=_family("Teach", "Tina", []), headers=teacher
        ).status_code == 201
        proposal = client.post(
            "/api/v1/class-teaching-requests",
            json={
                "class_name": "Pottery",
                "description": "Wheel and glaze",
                "grade_range": "2-6",
                "max_students": 8,
                "requires_fee": True,
                "fee_amount": 30,
            },
            headers=teacher,
        )
        assert proposal.status_code == 201
        request_id = proposal.json()["data"]["id"]

        # 3. Admin approves, schedules and publishes it
        approved = client.patch(
            f"/api/v1/admin/class-teaching-requests/{request_id}",
            json={"status": "approved"},
            headers=admin,
        )
        assert approved.json()["data"]["status"] == "approved"

        placed = client.post(
            f"/api/v1/admin/schedule/{session_id}",
            json={
                "class_teaching_request_id": request_id,
                "classroom_id": room_id,
                "period": "first",
            },
            headers=admin,
        )
        assert placed.status_code == 201
        schedule_id = placed.json()["data"]["id"]

        published = client.post(f"/api/v1/admin/schedule/{session_id}/publish", headers=admin)
        assert published.json()["data"]["updated"] == 1

        # 4. A parent registers once the window opens
        clock["today"] = date(2026, 3, 10)
        parent = _as("parent-1")
        family = client.post(
            "/api/v1/family", json=_family("Smith", "Pat", ["Ada", "Ben"]), headers=parent
        )
        assert family.status_code == 201
        child_ids = [c["id"] for c in family.json()["data"]["children"]]

        helper = {"guardian_id": "parent-1", "volunteer_type": "helper", "schedule_id": schedule_id}
        batch = client.post(
            "/api/v1/registration/batch",
            json={
                "session_id": session_id,
                "registrations": [{"child_id": c, "schedule_id": schedule_id} for c in child_ids],
                "volunteer_assignments": [helper],
            },
            headers=parent,
        )
        assert batch.status_code == 201
        assert batch.json()["data"]["status"] == "completed"

        seats = client.get(f"/api/v1/registration/{session_id}/schedules", headers=parent)
        assert seats.json()["data"][0]["seats_available"] == 6
        assert seats.json()["data"][0]["helper_spots_available"] == 0

        # 5. The family sees its fee and an admin records payment
        fee = client.get("/api/v1/family/fees", headers=parent).json()["data"][0]
        assert fee["registration_fee"] == 75.0
        assert fee["class_fees"] == 60.0
        assert fee["total_fee"] == 135.0
        assert fee["status"] == "pending"

        payment = client.post(
            "/api/v1/admin/payments",
            json={
                "family_id": family.json()["data"]["id"],
                "session_id": session_id,
                "amount": 135,
                "payment_method": "online",
            },
            headers=admin,
        )
        assert payment.status_code == 201

        fee = client.get("/api/v1/family/fees", headers=parent).json()["data"][0]
        assert fee["status"] == "paid"
        assert fee["remaining_amount"] == 0.0

        status = client.get(f"/api/v1/registration/{session_id}/status", headers=parent)
        assert status.json()["data"]["status"] == "completed"

    def test_member_cannot_use_admin_routes(self, client: TestClient) -> None:
        response = client.get("/api/v1/admin/sessions", headers=_as("parent-1"))

        assert response.status_code == 403
