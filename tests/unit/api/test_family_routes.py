"""Unit tests for family routes."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from coopreg.api.dependencies import get_today
from coopreg.registration import ClassRequest, RegistrationRequest, VolunteerRequest
from coopreg.store import CoopStore, Family

FAMILY_BODY = {
    "family": {
        "name": "Garcia",
        "address": "3 Pine St",
        "phone": "555-0199",
        "email": "garcia@example.com",
    },
    "guardian": {"first_name": "Gil", "last_name": "Garcia", "email": "gil@example.com"},
    "children": [{"first_name": "Lu", "last_name": "Garcia", "grade": "2"}],
}


@pytest.mark.unit
class TestRegisterFamily:
    """Tests for POST /api/v1/family."""

    def test_register_family(self, client: TestClient, headers_for) -> None:
        response = client.post("/api/v1/family", json=FAMILY_BODY, headers=headers_for("gil"))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "Garcia"
        assert len(data["sharing_code"]) == 6
        assert data["guardians"][0]["id"] == "gil"
        assert data["guardians"][0]["is_main_contact"] is True
        assert [c["first_name"] for c in data["children"]] == ["Lu"]
        assert response.json()["error"] is None

    def test_register_twice_conflicts(self, client: TestClient, headers_for) -> None:
        client.post("/api/v1/family", json=FAMILY_BODY, headers=headers_for("gil"))

        response = client.post("/api/v1/family", json=FAMILY_BODY, headers=headers_for("gil"))

        assert response.status_code == 409

    def test_missing_token(self, client: TestClient) -> None:
        response = client.post("/api/v1/family", json=FAMILY_BODY, headers={"X-User-Id": "gil"})

        assert response.status_code == 401
        assert response.json()["error"] == "Missing bearer token"

    def test_missing_user_id(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/family", json=FAMILY_BODY, headers={"Authorization": "Bearer t"}
        )

        assert response.status_code == 401

    def test_invalid_body(self, client: TestClient, headers_for) -> None:
        body = {**FAMILY_BODY, "family": {**FAMILY_BODY["family"], "name": ""}}

        response = client.post("/api/v1/family", json=body, headers=headers_for("gil"))

        assert response.status_code == 422
        assert response.json()["data"] is None
        assert response.json()["error"].startswith("family.name")


@pytest.mark.unit
class TestJoinFamily:
    """Tests for POST /api/v1/family/join."""

    def test_join_with_code(self, client: TestClient, family: Family, headers_for) -> None:
        response = client.post(
            "/api/v1/family/join",
            json={
                "sharing_code": family.sharing_code.lower(),
                "guardian": {"first_name": "Sam", "last_name": "Smith", "email": "sam@x.org"},
            },
            headers=headers_for("parent-2"),
        )

        assert response.status_code == 200
        guardians = response.json()["data"]["guardians"]
        assert [g["id"] for g in guardians] == ["parent-1", "parent-2"]

    def test_unknown_code(self, client: TestClient, headers_for) -> None:
        response = client.post(
            "/api/v1/family/join",
            json={
                "sharing_code": "ZZZZZZ",
                "guardian": {"first_name": "Sam", "last_name": "Smith", "email": "sam@x.org"},
            },
            headers=headers_for("parent-2"),
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Family not found"


@pytest.mark.unit
class TestOwnFamily:
    """Tests for reading and editing the caller's family."""

    def test_get_family(self, client: TestClient, family: Family, headers_for) -> None:
        response = client.get("/api/v1/family", headers=headers_for("parent-1"))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == family.id
        assert [c["first_name"] for c in data["children"]] == ["Ada", "Ben", "Cy"]

    def test_no_family_yet(self, client: TestClient, headers_for) -> None:
        response = client.get("/api/v1/family", headers=headers_for("stranger"))

        assert response.status_code == 404

    def test_update_family(self, client: TestClient, family: Family, headers_for) -> None:
        response = client.patch(
            "/api/v1/family", json={"phone": "555-9999"}, headers=headers_for("parent-1")
        )

        assert response.status_code == 200
        assert response.json()["data"]["phone"] == "555-9999"
        assert response.json()["data"]["address"] == "2 Elm St"


@pytest.mark.unit
class TestChildren:
    """Tests for the caller's children."""

    def test_add_child(
        self, client: TestClient, store: CoopStore, family: Family, headers_for
    ) -> None:
        response = client.post(
            "/api/v1/family/children",
            json={"first_name": "Di", "last_name": "Smith", "allergies": "peanuts"},
            headers=headers_for("parent-1"),
        )

        assert response.status_code == 201
        assert response.json()["data"]["allergies"] == "peanuts"
        assert len(store.list_children(family.id)) == 4

    def test_update_child(self, client: TestClient, children, headers_for) -> None:
        response = client.patch(
            f"/api/v1/family/children/{children[0].id}",
            json={"grade": "4"},
            headers=headers_for("parent-1"),
        )

        assert response.status_code == 200
        assert response.json()["data"]["grade"] == "4"
        assert response.json()["data"]["first_name"] == "Ada"

    def test_delete_child(
        self, client: TestClient, store: CoopStore, family: Family, children, headers_for
    ) -> None:
        response = client.delete(
            f"/api/v1/family/children/{children[2].id}", headers=headers_for("parent-1")
        )

        assert response.status_code == 204
        assert [c.first_name for c in store.list_children(family.id)] == ["Ada", "Ben"]

    def test_cannot_touch_other_familys_child(
        self, client: TestClient, teacher, children, headers_for
    ) -> None:
        response = client.delete(
            f"/api/v1/family/children/{children[0].id}", headers=headers_for("teacher-1")
        )

        assert response.status_code == 404

    def test_list_children(self, client: TestClient, children, headers_for) -> None:
        response = client.get("/api/v1/family/children", headers=headers_for("parent-1"))

        assert [c["first_name"] for c in response.json()["data"]] == ["Ada", "Ben", "Cy"]


@pytest.mark.unit
class TestFamilyFeesAndPayments:
    """Tests for the caller's fees and payments."""

    def test_empty_lists(self, client: TestClient, family: Family, headers_for) -> None:
        fees = client.get("/api/v1/family/fees", headers=headers_for("parent-1"))
        payments = client.get("/api/v1/family/payments", headers=headers_for("parent-1"))

        assert fees.json()["data"] == []
        assert payments.json()["data"] == []

    def test_fee_balance_and_overdue(
        self,
        client: TestClient,
        app,
        store: CoopStore,
        coop_session,
        children,
        make_class,
        registration_manager,
        headers_for,
    ) -> None:
        """The fee list reports what is still owed and whether it is past due."""
        store.upsert_fee_config(
            coop_session.id, first_child_fee=50, additional_child_fee=25, due_date=date(2026, 4, 15)
        )
        art = make_class()
        registration_manager.submit(
            RegistrationRequest(
                session_id=coop_session.id,
                submitted_by="parent-1",
                classes=[ClassRequest(child_id=children[0].id, schedule_id=art.id)],
                volunteers=[
                    VolunteerRequest(
                        guardian_id="parent-1", volunteer_type="helper", schedule_id=art.id
                    )
                ],
            )
        )

        before = client.get("/api/v1/family/fees", headers=headers_for("parent-1"))
        app.dependency_overrides[get_today] = lambda: date(2026, 5, 1)
        after = client.get("/api/v1/family/fees", headers=headers_for("parent-1"))

        fee = before.json()["data"][0]
        assert fee["remaining_amount"] == 50.0
        assert fee["is_overdue"] is False
        assert after.json()["data"][0]["is_overdue"] is True
