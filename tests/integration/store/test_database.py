"""Integration tests for the record store database."""

import tempfile
from pathlib import Path

import pytest
from sqlalchemy import inspect, select, text
from sqlalchemy.exc import IntegrityError

from coopreg.store import CoopStore
from coopreg.store.database import Database
from coopreg.store.models import Child, Family

EXPECTED_TABLES = {
    "families",
    "guardians",
    "children",
    "sessions",
    "classrooms",
    "class_teaching_requests",
    "schedules",
    "schedule_drafts",
    "schedule_draft_entries",
    "schedule_comments",
    "volunteer_jobs",
    "session_volunteer_jobs",
    "class_registrations",
    "volunteer_assignments",
    "family_registration_status",
    "session_fee_configs",
    "family_session_fees",
    "fee_payments",
    "events",
}


@pytest.fixture
def temp_db_path() -> str:
    """Create a temporary database path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        return f.name


@pytest.fixture
def file_store(temp_db_path: str):
    """A CoopStore on a real SQLite file."""
    s = CoopStore(temp_db_path)
    yield s
    s.close()
    # Cleanup
    Path(temp_db_path).unlink(missing_ok=True)
    Path(f"{temp_db_path}-wal").unlink(missing_ok=True)
    Path(f"{temp_db_path}-shm").unlink(missing_ok=True)


def _smith_family(store: CoopStore) -> Family:
    return store.create_family(
        guardian_id="parent-1",
        guardian_email="pat@example.com",
        first_name="Pat",
        last_name="Smith",
        name="Smith",
        address="2 Elm St",
        phone="555-0101",
        email="smith@example.com",
        children=[{"first_name": "Ada", "last_name": "Smith"}],
    )


@pytest.mark.integration
class TestDatabaseSetup:
    """Tests for database setup."""

    def test_database_creates_file(self, temp_db_path: str) -> None:
        """SQLite file created at specified path."""
        db = Database(temp_db_path)
        db.create_tables()
        assert Path(temp_db_path).exists()
        db.close()

    def test_database_creates_tables(self, file_store: CoopStore) -> None:
        inspector = inspect(file_store.database.engine)
        assert set(inspector.get_table_names()) == EXPECTED_TABLES

    def test_database_wal_mode(self, file_store: CoopStore) -> None:
        assert file_store.database.is_wal_mode()

    def test_database_foreign_keys_enabled(self, file_store: CoopStore) -> None:
        with file_store.database.engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_data_survives_reopen(self, temp_db_path: str, file_store: CoopStore) -> None:
        family = _smith_family(file_store)
        file_store.close()

        reopened = CoopStore(temp_db_path)
        try:
            assert reopened.get_family(family.id).name == "Smith"
        finally:
            reopened.close()


@pytest.mark.integration
class TestTransactions:
    """Tests for transaction behavior."""

    def test_rollback_on_error(self, file_store: CoopStore) -> None:
        """Nothing from a failed transaction is applied."""
        family = _smith_family(file_store)

        with pytest.raises(RuntimeError), file_store.database.transaction() as session:
            session.add(Child(family_id=family.id, first_name="Ben", last_name="Smith"))
            session.flush()
            raise RuntimeError("abort")

        assert [c.first_name for c in file_store.list_children(family.id)] == ["Ada"]

    def test_sharing_code_unique(self, file_store: CoopStore) -> None:
        """Two families cannot share a sharing code."""
        family = _smith_family(file_store)

        with pytest.raises(IntegrityError), file_store.database.transaction() as session:
            session.add(
                Family(
                    name="Jones",
                    address="4 Ash St",
                    phone="555-0102",
                    email="jones@example.com",
                    sharing_code=family.sharing_code,
                )
            )
            session.flush()

    def test_deleting_family_cascades(self, file_store: CoopStore) -> None:
        family = _smith_family(file_store)

        with file_store.database.transaction() as session:
            session.delete(session.get(Family, family.id))

        with file_store.database.transaction() as session:
            assert session.execute(select(Child)).scalars().all() == []
