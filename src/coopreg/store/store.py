"""CoopStore - Main API for record store operations."""

from __future__ import annotations

from coopreg.store.classes import ClassOperations
from coopreg.store.database import Database
from coopreg.store.events import EventOperations
from coopreg.store.families import FamilyOperations
from coopreg.store.fees import FeeOperations
from coopreg.store.registrations import RegistrationQueries
from coopreg.store.sessions import SessionOperations


class CoopStore(
    FamilyOperations,
    SessionOperations,
    ClassOperations,
    FeeOperations,
    EventOperations,
    RegistrationQueries,
):
    """Main API for record store operations.

    Provides CRUD operations for families, sessions, classrooms, class
    teaching requests, volunteer jobs, schedule comments, events, fees and
    payments. Every call runs in its own database session; multi-row writes
    are a single transaction.
    """

    def __init__(self, db_path: str = "coopreg.db") -> None:
        """Initialize the store with a SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
        """
        self._db = Database(db_path)
        self._db.create_tables()

    @property
    def database(self) -> Database:
        """The underlying database, shared with the workflow managers."""
        return self._db

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()
