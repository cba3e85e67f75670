"""Shared pytest fixtures and configuration."""

from collections.abc import Callable
from datetime import date

import pytest

from coopreg.identity import AuthenticatedUser, Role
from coopreg.registration import RegistrationManager
from coopreg.scheduling import ScheduleManager, SlotAssignment
from coopreg.store import CoopSession, CoopStore, Family, Guardian, Schedule


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def today() -> date:
    """A date inside the test session's regular registration window."""
    return date(2026, 3, 10)


@pytest.fixture
def store():
    """Create an in-memory CoopStore."""
    s = CoopStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def coop_session(store: CoopStore) -> CoopSession:
    """An active session with registration open through March 2026."""
    return store.create_session(
        name="Spring 2026",
        start_date=date(2026, 4, 1),
        end_date=date(2026, 6, 30),
        registration_start_date=date(2026, 3, 1),
        registration_end_date=date(2026, 3, 31),
        teacher_registration_start_date=date(2026, 2, 15),
        is_active=True,
    )


@pytest.fixture
def classroom(store: CoopStore):
    """A classroom."""
    return store.create_classroom(name="Room A", description="Ground floor")


@pytest.fixture
def teacher(store: CoopStore) -> Guardian:
    """A guardian from another family who teaches classes."""
    store.create_family(
        guardian_id="teacher-1",
        guardian_email="tina@example.com",
        first_name="Tina",
        last_name="Teach",
        name="Teach",
        address="1 Oak St",
        phone="555-0100",
        email="teach@example.com",
    )
    return store.get_guardian("teacher-1")


@pytest.fixture
def family(store: CoopStore) -> Family:
    """A family of one guardian (parent-1) and three children."""
    return store.create_family(
        guardian_id="parent-1",
        guardian_email="pat@example.com",
        first_name="Pat",
        last_name="Smith",
        name="Smith",
        address="2 Elm St",
        phone="555-0101",
        email="smith@example.com",
        children=[
            {"first_name": "Ada", "last_name": "Smith", "grade": "3"},
            {"first_name": "Ben", "last_name": "Smith", "grade": "5"},
            {"first_name": "Cy", "last_name": "Smith", "grade": "K"},
        ],
    )


@pytest.fixture
def children(store: CoopStore, family: Family) -> list:
    """The family's children, ordered Ada, Ben, Cy."""
    return store.list_children(family.id)


@pytest.fixture
def admin() -> AuthenticatedUser:
    """An admin caller."""
    return AuthenticatedUser(user_id="admin-1", token="admin-token", role=Role.ADMIN)


@pytest.fixture
def moderator() -> AuthenticatedUser:
    """A moderator caller."""
    return AuthenticatedUser(user_id="mod-1", token="mod-token", role=Role.MODERATOR)


@pytest.fixture
def schedule_manager(store: CoopStore) -> ScheduleManager:
    """A ScheduleManager sharing the store's database."""
    return ScheduleManager(store.database)


@pytest.fixture
def registration_manager(store: CoopStore, today: date) -> RegistrationManager:
    """A RegistrationManager whose clock is fixed at the today fixture."""
    return RegistrationManager(store.database, today=lambda: today)


@pytest.fixture
def make_class(
    store: CoopStore,
    coop_session: CoopSession,
    teacher: Guardian,
    schedule_manager: ScheduleManager,
) -> Callable[..., Schedule]:
    """Factory placing an approved class in its own classroom, published by default."""

    def _make(
        name: str = "Art",
        period: str = "first",
        max_students: int = 20,
        helpers_needed: int = 1,
        requires_fee: bool = False,
        fee_amount: float | None = None,
        publish: bool = True,
    ) -> Schedule:
        room = store.create_classroom(name=f"{name} Room")
        request = store.create_teaching_request(
            session_id=coop_session.id,
            guardian_id=teacher.id,
            class_name=name,
            description=f"{name} for curious kids",
            grade_range="K-5",
            max_students=max_students,
            helpers_needed=helpers_needed,
            requires_fee=requires_fee,
            fee_amount=fee_amount,
        )
        store.review_teaching_request(request.id, reviewer_id="admin-1", status="approved")
        schedule = schedule_manager.place(
            coop_session.id,
            SlotAssignment(
                class_teaching_request_id=request.id, classroom_id=room.id, period=period
            ),
        )
        if publish:
            schedule_manager.publish(coop_session.id)
        return schedule

    return _make
