"""Co-op event operations for the record store."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date  # noqa: TC003 - used at runtime in signatures
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from coopreg.logging import get_logger
from coopreg.store.exceptions import EventNotFoundError, SessionNotFoundError, ValidationError
from coopreg.store.models import CoopSession, Event, EventType

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from coopreg.store.database import Database

logger = get_logger("store")

_TIME = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")

_EVENT_FIELDS = (
    "title",
    "description",
    "start_date",
    "end_date",
    "start_time",
    "end_time",
    "is_all_day",
    "event_type",
    "session_id",
    "location",
    "color",
    "is_public",
)

SESSION_COLOR = "#10b981"
PAST_SESSION_COLOR = "#6b7280"
REGISTRATION_COLOR = "#f59e0b"
TEACHER_REGISTRATION_COLOR = "#8b5cf6"


@dataclass(frozen=True)
class CalendarEntry:
    """One dated item on the co-op calendar.

    Stored events keep their own id; entries derived from a session's dates
    use ids like ``registration-<session id>`` and have no creator.
    """

    id: str
    title: str
    start_date: date
    event_type: str
    color: str
    end_date: date | None = None
    description: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    is_all_day: bool = True
    session_id: str | None = None
    location: str | None = None
    created_by: str | None = None

    @classmethod
    def from_event(cls, event: Event) -> CalendarEntry:
        return cls(
            id=event.id,
            title=event.title,
            start_date=event.start_date,
            end_date=event.end_date,
            event_type=event.event_type,
            color=event.color,
            description=event.description,
            start_time=event.start_time,
            end_time=event.end_time,
            is_all_day=event.is_all_day,
            session_id=event.session_id,
            location=event.location,
            created_by=event.created_by,
        )


def session_entries(coop_session: CoopSession) -> list[CalendarEntry]:
    """Calendar entries for a session's term, registration and early registration windows."""
    name = coop_session.name
    entries = [
        CalendarEntry(
            id=f"session-{coop_session.id}",
            title=f"{name} Session",
            description=f"{name} session period",
            start_date=coop_session.start_date,
            end_date=coop_session.end_date,
            event_type=EventType.SESSION.value,
            session_id=coop_session.id,
            color=SESSION_COLOR if coop_session.is_active else PAST_SESSION_COLOR,
        ),
        CalendarEntry(
            id=f"registration-{coop_session.id}",
            title=f"{name} Registration",
            description=f"Registration period for {name}",
            start_date=coop_session.registration_start_date,
            end_date=coop_session.registration_end_date,
            event_type=EventType.REGISTRATION.value,
            session_id=coop_session.id,
            color=REGISTRATION_COLOR,
        ),
    ]
    if coop_session.teacher_registration_start_date is not None:
        entries.append(
            CalendarEntry(
                id=f"teacher-registration-{coop_session.id}",
                title=f"{name} Teacher Registration",
                description=f"Early registration period for teachers for {name}",
                start_date=coop_session.teacher_registration_start_date,
                end_date=coop_session.registration_start_date,
                event_type=EventType.REGISTRATION.value,
                session_id=coop_session.id,
                color=TEACHER_REGISTRATION_COLOR,
            )
        )
    return entries


def validate_event(event: Event) -> None:
    """Check an event's dates, times, type and color.

    Raises:
        ValidationError: If any field is malformed or the range is out of order
    """
    if not event.title or not event.title.strip():
        raise ValidationError("Title and start date are required")
    if event.end_date is not None and event.end_date < event.start_date:
        raise ValidationError("Event end date must not be before its start date")
    for value in (event.start_time, event.end_time):
        if value is not None and not _TIME.match(value):
            raise ValidationError(f"Invalid time '{value}', expected HH:MM")
    if (
        event.start_time is not None
        and event.end_time is not None
        and (event.end_date is None or event.end_date == event.start_date)
        and event.end_time < event.start_time
    ):
        raise ValidationError("Event end time must not be before its start time")
    try:
        EventType(event.event_type)
    except ValueError as e:
        raise ValidationError(f"Invalid event type '{event.event_type}'") from e
    if not _COLOR.match(event.color):
        raise ValidationError(f"Invalid color '{event.color}', expected #RRGGBB")


def _require_session(session: Session, session_id: str | None) -> None:
    if session_id is not None and session.get(CoopSession, session_id) is None:
        raise SessionNotFoundError(f"Session with id '{session_id}' not found")


class EventOperations:
    """Event operations mixed into CoopStore."""

    _db: Database

    def create_event(self, title: str, start_date: date, created_by: str, **fields: Any) -> Event:
        """Create an event.

        Raises:
            ValidationError: If a field is malformed
            SessionNotFoundError: If session_id names no session
        """
        event = Event(title=title, start_date=start_date, created_by=created_by, **fields)
        validate_event(event)

        with self._db.transaction() as session:
            _require_session(session, event.session_id)
            session.add(event)
            session.flush()
            session.refresh(event)

        logger.info("Created event %s (%s on %s)", event.id, title, start_date)
        return event

    def get_event(self, event_id: str) -> Event:
        """Get event by ID.

        Raises:
            EventNotFoundError: If event doesn't exist
        """
        session = self._db.get_session()
        try:
            event = session.get(Event, event_id)
            if event is None:
                raise EventNotFoundError(f"Event with id '{event_id}' not found")
            return event
        finally:
            session.close()

    def list_events(self, public_only: bool = False, session_id: str | None = None) -> list[Event]:
        """List events, latest start date first."""
        session = self._db.get_session()
        try:
            stmt = select(Event)
            if public_only:
                stmt = stmt.where(Event.is_public.is_(True))
            if session_id is not None:
                stmt = stmt.where(Event.session_id == session_id)
            stmt = stmt.order_by(Event.start_date.desc(), Event.title)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def update_event(self, event_id: str, **fields: Any) -> Event:
        """Update event fields. Only provided, non-None fields are updated.

        Raises:
            EventNotFoundError: If event doesn't exist
            ValidationError: If the resulting event is malformed
            SessionNotFoundError: If session_id names no session
        """
        with self._db.transaction() as session:
            event = session.get(Event, event_id)
            if event is None:
                raise EventNotFoundError(f"Event with id '{event_id}' not found")

            for key in _EVENT_FIELDS:
                if fields.get(key) is not None:
                    setattr(event, key, fields[key])
            validate_event(event)
            _require_session(session, event.session_id)

            session.flush()
            session.refresh(event)
            return event

    def delete_event(self, event_id: str) -> None:
        """Delete an event.

        Raises:
            EventNotFoundError: If event doesn't exist
        """
        session = self._db.get_session()
        try:
            event = session.get(Event, event_id)
            if event is None:
                raise EventNotFoundError(f"Event with id '{event_id}' not found")
            session.delete(event)
            session.commit()
        finally:
            session.close()

        logger.info("Deleted event %s", event_id)

    def list_calendar(self) -> list[CalendarEntry]:
        """Public events plus every session's dates, latest start date first."""
        session = self._db.get_session()
        try:
            events = session.execute(select(Event).where(Event.is_public.is_(True))).scalars()
            entries = [CalendarEntry.from_event(e) for e in events]
            for coop_session in session.execute(select(CoopSession)).scalars():
                entries.extend(session_entries(coop_session))
        finally:
            session.close()

        return sorted(entries, key=lambda e: e.start_date, reverse=True)
