"""Unit tests for class teaching request and volunteer job operations."""

from datetime import date

import pytest

from coopreg.store import (
    CoopSession,
    CoopStore,
    Guardian,
    GuardianNotFoundError,
    RequestStatus,
    SessionNotFoundError,
    TeachingRequestNotFoundError,
    ValidationError,
    VolunteerJobNotFoundError,
)


def _request(store: CoopStore, session_id: str, guardian_id: str, **overrides):
    fields = {
        "class_name": "Chemistry",
        "description": "Kitchen chemistry",
        "grade_range": "3-6",
    }
    fields.update(overrides)
    return store.create_teaching_request(session_id=session_id, guardian_id=guardian_id, **fields)


@pytest.mark.unit
class TestCreateTeachingRequest:
    """Tests for create_teaching_request."""

    def test_new_request_is_pending(
        self, store: CoopStore, coop_session: CoopSession, teacher: Guardian
    ) -> None:
        request = _request(store, coop_session.id, teacher.id)

        assert request.status == RequestStatus.PENDING
        assert request.max_students == 20
        assert request.helpers_needed == 1
        assert request.reviewed_by is None

    def test_fee_dropped_when_not_required(
        self, store: CoopStore, coop_session: CoopSession, teacher: Guardian
    ) -> None:
        request = _request(store, coop_session.id, teacher.id, fee_amount=25.0)

        assert request.fee_amount is None
        assert request.effective_fee == 0.0

    def test_fee_kept_when_required(
        self, store: CoopStore, coop_session: CoopSession, teacher: Guardian
    ) -> None:
        request = _request(
            store, coop_session.id, teacher.id, requires_fee=True, fee_amount=25.0
        )

        assert request.effective_fee == 25.0

    @pytest.mark.parametrize("max_students", [0, 101])
    def test_max_students_out_of_range(
        self, store: CoopStore, coop_session: CoopSession, teacher: Guardian, max_students: int
    ) -> None:
        with pytest.raises(ValidationError):
            _request(store, coop_session.id, teacher.id, max_students=max_students)

    def test_negative_helpers_rejected(
        self, store: CoopStore, coop_session: CoopSession, teacher: Guardian
    ) -> None:
        with pytest.raises(ValidationError):
            _request(store, coop_session.id, teacher.id, helpers_needed=-1)

    def test_unknown_session(self, store: CoopStore, teacher: Guardian) -> None:
        with pytest.raises(SessionNotFoundError):
            _request(store, "missing", teacher.id)

    def test_unknown_guardian(self, store: CoopStore, coop_session: CoopSession) -> None:
        with pytest.raises(GuardianNotFoundError):
            _request(store, coop_session.id, "nobody")


@pytest.mark.unit
class TestProposeClass:
    """Class proposals are accepted only before registration opens."""

    def test_propose_before_registration(
        self, store: CoopStore, coop_session: CoopSession, teacher: Guardian
    ) -> None:
        request = store.propose_class(
            teacher.id,
            date(2026, 2, 20),
            class_name="Chess",
            description="Openings",
            grade_range="4-8",
        )

        assert request.session_id == coop_session.id
        assert request.guardian_id == teacher.id

    def test_propose_after_registration_opened(
        self, store: CoopStore, coop_session: CoopSession, teacher: Guardian
    ) -> None:
        with pytest.raises(ValidationError):
            store.propose_class(
                teacher.id,
                date(2026, 3, 1),
                class_name="Chess",
                description="Openings",
                grade_range="4-8",
            )

    def test_propose_without_active_session(self, store: CoopStore, teacher: Guardian) -> None:
        with pytest.raises(ValidationError):
            store.propose_class(
                teacher.id,
                date(2026, 2, 20),
                class_name="Chess",
                description="Openings",
                grade_range="4-8",
            )


@pytest.mark.unit
class TestReviewTeachingRequest:
    """Tests for listing, updating and reviewing requests."""

    def test_approve(
        self, store: CoopStore, coop_session: CoopSession, teacher: Guardian
    ) -> None:
        request = _request(store, coop_session.id, teacher.id)

        reviewed = store.review_teaching_request(
            request.id, reviewer_id="admin-1", status="approved", notes="Looks great"
        )

        assert reviewed.status == RequestStatus.APPROVED
        assert reviewed.reviewed_by == "admin-1"
        assert reviewed.reviewed_at is not None
        assert reviewed.review_notes == "Looks great"

    def test_review_back_to_pending_rejected(
        self, store: CoopStore, coop_session: CoopSession, teacher: Guardian
    ) -> None:
        request = _request(store, coop_session.id, teacher.id)

        with pytest.raises(ValidationError):
            store.review_teaching_request(request.id, reviewer_id="admin-1", status="pending")

    def test_review_unknown_status_rejected(
        self, store: CoopStore, coop_session: CoopSession, teacher: Guardian
    ) -> None:
        request = _request(store, coop_session.id, teacher.id)

        with pytest.raises(ValidationError):
            store.review_teaching_request(request.id, reviewer_id="admin-1", status="maybe")

    def test_review_missing_request(self, store: CoopStore) -> None:
        with pytest.raises(TeachingRequestNotFoundError):
            store.review_teaching_request("missing", reviewer_id="admin-1", status="approved")

    def test_list_with_filters(
        self, store: CoopStore, coop_session: CoopSession, teacher: Guardian, family
    ) -> None:
        first = _request(store, coop_session.id, teacher.id, class_name="Art")
        _request(store, coop_session.id, "parent-1", class_name="Music")
        store.review_teaching_request(first.id, reviewer_id="admin-1", status="approved")

        assert len(store.list_teaching_requests(session_id=coop_session.id)) == 2
        mine = store.list_teaching_requests(guardian_id=teacher.id)
        assert [r.class_name for r in mine] == ["Art"]
        approved = store.list_teaching_requests(status=RequestStatus.APPROVED)
        assert [r.id for r in approved] == [first.id]

    def test_update_request(
        self, store: CoopStore, coop_session: CoopSession, teacher: Guardian
    ) -> None:
        request = _request(store, coop_session.id, teacher.id)

        updated = store.update_teaching_request(request.id, max_students=12, class_name=None)

        assert updated.max_students == 12
        assert updated.class_name == "Chemistry"

    def test_update_request_validates_limits(
        self, store: CoopStore, coop_session: CoopSession, teacher: Guardian
    ) -> None:
        request = _request(store, coop_session.id, teacher.id)

        with pytest.raises(ValidationError):
            store.update_teaching_request(request.id, max_students=500)

        assert store.get_teaching_request(request.id).max_students == 20

    def test_delete_request(
        self, store: CoopStore, coop_session: CoopSession, teacher: Guardian
    ) -> None:
        request = _request(store, coop_session.id, teacher.id)

        store.delete_teaching_request(request.id)

        with pytest.raises(TeachingRequestNotFoundError):
            store.get_teaching_request(request.id)


@pytest.mark.unit
class TestVolunteerJobs:
    """Tests for volunteer job CRUD."""

    def test_create_defaults(self, store: CoopStore) -> None:
        job = store.create_volunteer_job(
            title="Setup crew", description="Set up chairs", created_by="admin-1"
        )

        assert job.job_type == "non_period"
        assert job.quantity_available == 1
        assert job.is_active is True

    def test_invalid_job_type(self, store: CoopStore) -> None:
        with pytest.raises(ValidationError):
            store.create_volunteer_job(
                title="X", description="Y", created_by="admin-1", job_type="weekly"
            )

    def test_zero_quantity_rejected(self, store: CoopStore) -> None:
        with pytest.raises(ValidationError):
            store.create_volunteer_job(
                title="X", description="Y", created_by="admin-1", quantity_available=0
            )

    def test_list_active_only(self, store: CoopStore) -> None:
        store.create_volunteer_job(title="Cleanup", description="Sweep", created_by="admin-1")
        store.create_volunteer_job(
            title="Archived", description="Old", created_by="admin-1", is_active=False
        )

        assert [j.title for j in store.list_volunteer_jobs()] == ["Archived", "Cleanup"]
        assert [j.title for j in store.list_volunteer_jobs(active_only=True)] == ["Cleanup"]

    def test_update_job(self, store: CoopStore) -> None:
        job = store.create_volunteer_job(title="Lunch", description="Serve", created_by="admin-1")

        updated = store.update_volunteer_job(job.id, job_type="period_based", is_active=False)

        assert updated.job_type == "period_based"
        assert updated.is_active is False
        assert updated.title == "Lunch"

    def test_delete_job(self, store: CoopStore) -> None:
        job = store.create_volunteer_job(title="Lunch", description="Serve", created_by="admin-1")

        store.delete_volunteer_job(job.id)

        with pytest.raises(VolunteerJobNotFoundError):
            store.get_volunteer_job(job.id)


@pytest.mark.unit
class TestSessionVolunteerJobs:
    """Tests for offering volunteer jobs in a session."""

    def test_create_job_offered_in_session(
        self, store: CoopStore, coop_session: CoopSession
    ) -> None:
        job = store.create_volunteer_job(
            title="Setup crew",
            description="Set up chairs",
            created_by="admin-1",
            quantity_available=3,
            session_id=coop_session.id,
        )

        offers = store.list_session_volunteer_jobs(coop_session.id)
        assert [(o.volunteer_job_id, o.quantity_available) for o in offers] == [(job.id, 3)]
        assert offers[0].job.title == "Setup crew"

    def test_create_job_for_unknown_session(self, store: CoopStore) -> None:
        with pytest.raises(SessionNotFoundError):
            store.create_volunteer_job(
                title="X", description="Y", created_by="admin-1", session_id="missing"
            )

        assert store.list_volunteer_jobs() == []

    def test_offer_defaults_to_job_headcount(
        self, store: CoopStore, coop_session: CoopSession
    ) -> None:
        job = store.create_volunteer_job(
            title="Lunch", description="Serve", created_by="admin-1", quantity_available=4
        )

        offer = store.offer_volunteer_job(coop_session.id, job.id)

        assert offer.quantity_available == 4
        assert offer.is_active is True

    def test_offer_again_updates(self, store: CoopStore, coop_session: CoopSession) -> None:
        job = store.create_volunteer_job(title="Lunch", description="Serve", created_by="a")
        store.offer_volunteer_job(coop_session.id, job.id)

        offer = store.offer_volunteer_job(
            coop_session.id, job.id, quantity_available=6, is_active=False
        )

        assert (offer.quantity_available, offer.is_active) == (6, False)
        assert len(store.list_session_volunteer_jobs(coop_session.id)) == 1
        assert store.list_session_volunteer_jobs(coop_session.id, active_only=True) == []

    def test_offer_unknown_job(self, store: CoopStore, coop_session: CoopSession) -> None:
        with pytest.raises(VolunteerJobNotFoundError):
            store.offer_volunteer_job(coop_session.id, "missing")

    def test_offer_rejects_zero_quantity(
        self, store: CoopStore, coop_session: CoopSession
    ) -> None:
        job = store.create_volunteer_job(title="Lunch", description="Serve", created_by="a")

        with pytest.raises(ValidationError):
            store.offer_volunteer_job(coop_session.id, job.id, quantity_available=0)

    def test_withdraw_keeps_job(self, store: CoopStore, coop_session: CoopSession) -> None:
        job = store.create_volunteer_job(
            title="Lunch", description="Serve", created_by="a", session_id=coop_session.id
        )

        store.withdraw_volunteer_job(coop_session.id, job.id)

        assert store.list_session_volunteer_jobs(coop_session.id) == []
        assert store.get_volunteer_job(job.id).title == "Lunch"
        with pytest.raises(VolunteerJobNotFoundError):
            store.withdraw_volunteer_job(coop_session.id, job.id)

    def test_available_jobs_fall_back_to_catalogue(
        self, store: CoopStore, coop_session: CoopSession
    ) -> None:
        store.create_volunteer_job(title="Cleanup", description="Sweep", created_by="a")
        store.create_volunteer_job(
            title="Archived", description="Old", created_by="a", is_active=False
        )

        offers = store.available_volunteer_jobs(coop_session.id)

        assert [o.job.title for o in offers] == ["Cleanup"]

    def test_available_jobs_limited_to_offers(
        self, store: CoopStore, coop_session: CoopSession
    ) -> None:
        store.create_volunteer_job(title="Cleanup", description="Sweep", created_by="a")
        offered = store.create_volunteer_job(
            title="Setup", description="Chairs", created_by="a", session_id=coop_session.id
        )

        offers = store.available_volunteer_jobs(coop_session.id)

        assert [o.volunteer_job_id for o in offers] == [offered.id]


@pytest.mark.unit
class TestScheduleComments:
    """Tests for teacher comments on a session's schedule."""

    def test_approved_teacher(self, store: CoopStore, coop_session: CoopSession, teacher) -> None:
        request = _request(store, coop_session.id, teacher.id)
        assert store.is_approved_teacher(teacher.id) is False

        store.review_teaching_request(request.id, reviewer_id="admin-1", status="approved")

        assert store.is_approved_teacher(teacher.id) is True

    def test_comment_is_trimmed_and_private_by_default(
        self, store: CoopStore, coop_session: CoopSession, teacher
    ) -> None:
        comment = store.create_schedule_comment(coop_session.id, teacher.id, "  Room A is cold  ")

        assert comment.comment == "Room A is cold"
        assert comment.is_public is False
        assert comment.author.first_name == "Tina"

    def test_blank_comment_rejected(
        self, store: CoopStore, coop_session: CoopSession, teacher
    ) -> None:
        with pytest.raises(ValidationError, match="Comment is required"):
            store.create_schedule_comment(coop_session.id, teacher.id, "   ")

    def test_unknown_session_or_guardian(
        self, store: CoopStore, coop_session: CoopSession, teacher
    ) -> None:
        with pytest.raises(SessionNotFoundError):
            store.create_schedule_comment("missing", teacher.id, "Hi")
        with pytest.raises(GuardianNotFoundError):
            store.create_schedule_comment(coop_session.id, "nobody", "Hi")

    def test_private_comments_visible_to_author_only(
        self, store: CoopStore, coop_session: CoopSession, teacher, family
    ) -> None:
        store.create_schedule_comment(coop_session.id, teacher.id, "Mine", is_public=False)
        store.create_schedule_comment(coop_session.id, "parent-1", "Shared", is_public=True)

        def visible(viewer: str, include_private: bool = False) -> set[str]:
            comments = store.list_schedule_comments(
                coop_session.id, viewer_id=viewer, include_private=include_private
            )
            return {c.comment for c in comments}

        assert visible(teacher.id) == {"Mine", "Shared"}
        assert visible("parent-1") == {"Shared"}
        assert visible("mod-1", include_private=True) == {"Mine", "Shared"}
