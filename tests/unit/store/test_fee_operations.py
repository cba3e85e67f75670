"""Unit tests for fee configuration, family fees and payments."""

from datetime import date

import pytest

from coopreg.registration import (
    ClassRequest,
    RegistrationManager,
    RegistrationRequest,
    VolunteerRequest,
)
from coopreg.store import (
    CoopSession,
    CoopStore,
    Family,
    FamilyFeeNotFoundError,
    FamilyNotFoundError,
    FeeConfigNotFoundError,
    FeeStatus,
    SessionNotFoundError,
    ValidationError,
)


@pytest.fixture
def fee_config(store: CoopStore, coop_session: CoopSession):
    """A 50/25 fee schedule due mid-April."""
    return store.upsert_fee_config(
        coop_session.id, first_child_fee=50, additional_child_fee=25, due_date=date(2026, 4, 15)
    )


@pytest.fixture
def registered_family(
    store: CoopStore,
    coop_session: CoopSession,
    family: Family,
    children: list,
    make_class,
    registration_manager: RegistrationManager,
) -> Family:
    """Ada and Ben registered into a 30.00 pottery class; Pat helps."""
    pottery = make_class(name="Pottery", requires_fee=True, fee_amount=30.0)
    registration_manager.submit(
        RegistrationRequest(
            session_id=coop_session.id,
            submitted_by="parent-1",
            classes=[
                ClassRequest(child_id=children[0].id, schedule_id=pottery.id),
                ClassRequest(child_id=children[1].id, schedule_id=pottery.id),
            ],
            volunteers=[
                VolunteerRequest(
                    guardian_id="parent-1", volunteer_type="helper", schedule_id=pottery.id
                )
            ],
        )
    )
    return family


@pytest.mark.unit
class TestFeeConfig:
    """Tests for fee configuration."""

    def test_upsert_creates_config(self, store: CoopStore, coop_session, fee_config) -> None:
        config = store.get_fee_config(coop_session.id)

        assert config.first_child_fee == 50.0
        assert config.additional_child_fee == 25.0
        assert config.due_date == date(2026, 4, 15)

    def test_upsert_replaces_config(self, store: CoopStore, coop_session, fee_config) -> None:
        updated = store.upsert_fee_config(
            coop_session.id,
            first_child_fee=60,
            additional_child_fee=30,
            due_date=date(2026, 4, 30),
        )

        assert updated.id == fee_config.id
        assert store.get_fee_config(coop_session.id).first_child_fee == 60.0

    def test_negative_fee_rejected(self, store: CoopStore, coop_session) -> None:
        with pytest.raises(ValidationError):
            store.upsert_fee_config(
                coop_session.id,
                first_child_fee=-1,
                additional_child_fee=25,
                due_date=date(2026, 4, 15),
            )

    def test_missing_config(self, store: CoopStore, coop_session) -> None:
        with pytest.raises(FeeConfigNotFoundError):
            store.get_fee_config(coop_session.id)

    def test_unknown_session(self, store: CoopStore) -> None:
        with pytest.raises(SessionNotFoundError):
            store.upsert_fee_config(
                "missing", first_child_fee=1, additional_child_fee=1, due_date=date(2026, 4, 15)
            )


@pytest.mark.unit
class TestFamilyFees:
    """Fees are recalculated when a family registers."""

    def test_registration_creates_fee(
        self, store: CoopStore, coop_session, fee_config, registered_family
    ) -> None:
        fee = store.get_family_fee(registered_family.id, coop_session.id)

        assert fee.registration_fee == 75.0
        assert fee.class_fees == 60.0
        assert fee.total_fee == 135.0
        assert fee.paid_amount == 0.0
        assert fee.status == FeeStatus.PENDING
        assert fee.due_date == date(2026, 4, 15)

    def test_no_config_means_no_fee(
        self, store: CoopStore, coop_session, registered_family
    ) -> None:
        """Registration succeeds without a fee configuration; no fee is created."""
        with pytest.raises(FamilyFeeNotFoundError):
            store.get_family_fee(registered_family.id, coop_session.id)

    def test_recalculate_after_config_change(
        self, store: CoopStore, coop_session, fee_config, registered_family
    ) -> None:
        store.upsert_fee_config(
            coop_session.id, first_child_fee=80, additional_child_fee=40, due_date=date(2026, 5, 1)
        )

        fees = store.recalculate_fees(coop_session.id)

        assert len(fees) == 1
        assert fees[0].total_fee == 180.0
        assert fees[0].due_date == date(2026, 5, 1)

    def test_recalculate_for_one_family(
        self, store: CoopStore, coop_session, fee_config, registered_family
    ) -> None:
        fees = store.recalculate_fees(coop_session.id, family_id=registered_family.id)

        assert [f.family_id for f in fees] == [registered_family.id]

    def test_recalculate_without_config(
        self, store: CoopStore, coop_session, registered_family
    ) -> None:
        with pytest.raises(FeeConfigNotFoundError):
            store.recalculate_fees(coop_session.id)

    def test_list_fees(self, store: CoopStore, coop_session, fee_config, registered_family) -> None:
        assert len(store.list_fees(coop_session.id)) == 1
        assert len(store.list_family_fees(registered_family.id)) == 1
        assert store.list_fees("other-session") == []


@pytest.mark.unit
class TestPayments:
    """Tests for record_payment."""

    def test_partial_then_full_payment(
        self, store: CoopStore, coop_session, fee_config, registered_family
    ) -> None:
        store.record_payment(
            registered_family.id,
            amount=35,
            payment_method="check",
            payment_date=date(2026, 3, 20),
            session_id=coop_session.id,
        )
        fee = store.get_family_fee(registered_family.id, coop_session.id)
        assert fee.paid_amount == 35.0
        assert fee.status == FeeStatus.PARTIAL

        store.record_payment(
            registered_family.id,
            amount=100,
            payment_method="cash",
            payment_date=date(2026, 3, 25),
            session_id=coop_session.id,
        )
        fee = store.get_family_fee(registered_family.id, coop_session.id)
        assert fee.paid_amount == 135.0
        assert fee.status == FeeStatus.PAID

    def test_payment_linked_to_fee(
        self, store: CoopStore, coop_session, fee_config, registered_family
    ) -> None:
        payment = store.record_payment(
            registered_family.id,
            amount=10,
            payment_method="online",
            payment_date=date(2026, 3, 20),
            session_id=coop_session.id,
            notes="Deposit",
        )
        fee = store.get_family_fee(registered_family.id, coop_session.id)

        assert payment.family_session_fee_id == fee.id
        assert payment.notes == "Deposit"

    def test_paid_amount_survives_recalculation(
        self, store: CoopStore, coop_session, fee_config, registered_family
    ) -> None:
        store.record_payment(
            registered_family.id,
            amount=135,
            payment_method="cash",
            payment_date=date(2026, 3, 20),
            session_id=coop_session.id,
        )
        store.upsert_fee_config(
            coop_session.id, first_child_fee=70, additional_child_fee=25, due_date=date(2026, 4, 15)
        )

        fee = store.recalculate_fees(coop_session.id)[0]

        assert fee.total_fee == 155.0
        assert fee.paid_amount == 135.0
        assert fee.status == FeeStatus.PARTIAL

    def test_payment_without_session(self, store: CoopStore, family: Family) -> None:
        payment = store.record_payment(
            family.id, amount=20, payment_method="cash", payment_date=date(2026, 3, 1)
        )

        assert payment.family_session_fee_id is None
        assert store.list_payments(family_id=family.id)[0].id == payment.id

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amount_rejected(
        self, store: CoopStore, family: Family, amount: float
    ) -> None:
        with pytest.raises(ValidationError):
            store.record_payment(
                family.id, amount=amount, payment_method="cash", payment_date=date(2026, 3, 1)
            )

    def test_unknown_method_rejected(self, store: CoopStore, family: Family) -> None:
        with pytest.raises(ValidationError):
            store.record_payment(
                family.id, amount=5, payment_method="barter", payment_date=date(2026, 3, 1)
            )

    def test_unknown_family_rejected(self, store: CoopStore) -> None:
        with pytest.raises(FamilyNotFoundError):
            store.record_payment(
                "missing", amount=5, payment_method="cash", payment_date=date(2026, 3, 1)
            )

    def test_list_payments_newest_first(self, store: CoopStore, family: Family) -> None:
        store.record_payment(
            family.id, amount=5, payment_method="cash", payment_date=date(2026, 3, 1)
        )
        store.record_payment(
            family.id, amount=7, payment_method="cash", payment_date=date(2026, 3, 5)
        )

        assert [p.amount for p in store.list_payments(family_id=family.id)] == [7.0, 5.0]
