"""Tests for the CheckoutSession aggregate."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from checkout_wizard.domain import (
    AccountFields,
    CheckoutSession,
    CheckoutStep,
    OrderConfirmation,
    PaymentFields,
    ShippingFields,
)
from checkout_wizard.domain.events import (
    EVENT_REGISTRY,
    OrderCompleted,
    SessionStarted,
    StepAccepted,
    StepRejected,
    StepReverted,
)
from checkout_wizard.domain.exceptions import (
    IncompleteOrderError,
    InvalidStepTransitionError,
    SubmissionInProgressError,
)


def confirmation(order_id: str = "ORD-1") -> OrderConfirmation:
    return OrderConfirmation(
        order_id=order_id,
        total=Decimal("124.99"),
        currency="USD",
        estimated_delivery=datetime(2026, 1, 8, tzinfo=timezone.utc),
    )


@pytest.fixture
def session() -> CheckoutSession:
    return CheckoutSession.create()


@pytest.fixture
def payment_session(
    session: CheckoutSession,
    account_fields: AccountFields,
    shipping_fields: ShippingFields,
) -> CheckoutSession:
    session.accept_account(account_fields, "acc_1")
    session.accept_shipping(shipping_fields, "ship_2")
    session.collect_events()
    return session


class TestCheckoutSessionCreation:
    """Tests for starting a session."""

    def test_starts_on_account(self, session: CheckoutSession) -> None:
        assert session.current_step == CheckoutStep.ACCOUNT
        assert session.account_id is None
        assert session.order_id is None
        assert session.last_error is None
        assert not session.is_submitting

    def test_records_started_event(self, session: CheckoutSession) -> None:
        events = session.collect_events()
        assert len(events) == 1
        assert isinstance(events[0], SessionStarted)
        assert session.collect_events() == []

    def test_sessions_have_unique_ids(self) -> None:
        assert CheckoutSession.create().id != CheckoutSession.create().id


class TestSubmissionGuard:
    """Tests for begin/end submission."""

    def test_begin_submission_clears_error(self, session: CheckoutSession) -> None:
        session.reject("Invalid email format")
        session.begin_submission(CheckoutStep.ACCOUNT)
        assert session.is_submitting
        assert session.last_error is None

    def test_second_submission_is_refused(self, session: CheckoutSession) -> None:
        session.begin_submission(CheckoutStep.ACCOUNT)
        with pytest.raises(SubmissionInProgressError):
            session.begin_submission(CheckoutStep.ACCOUNT)

    def test_end_submission_allows_another(self, session: CheckoutSession) -> None:
        session.begin_submission(CheckoutStep.ACCOUNT)
        session.end_submission()
        session.begin_submission(CheckoutStep.ACCOUNT)
        assert session.submitting_step == CheckoutStep.ACCOUNT

    def test_wrong_step_is_refused(self, session: CheckoutSession) -> None:
        with pytest.raises(InvalidStepTransitionError):
            session.begin_submission(CheckoutStep.SHIPPING)
        assert not session.is_submitting

    def test_back_refused_while_submitting(self, payment_session: CheckoutSession) -> None:
        payment_session.begin_submission(CheckoutStep.PAYMENT)
        with pytest.raises(SubmissionInProgressError):
            payment_session.go_back()
        assert payment_session.current_step == CheckoutStep.PAYMENT


class TestStepAcceptance:
    """Tests for accepting step input."""

    def test_accept_account_moves_to_shipping(
        self, session: CheckoutSession, account_fields: AccountFields
    ) -> None:
        session.accept_account(account_fields, "acc_1")
        assert session.current_step == CheckoutStep.SHIPPING
        assert session.account_id == "acc_1"
        assert session.account_data == account_fields

    def test_accept_shipping_moves_to_payment(self, payment_session: CheckoutSession) -> None:
        assert payment_session.current_step == CheckoutStep.PAYMENT
        assert payment_session.shipping_id == "ship_2"

    def test_accept_payment_stays_on_payment(
        self, payment_session: CheckoutSession, payment_fields: PaymentFields
    ) -> None:
        payment_session.accept_payment(payment_fields, "pay_3")
        assert payment_session.current_step == CheckoutStep.PAYMENT
        assert payment_session.payment_id == "pay_3"
        assert payment_session.order_id is None

    def test_accept_records_event(
        self, session: CheckoutSession, account_fields: AccountFields
    ) -> None:
        session.collect_events()
        session.accept_account(account_fields, "acc_1")
        events = session.collect_events()
        assert len(events) == 1
        assert isinstance(events[0], StepAccepted)
        assert events[0].step == "account"
        assert events[0].identifier == "acc_1"

    def test_empty_identifier_does_not_advance(
        self, session: CheckoutSession, account_fields: AccountFields
    ) -> None:
        with pytest.raises(ValueError):
            session.accept_account(account_fields, "")
        assert session.current_step == CheckoutStep.ACCOUNT

    def test_accept_account_refused_off_account_step(
        self, payment_session: CheckoutSession, account_fields: AccountFields
    ) -> None:
        """Accepting account from payment must not move the session."""
        with pytest.raises(InvalidStepTransitionError):
            payment_session.accept_account(account_fields, "acc_9")
        assert payment_session.current_step == CheckoutStep.PAYMENT
        assert payment_session.account_id == "acc_1"

    def test_accept_payment_refused_off_payment_step(
        self, session: CheckoutSession, payment_fields: PaymentFields
    ) -> None:
        with pytest.raises(InvalidStepTransitionError):
            session.accept_payment(payment_fields, "pay_3")
        assert session.payment_id is None


class TestCompletion:
    """Tests for completing the order."""

    def test_complete_sets_order(
        self, payment_session: CheckoutSession, payment_fields: PaymentFields
    ) -> None:
        payment_session.accept_payment(payment_fields, "pay_3")
        payment_session.complete(confirmation())

        assert payment_session.current_step == CheckoutStep.COMPLETE
        assert payment_session.is_complete
        assert payment_session.order_id == "ORD-1"
        assert payment_session.confirmation.total == Decimal("124.99")

        events = payment_session.collect_events()
        assert isinstance(events[-1], OrderCompleted)
        assert events[-1].total == "124.99"

    def test_complete_requires_payment_id(self, payment_session: CheckoutSession) -> None:
        with pytest.raises(IncompleteOrderError) as exc_info:
            payment_session.complete(confirmation())
        assert exc_info.value.details["missing"] == ["payment_id"]
        assert payment_session.order_id is None
        assert payment_session.current_step == CheckoutStep.PAYMENT

    def test_complete_requires_payment_step(self, session: CheckoutSession) -> None:
        with pytest.raises(InvalidStepTransitionError):
            session.complete(confirmation())


class TestRejection:
    """Tests for recording failed operations."""

    def test_reject_keeps_step_and_stores_nothing(self, session: CheckoutSession) -> None:
        session.reject("Invalid email format")
        assert session.current_step == CheckoutStep.ACCOUNT
        assert session.last_error == "Invalid email format"
        assert session.account_data is None
        assert session.account_id is None

    def test_reject_records_event(self, session: CheckoutSession) -> None:
        session.collect_events()
        session.reject("Invalid email format")
        events = session.collect_events()
        assert isinstance(events[0], StepRejected)
        assert events[0].reason == "Invalid email format"


class TestGoBack:
    """Tests for back navigation."""

    def test_back_from_payment_keeps_data(self, payment_session: CheckoutSession) -> None:
        payment_session.reject("Card declined")
        payment_session.go_back()

        assert payment_session.current_step == CheckoutStep.SHIPPING
        assert payment_session.last_error is None
        assert payment_session.shipping_id == "ship_2"
        assert payment_session.shipping_data is not None
        assert isinstance(payment_session.collect_events()[-1], StepReverted)

    def test_back_twice_returns_to_account(self, payment_session: CheckoutSession) -> None:
        payment_session.go_back()
        payment_session.go_back()
        assert payment_session.current_step == CheckoutStep.ACCOUNT
        assert payment_session.account_data is not None

    def test_back_from_account_is_refused(self, session: CheckoutSession) -> None:
        with pytest.raises(InvalidStepTransitionError) as exc_info:
            session.go_back()
        assert exc_info.value.details["target_step"] == "back"

    def test_back_from_complete_is_refused(
        self, payment_session: CheckoutSession, payment_fields: PaymentFields
    ) -> None:
        payment_session.accept_payment(payment_fields, "pay_3")
        payment_session.complete(confirmation())
        with pytest.raises(InvalidStepTransitionError):
            payment_session.go_back()
        assert payment_session.current_step == CheckoutStep.COMPLETE

    def test_resubmit_after_back_replaces_data(
        self, payment_session: CheckoutSession, shipping_fields: ShippingFields
    ) -> None:
        payment_session.go_back()
        updated = ShippingFields(
            address_line1="Flat 3",
            street_name="Low Street",
            postcode="E1 6AN",
            shipping_method="overnight",
        )
        payment_session.accept_shipping(updated, "ship_5")
        assert payment_session.shipping_data == updated
        assert payment_session.shipping_id == "ship_5"


class TestEvents:
    """Tests for recorded domain events."""

    def test_event_to_dict(self, session: CheckoutSession) -> None:
        event = session.collect_events()[0]
        data = event.to_dict()

        assert data["event_type"] == "checkout.started"
        assert data["aggregate_type"] == "CheckoutSession"
        assert data["aggregate_id"] == str(session.id)
        assert data["payload"] == {"session_id": str(session.id)}

    def test_registry_covers_every_event(self) -> None:
        assert EVENT_REGISTRY == {
            "checkout.started": SessionStarted,
            "checkout.step_accepted": StepAccepted,
            "checkout.step_rejected": StepRejected,
            "checkout.step_reverted": StepReverted,
            "checkout.order_completed": OrderCompleted,
        }


class TestAuditTrail:
    """Tests for the session audit trail."""

    def test_trail_follows_the_wizard(
        self, payment_session: CheckoutSession, payment_fields: PaymentFields
    ) -> None:
        payment_session.reject("Card declined")
        payment_session.accept_payment(payment_fields, "pay_3")
        payment_session.complete(confirmation())

        actions = [entry.action for entry in payment_session.audit_trail]
        assert actions == [
            "started",
            "account_accepted",
            "shipping_accepted",
            "rejected",
            "payment_accepted",
            "order_completed",
        ]


class TestAggregateBookkeeping:
    """Tests for version and timestamp tracking."""

    def test_state_change_bumps_version_and_updated_at(
        self, session: CheckoutSession, account_fields: AccountFields
    ) -> None:
        before = session.updated_at
        session.accept_account(account_fields, "acc_1")

        assert session.version == 2
        assert session.updated_at >= before
        assert session.created_at <= session.updated_at

    def test_submission_marker_is_not_a_change(self, session: CheckoutSession) -> None:
        session.begin_submission(CheckoutStep.ACCOUNT)
        session.end_submission()
        assert session.version == 1
