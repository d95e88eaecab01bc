"""Payment aggregate: creation, state machine and refunds."""

import re

import pytest
from billing.payment.events import (
    PaymentCompleted,
    PaymentCreated,
    PaymentFailed,
    PaymentSubmitted,
    RefundRecorded,
)
from billing.payment.payment import (
    DEFAULT_REFUND_REASON,
    Payment,
    PaymentStatus,
    generate_reference,
)
from protean.exceptions import ValidationError


def _make_payment(**overrides):
    defaults = {
        "customer_id": "1001",
        "amount": 1000.0,
        "currency": "KES",
        "payment_method": "mobile_money",
        "gateway_used": "mpesa",
        "processing_fee": 10.0,
    }
    defaults.update(overrides)
    return Payment.create(**defaults)


class TestPaymentCreation:
    def test_starts_pending(self):
        payment = _make_payment()
        assert payment.status == PaymentStatus.PENDING.value

    def test_net_amount_is_amount_minus_fee(self):
        payment = _make_payment(amount=100.0, currency="USD", processing_fee=32.9)
        assert payment.processing_fee == 32.9
        assert payment.net_amount == 67.1

    def test_generates_reference_when_not_supplied(self):
        payment = _make_payment()
        assert re.fullmatch(r"PAY-\d{13}-[0-9A-Z]{9}", payment.reference_number)

    def test_keeps_supplied_reference(self):
        payment = _make_payment(reference_number="INV-2024-0042")
        assert payment.reference_number == "INV-2024-0042"

    def test_metadata_round_trips_as_json(self):
        payment = _make_payment(metadata={"phone_number": "254712345678"})
        assert payment.metadata_data == {"phone_number": "254712345678"}

    def test_zero_amount_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _make_payment(amount=0)
        assert "amount" in exc.value.messages

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            _make_payment(amount=-50)

    def test_raises_created_event(self):
        payment = _make_payment()
        event = payment._events[-1]
        assert isinstance(event, PaymentCreated)
        assert event.gateway_used == "mpesa"
        assert event.net_amount == 990.0

    def test_references_are_unique(self):
        assert generate_reference() != generate_reference()


class TestPaymentStateMachine:
    def test_submit_moves_to_processing(self):
        payment = _make_payment()
        payment.submit("ws_CO_123", {"success": True})
        assert payment.status == PaymentStatus.PROCESSING.value
        assert payment.external_transaction_id == "ws_CO_123"
        assert isinstance(payment._events[-1], PaymentSubmitted)

    def test_fail_from_pending(self):
        payment = _make_payment()
        payment.fail("Declined", {"success": False, "error": "Declined"})
        assert payment.status == PaymentStatus.FAILED.value
        assert isinstance(payment._events[-1], PaymentFailed)

    def test_complete_after_processing(self):
        payment = _make_payment()
        payment.submit("pi_abc")
        payment.complete()
        assert payment.status == PaymentStatus.COMPLETED.value
        assert payment.completed_at is not None
        assert isinstance(payment._events[-1], PaymentCompleted)

    def test_fail_from_processing(self):
        payment = _make_payment()
        payment.submit("pi_abc")
        payment.fail("Expired checkout session")
        assert payment.status == PaymentStatus.FAILED.value

    def test_cannot_complete_pending_payment(self):
        payment = _make_payment()
        with pytest.raises(ValidationError):
            payment.complete()

    def test_failed_is_terminal(self):
        payment = _make_payment()
        payment.fail("Declined")
        with pytest.raises(ValidationError):
            payment.submit("pi_abc")

    def test_completed_is_terminal(self):
        payment = _make_payment()
        payment.submit("pi_abc")
        payment.complete()
        with pytest.raises(ValidationError):
            payment.fail("Too late")

    def test_rejected_transaction_id_keeps_payment_pending(self):
        payment = _make_payment()
        with pytest.raises(ValidationError):
            payment.submit("x" * 300)
        assert payment.status == PaymentStatus.PENDING.value

        payment.fail("Unusable transaction id")
        assert payment.status == PaymentStatus.FAILED.value


class TestPaymentRefunds:
    def test_defaults_to_full_amount_and_reason(self):
        payment = _make_payment()
        refund = payment.record_refund(refund_reference="re_001")
        assert refund.amount == 1000.0
        assert refund.reason == DEFAULT_REFUND_REASON
        assert refund.status == "completed"
        assert len(payment.refunds) == 1

    def test_partial_refund(self):
        payment = _make_payment()
        payment.record_refund(amount=250.0, reason="Service outage credit", refund_reference="re_002")
        assert payment.refunded_amount == 250.0

    def test_zero_amount_refunds_in_full(self):
        payment = _make_payment()
        refund = payment.record_refund(amount=0.0, refund_reference="re_004")
        assert refund.amount == 1000.0

    def test_raises_refund_recorded_event(self):
        payment = _make_payment()
        payment.record_refund(refund_reference="re_003")
        event = payment._events[-1]
        assert isinstance(event, RefundRecorded)
        assert event.refund_reference == "re_003"
