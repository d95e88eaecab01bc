"""PaymentOrchestrator.process_payment end to end against the in-memory store."""

import json

from billing.activity.activity_log import ActivityLog
from billing.gateway.port import PaymentResponse
from billing.mpesa.transaction import MpesaTransaction
from billing.payment.payment import Payment, PaymentStatus
from protean import current_domain


def _payments():
    return current_domain.repository_for(Payment)._dao.query.all().items


def _activity_messages():
    return [entry.message for entry in current_domain.repository_for(ActivityLog)._dao.query.all().items]


class TestGatewayRouting:
    def test_mobile_money_routed_to_mpesa(self, orchestrator, isp_gateways, payment_request):
        result = orchestrator.process_payment(payment_request())

        assert result.success is True
        assert result.gateway_used == "mpesa"
        assert result.message == "STK Push sent successfully"
        assert result.transaction_id.startswith("ws_CO_")

        payment = current_domain.repository_for(Payment).get(result.payment_id)
        assert payment.processing_fee == 10.0
        assert payment.net_amount == 990.0
        assert payment.gateway_used == "mpesa"

    def test_card_in_dollars_routed_to_stripe(self, orchestrator, isp_gateways, payment_request):
        result = orchestrator.process_payment(payment_request(amount=100.0, currency="USD", payment_method="card"))

        assert result.success is True
        assert result.gateway_used == "stripe"
        assert result.checkout_url == f"https://checkout.stripe.com/pay/{result.payment_id}"

        payment = current_domain.repository_for(Payment).get(result.payment_id)
        assert payment.processing_fee == 32.9
        assert payment.net_amount == 67.1
        assert payment.external_transaction_id == result.transaction_id

    def test_mpesa_push_is_logged_locally(self, orchestrator, isp_gateways, payment_request):
        result = orchestrator.process_payment(payment_request(reference="INV-0042"))

        transaction = current_domain.repository_for(MpesaTransaction).find_by_checkout_request_id(
            result.transaction_id
        )
        assert transaction.payment_id == result.payment_id
        assert transaction.phone_number == "254712345678"
        assert transaction.account_reference == "INV-0042"
        assert transaction.status == "pending"


class TestNoSuitableGateway:
    def test_returns_failure_value(self, orchestrator, isp_gateways, payment_request):
        result = orchestrator.process_payment(payment_request(payment_method="wire_transfer"))

        assert result.success is False
        assert result.error == "No suitable gateway found for wire_transfer in KES"
        assert result.payment_id is None

    def test_writes_no_payment(self, orchestrator, isp_gateways, payment_request):
        orchestrator.process_payment(payment_request(currency="EUR"))
        assert _payments() == []

    def test_records_failed_activity(self, orchestrator, isp_gateways, payment_request):
        orchestrator.process_payment(payment_request(currency="EUR"))
        assert _activity_messages() == ["Admin Payment processing failed: No suitable gateway found for mobile_money in EUR"]


class TestAdapterOutcome:
    def test_accepted_payment_is_processing(self, orchestrator, add_gateway, payment_request):
        add_gateway("fake")
        result = orchestrator.process_payment(payment_request())

        payment = current_domain.repository_for(Payment).get(result.payment_id)
        assert payment.status == PaymentStatus.PROCESSING.value
        assert payment.external_transaction_id == result.transaction_id

    def test_declined_payment_is_failed(self, orchestrator, add_gateway, payment_request):
        gateway = add_gateway("fake")
        gateway.configure(should_succeed=False, failure_reason="Insufficient funds")

        result = orchestrator.process_payment(payment_request())

        assert result.success is False
        assert result.error == "Insufficient funds"
        assert result.gateway_used == "fake"
        payment = current_domain.repository_for(Payment).get(result.payment_id)
        assert payment.status == PaymentStatus.FAILED.value

    def test_adapter_crash_leaves_failed_row(self, orchestrator, add_gateway, payment_request):
        gateway = add_gateway("fake")
        gateway.configure(should_succeed=False, failure_reason="connection reset", raise_error=True)

        result = orchestrator.process_payment(payment_request())

        assert result.success is False
        assert result.error == "connection reset"
        payments = _payments()
        assert len(payments) == 1
        assert payments[0].status == PaymentStatus.FAILED.value

    def test_adapter_called_exactly_once(self, orchestrator, add_gateway, payment_request):
        gateway = add_gateway("fake")
        result = orchestrator.process_payment(payment_request())

        calls = gateway.calls_to("process_payment")
        assert len(calls) == 1
        assert calls[0]["payment_id"] == result.payment_id

    def test_adapter_receives_reference(self, orchestrator, add_gateway, payment_request):
        gateway = add_gateway("fake")
        orchestrator.process_payment(payment_request(reference="INV-7"))
        assert gateway.calls[0]["reference"] == "INV-7"

    def test_no_payment_left_pending(self, orchestrator, add_gateway, payment_request):
        gateway = add_gateway("fake")
        orchestrator.process_payment(payment_request())
        gateway.configure(should_succeed=False)
        orchestrator.process_payment(payment_request())
        gateway.configure(should_succeed=False, raise_error=True)
        orchestrator.process_payment(payment_request())

        statuses = sorted(payment.status for payment in _payments())
        assert statuses == ["failed", "failed", "processing"]

    def test_unstorable_transaction_id_leaves_failed_row(self, orchestrator, add_gateway, payment_request, monkeypatch):
        gateway = add_gateway("fake")
        long_id = "x" * 300
        monkeypatch.setattr(
            gateway,
            "process_payment",
            lambda charge: PaymentResponse(success=True, transaction_id=long_id, message="Accepted"),
        )

        result = orchestrator.process_payment(payment_request())

        assert result.success is False
        assert "external_transaction_id" in result.error
        payments = _payments()
        assert len(payments) == 1
        assert str(payments[0].id) == result.payment_id
        assert payments[0].status == PaymentStatus.FAILED.value
        assert payments[0].external_transaction_id is None
        assert json.loads(payments[0].gateway_response)["adapter_response"]["transaction_id"] == long_id
        assert _activity_messages() == ["Admin Payment failed: mobile_money - KES 1000"]

    def test_unstorable_decline_leaves_failed_row(self, orchestrator, add_gateway, payment_request, monkeypatch):
        gateway = add_gateway("fake")
        monkeypatch.setattr(
            gateway,
            "process_payment",
            lambda charge: PaymentResponse(success=False, transaction_id="y" * 300, error="Declined"),
        )

        result = orchestrator.process_payment(payment_request())

        assert result.success is False
        assert [payment.status for payment in _payments()] == [PaymentStatus.FAILED.value]


class TestInvalidRequests:
    def test_zero_amount_is_failure_value(self, orchestrator, add_gateway, payment_request):
        gateway = add_gateway("fake")
        result = orchestrator.process_payment(payment_request(amount=0.0))

        assert result.success is False
        assert "Amount must be greater than zero" in result.error
        assert gateway.calls == []
        assert _payments() == []


class TestActivityTrail:
    def test_initiated_payment_logged(self, orchestrator, isp_gateways, payment_request):
        result = orchestrator.process_payment(payment_request())

        entries = current_domain.repository_for(ActivityLog)._dao.query.all().items
        assert len(entries) == 1
        entry = entries[0]
        assert entry.message == "Admin Payment initiated: mobile_money - KES 1000"
        assert entry.category == "admin"
        assert entry.user_id == "system"
        assert entry.details_data["payment_id"] == result.payment_id
        assert entry.details_data["processing_fee"] == 10.0

    def test_declined_payment_logged_as_failed(self, orchestrator, add_gateway, payment_request):
        add_gateway("fake").configure(should_succeed=False)
        orchestrator.process_payment(payment_request(amount=99.5))
        assert _activity_messages() == ["Admin Payment failed: mobile_money - KES 99.5"]


class TestVerifyPayment:
    def test_unconfirmed_payment_not_verified(self, orchestrator, add_gateway, payment_request):
        add_gateway("fake")
        result = orchestrator.process_payment(payment_request())
        assert orchestrator.verify_payment(result.payment_id) is False

    def test_confirmed_payment_verified(self, orchestrator, add_gateway, payment_request):
        gateway = add_gateway("fake")
        result = orchestrator.process_payment(payment_request())
        gateway.confirm(result.transaction_id)
        assert orchestrator.verify_payment(result.payment_id) is True

    def test_unknown_payment_not_verified(self, orchestrator):
        assert orchestrator.verify_payment("missing") is False
