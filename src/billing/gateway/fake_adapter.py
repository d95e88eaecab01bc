"""Configurable fake payment gateway for development and testing.

Simulates a provider without any external calls. It can be told to accept,
decline or raise, and records every call it receives so tests can assert on
exactly how many times the orchestrator reached the provider. Not one of the
``GatewayType`` tags: it only enters a registry through ``register``.
"""

from uuid import uuid4

from billing.gateway.port import ChargeRequest, GatewayProfile, PaymentGateway, PaymentResponse

FAKE_GATEWAY_TYPE = "fake"


class FakeGatewayError(RuntimeError):
    """Raised by FakeGateway when configured to blow up."""


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, profile: GatewayProfile) -> None:
        super().__init__(profile)
        self.should_succeed: bool = True
        self.failure_reason: str = "Payment declined"
        self.raise_error: bool = False
        self.confirmed: set[str] = set()
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool,
        failure_reason: str = "Payment declined",
        raise_error: bool = False,
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.raise_error = raise_error

    def confirm(self, transaction_id: str) -> None:
        """Simulate the provider confirming a transaction."""
        self.confirmed.add(transaction_id)

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]

    def process_payment(self, charge: ChargeRequest) -> PaymentResponse:
        self.calls.append(
            {
                "method": "process_payment",
                "payment_id": charge.payment_id,
                "reference": charge.reference,
                "amount": charge.amount,
                "currency": charge.currency,
            }
        )
        if self.raise_error:
            raise FakeGatewayError(self.failure_reason)

        if self.should_succeed:
            return PaymentResponse(
                success=True,
                transaction_id=f"fake_txn_{uuid4().hex[:12]}",
                message="Fake payment accepted",
            )
        return PaymentResponse(success=False, error=self.failure_reason)

    def verify_payment(self, transaction_id: str) -> bool:
        self.calls.append({"method": "verify_payment", "transaction_id": transaction_id})
        return transaction_id in self.confirmed

    def refund_payment(self, payment_id: str, amount: float | None = None) -> PaymentResponse:
        self.calls.append({"method": "refund_payment", "payment_id": payment_id, "amount": amount})
        if self.raise_error:
            raise FakeGatewayError(self.failure_reason)

        if self.should_succeed:
            return PaymentResponse(
                success=True,
                transaction_id=f"fake_ref_{uuid4().hex[:12]}",
                message="Refund processed successfully",
            )
        return PaymentResponse(success=False, error=self.failure_reason)
