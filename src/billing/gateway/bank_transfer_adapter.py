"""Bank transfer adapter: hands the customer payment instructions.

Settlement is confirmed by staff matching bank statements, so nothing here
can verify or refund automatically.
"""

from datetime import UTC, datetime

from billing.gateway.port import ChargeRequest, PaymentGateway, PaymentResponse


class BankTransferGateway(PaymentGateway):
    def instructions(self, charge: ChargeRequest) -> str:
        bank_name = self.configuration.get("bank_name", "our bank")
        account_number = self.configuration.get("account_number", "the account on your invoice")
        return (
            f"Transfer {charge.currency} {charge.amount} to {bank_name}, "
            f"account {account_number}, quoting reference {charge.reference}"
        )

    def process_payment(self, charge: ChargeRequest) -> PaymentResponse:
        millis = int(datetime.now(UTC).timestamp() * 1000)
        return PaymentResponse(
            success=True,
            transaction_id=f"bt_{millis}",
            message=f"Bank transfer instructions generated. {self.instructions(charge)}",
        )

    def verify_payment(self, transaction_id: str) -> bool:  # noqa: ARG002
        # Verified manually against bank statements
        return False

    def refund_payment(self, payment_id: str, amount: float | None = None) -> PaymentResponse:
        return PaymentResponse(success=False, error="Bank transfer refunds require manual processing")
