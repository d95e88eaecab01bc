"""Payment aggregate: one customer payment routed through one gateway.

Fee, net amount and gateway are fixed when the row is created and never
recomputed. Provider completion (webhook or callback) happens outside this
service and is recorded through ``complete``.

State Machine:
    PENDING → PROCESSING → COMPLETED
    PENDING → FAILED
    PROCESSING → FAILED
"""

import json
import random
import string
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, String, Text

from billing.domain import billing
from billing.payment.events import (
    PaymentCompleted,
    PaymentCreated,
    PaymentFailed,
    PaymentSubmitted,
    RefundRecorded,
)
from billing.shared.money import calculate_net_amount

DEFAULT_REFUND_REASON = "Customer requested refund"

_BASE36 = string.digits + string.ascii_uppercase


class PaymentStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class RefundStatus(Enum):
    COMPLETED = "completed"


_VALID_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PROCESSING, PaymentStatus.FAILED},
    PaymentStatus.PROCESSING: {PaymentStatus.COMPLETED, PaymentStatus.FAILED},
    PaymentStatus.COMPLETED: set(),  # Terminal
    PaymentStatus.FAILED: set(),  # Terminal
}


def generate_reference() -> str:
    """``PAY-<epoch millis>-<9 base36 chars>``."""
    millis = int(datetime.now(UTC).timestamp() * 1000)
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"PAY-{millis}-{suffix}"


@billing.entity(part_of="Payment", schema_name="payment_refunds")
class PaymentRefund:
    """A refund the gateway confirmed against this payment."""

    amount = Float(required=True, min_value=0.0)
    reason = String(max_length=500, default=DEFAULT_REFUND_REASON)
    status = String(
        max_length=50,
        choices=RefundStatus,
        default=RefundStatus.COMPLETED.value,
    )
    refund_reference = String(max_length=255)
    processed_at = DateTime()


@billing.aggregate(schema_name="payments")
class Payment:
    customer_id = Identifier(required=True)
    amount = Float(required=True, min_value=0.0)
    processing_fee = Float(default=0.0)
    net_amount = Float(default=0.0)
    payment_method = String(required=True, max_length=50)
    description = String(max_length=500)
    status = String(
        choices=PaymentStatus,
        default=PaymentStatus.PENDING.value,
    )
    reference_number = String(required=True, max_length=100)
    currency = String(max_length=3, default="KES")
    gateway_used = String(required=True, max_length=100)
    payment_metadata = Text()  # JSON object supplied by the caller
    external_transaction_id = String(max_length=255)
    gateway_response = Text()  # JSON of the adapter's raw result
    refunds = HasMany(PaymentRefund)
    created_at = DateTime()
    updated_at = DateTime()
    completed_at = DateTime()

    def _assert_can_transition(self, target_status: PaymentStatus) -> None:
        current = PaymentStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    @classmethod
    def create(
        cls,
        customer_id: str,
        amount: float,
        currency: str,
        payment_method: str,
        gateway_used: str,
        processing_fee: float,
        reference_number: str | None = None,
        description: str | None = None,
        metadata: dict | None = None,
    ):
        """Record a new pending payment against the selected gateway."""
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Amount must be greater than zero"]})

        now = datetime.now(UTC)
        reference_number = reference_number or generate_reference()
        net_amount = calculate_net_amount(amount, processing_fee, currency)

        payment = cls(
            customer_id=customer_id,
            amount=amount,
            processing_fee=processing_fee,
            net_amount=net_amount,
            payment_method=payment_method,
            description=description,
            reference_number=reference_number,
            currency=currency,
            gateway_used=gateway_used,
            payment_metadata=json.dumps(metadata or {}, default=str),
            created_at=now,
            updated_at=now,
        )
        payment.raise_(
            PaymentCreated(
                payment_id=str(payment.id),
                customer_id=customer_id,
                reference_number=reference_number,
                amount=amount,
                processing_fee=processing_fee,
                net_amount=net_amount,
                currency=currency,
                payment_method=payment_method,
                gateway_used=gateway_used,
                created_at=now,
            )
        )
        return payment

    @property
    def metadata_data(self) -> dict:
        return json.loads(self.payment_metadata) if self.payment_metadata else {}

    @property
    def refunded_amount(self) -> float:
        return sum(refund.amount for refund in self.refunds)

    def submit(self, external_transaction_id: str | None, gateway_response: dict | None = None) -> None:
        """The gateway accepted the payment."""
        self._assert_can_transition(PaymentStatus.PROCESSING)
        now = datetime.now(UTC)
        self.external_transaction_id = external_transaction_id
        self.gateway_response = json.dumps(gateway_response or {}, default=str)
        self.status = PaymentStatus.PROCESSING.value
        self.updated_at = now
        self.raise_(
            PaymentSubmitted(
                payment_id=str(self.id),
                gateway_used=self.gateway_used,
                external_transaction_id=external_transaction_id,
                submitted_at=now,
            )
        )

    def fail(self, reason: str | None, gateway_response: dict | None = None) -> None:
        self._assert_can_transition(PaymentStatus.FAILED)
        now = datetime.now(UTC)
        if gateway_response is not None:
            self.external_transaction_id = gateway_response.get("transaction_id")
            self.gateway_response = json.dumps(gateway_response, default=str)
        self.status = PaymentStatus.FAILED.value
        self.updated_at = now
        self.raise_(
            PaymentFailed(
                payment_id=str(self.id),
                gateway_used=self.gateway_used,
                reason=reason,
                failed_at=now,
            )
        )

    def complete(self) -> None:
        """Provider confirmed settlement."""
        self._assert_can_transition(PaymentStatus.COMPLETED)
        now = datetime.now(UTC)
        self.status = PaymentStatus.COMPLETED.value
        self.completed_at = now
        self.updated_at = now
        self.raise_(
            PaymentCompleted(
                payment_id=str(self.id),
                gateway_used=self.gateway_used,
                external_transaction_id=self.external_transaction_id,
                completed_at=now,
            )
        )

    def record_refund(
        self,
        amount: float | None = None,
        reason: str | None = None,
        refund_reference: str | None = None,
    ) -> PaymentRefund:
        """Record a refund the gateway already confirmed. Defaults to the full amount.

        Previously refunded amounts are not checked against the payment total.
        """
        now = datetime.now(UTC)
        refund = PaymentRefund(
            amount=amount or self.amount,
            reason=reason or DEFAULT_REFUND_REASON,
            status=RefundStatus.COMPLETED.value,
            refund_reference=refund_reference,
            processed_at=now,
        )
        self.add_refunds(refund)
        self.updated_at = now
        self.raise_(
            RefundRecorded(
                payment_id=str(self.id),
                refund_id=str(refund.id),
                amount=refund.amount,
                reason=refund.reason,
                refund_reference=refund_reference,
                processed_at=now,
            )
        )
        return refund
