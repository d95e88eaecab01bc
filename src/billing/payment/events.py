"""Domain events for the Payment aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from billing.domain import billing


@billing.event(part_of="Payment")
class PaymentCreated:
    """A payment row was recorded against the selected gateway, before any provider call."""

    __version__ = 1

    payment_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reference_number = String(required=True)
    amount = Float(required=True)
    processing_fee = Float(required=True)
    net_amount = Float(required=True)
    currency = String(required=True)
    payment_method = String(required=True)
    gateway_used = String(required=True)
    created_at = DateTime(required=True)


@billing.event(part_of="Payment")
class PaymentSubmitted:
    """The gateway accepted the payment; completion arrives out of band."""

    __version__ = 1

    payment_id = Identifier(required=True)
    gateway_used = String(required=True)
    external_transaction_id = String()
    submitted_at = DateTime(required=True)


@billing.event(part_of="Payment")
class PaymentFailed:
    __version__ = 1

    payment_id = Identifier(required=True)
    gateway_used = String(required=True)
    reason = String()
    failed_at = DateTime(required=True)


@billing.event(part_of="Payment")
class PaymentCompleted:
    __version__ = 1

    payment_id = Identifier(required=True)
    gateway_used = String(required=True)
    external_transaction_id = String()
    completed_at = DateTime(required=True)


@billing.event(part_of="Payment")
class RefundRecorded:
    __version__ = 1

    payment_id = Identifier(required=True)
    refund_id = Identifier(required=True)
    amount = Float(required=True)
    reason = String()
    refund_reference = String()
    processed_at = DateTime(required=True)
