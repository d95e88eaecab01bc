"""Domain events for the M-Pesa transaction log."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from billing.domain import billing


@billing.event(part_of="MpesaTransaction")
class StkPushRecorded:
    """An STK push was sent to the customer's phone and is awaiting their PIN."""

    __version__ = 1

    transaction_id = Identifier(required=True)
    payment_id = Identifier()
    checkout_request_id = String(required=True)
    amount = Float(required=True)
    phone_number = String()
    recorded_at = DateTime(required=True)


@billing.event(part_of="MpesaTransaction")
class MpesaTransactionCompleted:
    __version__ = 1

    transaction_id = Identifier(required=True)
    payment_id = Identifier()
    checkout_request_id = String(required=True)
    mpesa_receipt_number = String(required=True)
    amount = Float(required=True)
    completed_at = DateTime(required=True)


@billing.event(part_of="MpesaTransaction")
class MpesaTransactionFailed:
    __version__ = 1

    transaction_id = Identifier(required=True)
    payment_id = Identifier()
    checkout_request_id = String(required=True)
    result_code = Integer()
    result_desc = String()
    failed_at = DateTime(required=True)
