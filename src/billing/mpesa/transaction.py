"""MpesaTransaction aggregate: local log of STK push requests and their outcome.

Rows are created as ``pending`` when the push is sent. Safaricom's callback
(handled outside this service) settles them as ``completed`` with a receipt
number or ``failed`` with the result code it reported.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String

from billing.domain import billing
from billing.mpesa.events import (
    MpesaTransactionCompleted,
    MpesaTransactionFailed,
    StkPushRecorded,
)


class MpesaTransactionStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@billing.aggregate(schema_name="mpesa_transactions")
class MpesaTransaction:
    payment_id = Identifier()
    checkout_request_id = String(required=True, max_length=100, unique=True)
    amount = Float(required=True, min_value=0.0)
    phone_number = String(max_length=20)
    account_reference = String(max_length=100)
    transaction_desc = String(max_length=500)
    status = String(
        choices=MpesaTransactionStatus,
        default=MpesaTransactionStatus.PENDING.value,
    )
    mpesa_receipt_number = String(max_length=50)
    result_code = Integer()
    result_desc = String(max_length=500)
    transaction_date = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def record_stk_push(
        cls,
        checkout_request_id: str,
        amount: float,
        payment_id: str | None = None,
        phone_number: str | None = None,
        account_reference: str | None = None,
        transaction_desc: str | None = None,
    ):
        now = datetime.now(UTC)
        transaction = cls(
            payment_id=payment_id,
            checkout_request_id=checkout_request_id,
            amount=amount,
            phone_number=phone_number,
            account_reference=account_reference,
            transaction_desc=transaction_desc,
            created_at=now,
            updated_at=now,
        )
        transaction.raise_(
            StkPushRecorded(
                transaction_id=str(transaction.id),
                payment_id=payment_id,
                checkout_request_id=checkout_request_id,
                amount=amount,
                phone_number=phone_number,
                recorded_at=now,
            )
        )
        return transaction

    def _assert_pending(self) -> None:
        if self.status != MpesaTransactionStatus.PENDING.value:
            raise ValidationError(
                {"status": [f"Transaction {self.checkout_request_id} is already {self.status}"]}
            )

    def complete(self, mpesa_receipt_number: str, transaction_date: datetime | None = None) -> None:
        self._assert_pending()
        now = datetime.now(UTC)
        self.status = MpesaTransactionStatus.COMPLETED.value
        self.mpesa_receipt_number = mpesa_receipt_number
        self.result_code = 0
        self.result_desc = "The service request is processed successfully."
        self.transaction_date = transaction_date or now
        self.updated_at = now
        self.raise_(
            MpesaTransactionCompleted(
                transaction_id=str(self.id),
                payment_id=self.payment_id,
                checkout_request_id=self.checkout_request_id,
                mpesa_receipt_number=mpesa_receipt_number,
                amount=self.amount,
                completed_at=now,
            )
        )

    def fail(self, result_code: int, result_desc: str) -> None:
        self._assert_pending()
        now = datetime.now(UTC)
        self.status = MpesaTransactionStatus.FAILED.value
        self.result_code = result_code
        self.result_desc = result_desc
        self.updated_at = now
        self.raise_(
            MpesaTransactionFailed(
                transaction_id=str(self.id),
                payment_id=self.payment_id,
                checkout_request_id=self.checkout_request_id,
                result_code=result_code,
                result_desc=result_desc,
                failed_at=now,
            )
        )
