"""M-Pesa (Safaricom Daraja) STK push adapter.

The push itself completes asynchronously: the customer enters their PIN and
Safaricom calls back with the result. This adapter only records the pending
request in the local transaction log; verification reads that log back.
"""

import random
from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from billing.domain import logger
from billing.gateway.port import (
    ChargeRequest,
    PaymentResponse,
    ReconciliationReport,
    ReconcilingGateway,
)
from billing.mpesa.reconciliation import reconcile_mpesa_transactions
from billing.mpesa.transaction import MpesaTransaction, MpesaTransactionStatus


def generate_checkout_request_id() -> str:
    millis = int(datetime.now(UTC).timestamp() * 1000)
    return f"ws_CO_{millis}{random.randint(0, 999999):06d}"


class MpesaGateway(ReconcilingGateway):
    def process_payment(self, charge: ChargeRequest) -> PaymentResponse:
        try:
            checkout_request_id = generate_checkout_request_id()
            transaction = MpesaTransaction.record_stk_push(
                checkout_request_id=checkout_request_id,
                amount=charge.amount,
                payment_id=charge.payment_id,
                phone_number=charge.metadata.get("phone_number"),
                account_reference=charge.reference,
                transaction_desc=charge.description,
            )
            current_domain.repository_for(MpesaTransaction).add(transaction)
        except Exception as exc:
            logger.error("mpesa_stk_push_failed", payment_id=charge.payment_id, error=str(exc))
            return PaymentResponse(success=False, error=str(exc) or "M-Pesa processing failed")

        logger.info(
            "mpesa_stk_push_sent",
            payment_id=charge.payment_id,
            checkout_request_id=checkout_request_id,
        )
        return PaymentResponse(
            success=True,
            transaction_id=checkout_request_id,
            message="STK Push sent successfully",
        )

    def verify_payment(self, transaction_id: str) -> bool:
        try:
            transaction = current_domain.repository_for(MpesaTransaction).find_by_checkout_request_id(transaction_id)
        except ObjectNotFoundError:
            return False
        return transaction.status == MpesaTransactionStatus.COMPLETED.value

    def refund_payment(self, payment_id: str, amount: float | None = None) -> PaymentResponse:
        # TODO: B2C reversal through the Daraja transaction reversal API
        return PaymentResponse(success=False, error="M-Pesa refunds require manual processing")

    def reconcile_payments(self, start_date: datetime, end_date: datetime) -> ReconciliationReport:
        return reconcile_mpesa_transactions(self.name, start_date, end_date)
