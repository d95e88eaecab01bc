"""Match the M-Pesa transaction log against recorded payments over a date range."""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from billing.domain import logger
from billing.gateway.port import ReconciliationReport
from billing.mpesa.transaction import MpesaTransaction, MpesaTransactionStatus
from billing.payment.payment import Payment, PaymentStatus
from billing.shared.money import round_to_minor_unit


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _summary(transaction: MpesaTransaction, payment: Payment | None) -> dict:
    return {
        "checkout_request_id": transaction.checkout_request_id,
        "payment_id": str(transaction.payment_id) if transaction.payment_id else None,
        "amount": transaction.amount,
        "phone_number": transaction.phone_number,
        "mpesa_receipt_number": transaction.mpesa_receipt_number,
        "transaction_status": transaction.status,
        "payment_status": payment.status if payment else None,
    }


def _payment_for(transaction: MpesaTransaction) -> Payment | None:
    if not transaction.payment_id:
        return None
    try:
        return current_domain.repository_for(Payment).get(transaction.payment_id)
    except ObjectNotFoundError:
        return None


def reconcile_mpesa_transactions(gateway_name: str, start_date: datetime, end_date: datetime) -> ReconciliationReport:
    """Sort the window's transactions into matched, unconfirmed, pending and failed.

    A completed transaction is *matched* when its payment is completed too,
    and *unconfirmed* when the payment has not caught up (or is missing).
    """
    start_date, end_date = _as_utc(start_date), _as_utc(end_date)
    report = ReconciliationReport(gateway_name=gateway_name, start_date=start_date, end_date=end_date)

    transactions = current_domain.repository_for(MpesaTransaction).find_between(start_date, end_date)
    for transaction in transactions:
        payment = _payment_for(transaction)
        entry = _summary(transaction, payment)

        if transaction.status == MpesaTransactionStatus.PENDING.value:
            report.pending.append(entry)
        elif transaction.status == MpesaTransactionStatus.FAILED.value:
            report.failed.append(entry)
        elif payment is not None and payment.status == PaymentStatus.COMPLETED.value:
            report.matched.append(entry)
            report.matched_amount += transaction.amount
        else:
            report.unconfirmed.append(entry)
            report.unconfirmed_amount += transaction.amount

    report.matched_amount = round_to_minor_unit(report.matched_amount, "KES")
    report.unconfirmed_amount = round_to_minor_unit(report.unconfirmed_amount, "KES")

    logger.info(
        "mpesa_reconciliation_completed",
        gateway_name=gateway_name,
        matched=len(report.matched),
        unconfirmed=len(report.unconfirmed),
        pending=len(report.pending),
        failed=len(report.failed),
    )
    return report
