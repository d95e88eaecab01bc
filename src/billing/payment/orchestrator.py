"""Payment orchestration: gateway selection, payment recording and refunds.

``process_payment`` and ``refund_payment`` never raise: every failure comes
back as a ``PaymentResponse`` with ``success=False``. Only
``reconcile_payments`` lets an exception escape.
"""

from dataclasses import replace
from datetime import datetime

from protean.core.unit_of_work import UnitOfWork
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from billing.activity.activity_log import ActivityLevel
from billing.activity.logger import ActivityLogger
from billing.domain import logger
from billing.gateway.port import (
    ChargeRequest,
    PaymentGateway,
    PaymentRequest,
    PaymentResponse,
    ReconciliationNotSupportedError,
    ReconciliationReport,
    ReconcilingGateway,
)
from billing.gateway.registry import GatewayRegistry
from billing.gateway.selector import GatewaySelector
from billing.payment.payment import Payment

SYSTEM_USER = "system"


class NoSuitableGatewayError(Exception):
    """No active gateway handles the requested method and currency."""


def error_message(exc: Exception) -> str:
    """Readable text for an exception, flattening Protean's field -> messages dicts."""
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict) and messages:
        parts = []
        for field, errors in messages.items():
            errors = errors if isinstance(errors, list) else [errors]
            parts.append(f"{field}: {', '.join(str(error) for error in errors)}")
        return "; ".join(parts)
    return str(exc) or "Unknown error"


def format_amount(amount: float) -> str:
    amount = float(amount)
    return str(int(amount)) if amount.is_integer() else str(amount)


class PaymentOrchestrator:
    def __init__(
        self,
        registry: GatewayRegistry,
        activity_logger: ActivityLogger | None = None,
        selector: GatewaySelector | None = None,
    ) -> None:
        self.registry = registry
        self.activity_logger = activity_logger or ActivityLogger()
        self.selector = selector or GatewaySelector(registry)

    # -------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------
    def process_payment(self, request: PaymentRequest) -> PaymentResponse:
        """Route a payment to the cheapest qualifying gateway and record it.

        The pending insert, the single adapter call and the resulting status
        update share one unit of work, so a crash part-way through leaves no
        ``pending`` row behind.
        """
        try:
            selection = self.selector.select(request.payment_method, request.currency, request.amount)
            if selection is None:
                raise NoSuitableGatewayError(
                    f"No suitable gateway found for {request.payment_method} in {request.currency}"
                )

            repo = current_domain.repository_for(Payment)
            with UnitOfWork():
                payment = Payment.create(
                    customer_id=request.customer_id,
                    amount=request.amount,
                    currency=request.currency,
                    payment_method=request.payment_method,
                    gateway_used=selection.name,
                    processing_fee=selection.fee,
                    reference_number=request.reference,
                    description=request.description,
                    metadata=request.metadata,
                )
                repo.add(payment)

                charge = ChargeRequest(
                    payment_id=str(payment.id),
                    reference=payment.reference_number,
                    request=request,
                )
                result = self._charge(selection.gateway, charge)
                result = self._record_outcome(payment, result)
                repo.add(payment)

            outcome = "initiated" if result.success else "failed"
            self.activity_logger.log_admin_activity(
                f"Payment {outcome}: {request.payment_method} - {request.currency} {format_amount(request.amount)}",
                SYSTEM_USER,
                details={
                    "customer_id": request.customer_id,
                    "payment_id": str(payment.id),
                    "gateway_used": selection.name,
                    "amount": request.amount,
                    "processing_fee": selection.fee,
                },
                level=ActivityLevel.INFO.value if result.success else ActivityLevel.WARNING.value,
            )
            logger.info(
                "payment_processed",
                payment_id=str(payment.id),
                gateway=selection.name,
                status=payment.status,
                processing_fee=selection.fee,
            )
            return replace(result, payment_id=str(payment.id), gateway_used=selection.name)

        except Exception as exc:
            message = error_message(exc)
            logger.error(
                "payment_processing_failed",
                customer_id=request.customer_id,
                payment_method=request.payment_method,
                currency=request.currency,
                error=message,
            )
            self.activity_logger.log_admin_activity(
                f"Payment processing failed: {message}",
                SYSTEM_USER,
                details={
                    "customer_id": request.customer_id,
                    "amount": request.amount,
                    "payment_method": request.payment_method,
                    "error": message,
                },
                level=ActivityLevel.ERROR.value,
            )
            return PaymentResponse(success=False, error=message)

    def _charge(self, gateway: PaymentGateway, charge: ChargeRequest) -> PaymentResponse:
        """Call the adapter once, turning an adapter crash into a declined result."""
        try:
            return gateway.process_payment(charge)
        except Exception as exc:
            logger.error(
                "gateway_call_failed",
                gateway=gateway.name,
                payment_id=charge.payment_id,
                error=str(exc),
            )
            return PaymentResponse(success=False, error=str(exc) or f"{gateway.name} processing failed")

    def _record_outcome(self, payment: Payment, result: PaymentResponse) -> PaymentResponse:
        """Move the payment out of ``pending``.

        The provider has already been reached, so an outcome the row cannot
        hold still fails the payment, keeping the adapter's raw result.
        """
        try:
            if result.success:
                payment.submit(result.transaction_id, result.to_dict())
            else:
                payment.fail(result.error, result.to_dict())
            return result
        except ValidationError as exc:
            message = error_message(exc)
            logger.error(
                "payment_outcome_rejected",
                payment_id=str(payment.id),
                transaction_id=result.transaction_id,
                error=message,
            )
            payment.fail(message, {"success": False, "error": message, "adapter_response": result.to_dict()})
            return PaymentResponse(success=False, error=message)

    def verify_payment(self, payment_id: str) -> bool:
        """Ask the payment's gateway whether its transaction has been confirmed."""
        try:
            payment = current_domain.repository_for(Payment).get(payment_id)
        except ObjectNotFoundError:
            return False

        gateway = self.registry.gateway_for(payment.gateway_used)
        if gateway is None or not payment.external_transaction_id:
            return False
        return gateway.verify_payment(payment.external_transaction_id)

    # -------------------------------------------------------------------
    # Refunds
    # -------------------------------------------------------------------
    def refund_payment(
        self,
        payment_id: str,
        amount: float | None = None,
        reason: str | None = None,
    ) -> PaymentResponse:
        """Refund through the gateway that took the payment.

        A refund row is written only when the gateway reports success. A
        missing or zero amount refunds the full payment.
        Amounts already refunded are not checked against the payment total.
        """
        try:
            repo = current_domain.repository_for(Payment)
            try:
                payment = repo.get(payment_id)
            except ObjectNotFoundError:
                return PaymentResponse(success=False, payment_id=payment_id, error="Payment not found")

            gateway = self.registry.gateway_for(payment.gateway_used)
            if gateway is None:
                return PaymentResponse(
                    success=False,
                    payment_id=payment_id,
                    error="Gateway not available for refund",
                    gateway_used=payment.gateway_used,
                )

            refund_amount = amount or payment.amount
            if refund_amount < 0:
                return PaymentResponse(
                    success=False,
                    payment_id=payment_id,
                    error="Refund amount must be positive",
                    gateway_used=payment.gateway_used,
                )

            result = gateway.refund_payment(payment_id, refund_amount)
            result = replace(result, payment_id=payment_id, gateway_used=payment.gateway_used)
            if not result.success:
                logger.warning(
                    "refund_declined",
                    payment_id=payment_id,
                    gateway=payment.gateway_used,
                    error=result.error,
                )
                return result

            refund = payment.record_refund(amount=refund_amount, reason=reason, refund_reference=result.transaction_id)
            repo.add(payment)

            self.activity_logger.log_admin_activity(
                f"Refund processed: {payment.currency} {format_amount(refund.amount)} for payment {payment_id}",
                SYSTEM_USER,
                details={
                    "payment_id": payment_id,
                    "refund_amount": refund.amount,
                    "reason": refund.reason,
                },
            )
            logger.info("refund_recorded", payment_id=payment_id, refund_id=str(refund.id), amount=refund.amount)
            return result

        except Exception as exc:
            message = error_message(exc)
            logger.error("refund_processing_failed", payment_id=payment_id, error=message)
            return PaymentResponse(success=False, payment_id=payment_id, error=message)

    # -------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------
    def reconcile_payments(self, gateway_name: str, start_date: datetime, end_date: datetime) -> ReconciliationReport:
        gateway = self.registry.gateway_for(gateway_name)
        if not isinstance(gateway, ReconcilingGateway):
            raise ReconciliationNotSupportedError(f"Gateway {gateway_name} does not support reconciliation")
        return gateway.reconcile_payments(start_date, end_date)
