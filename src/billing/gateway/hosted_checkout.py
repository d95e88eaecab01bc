"""Hosted-checkout adapters (Stripe, Flutterwave, Paystack).

The customer is redirected to the provider's checkout page; the provider
confirms the charge through its webhook, which lands outside this service
and marks the Payment completed.
"""

from uuid import uuid4

from protean.utils.globals import current_domain

from billing.domain import logger
from billing.gateway.port import ChargeRequest, PaymentGateway, PaymentResponse
from billing.payment.payment import Payment, PaymentStatus


class HostedCheckoutGateway(PaymentGateway):
    """Base for providers that hand back a checkout URL."""

    transaction_prefix: str = ""
    refund_prefix: str = ""
    default_checkout_base_url: str = ""
    session_message: str = ""
    refund_message: str = "Refund processed successfully"

    @property
    def checkout_base_url(self) -> str:
        return self.configuration.get("checkout_base_url", self.default_checkout_base_url).rstrip("/")

    def process_payment(self, charge: ChargeRequest) -> PaymentResponse:
        transaction_id = f"{self.transaction_prefix}{uuid4().hex}"
        checkout_url = f"{self.checkout_base_url}/{charge.payment_id}"

        logger.info(
            "checkout_session_created",
            gateway=self.name,
            payment_id=charge.payment_id,
            transaction_id=transaction_id,
        )
        return PaymentResponse(
            success=True,
            transaction_id=transaction_id,
            checkout_url=checkout_url,
            message=self.session_message,
        )

    def verify_payment(self, transaction_id: str) -> bool:
        # TODO: call the provider's verify endpoint once API credentials are provisioned
        payment = current_domain.repository_for(Payment).find_by_external_transaction_id(transaction_id)
        return payment is not None and payment.status == PaymentStatus.COMPLETED.value

    def refund_payment(self, payment_id: str, amount: float | None = None) -> PaymentResponse:
        refund_id = f"{self.refund_prefix}{uuid4().hex}"
        logger.info("refund_submitted", gateway=self.name, payment_id=payment_id, refund_id=refund_id)
        return PaymentResponse(success=True, transaction_id=refund_id, message=self.refund_message)


class StripeGateway(HostedCheckoutGateway):
    transaction_prefix = "pi_"
    refund_prefix = "re_"
    default_checkout_base_url = "https://checkout.stripe.com/pay"
    session_message = "Stripe payment session created"


class FlutterwaveGateway(HostedCheckoutGateway):
    transaction_prefix = "flw_tx_"
    refund_prefix = "flw_rf_"
    default_checkout_base_url = "https://checkout.flutterwave.com/v3/hosted/pay"
    session_message = "Flutterwave payment link created"
    refund_message = "Refund initiated successfully"


class PaystackGateway(HostedCheckoutGateway):
    transaction_prefix = "ps_"
    refund_prefix = "ps_rf_"
    default_checkout_base_url = "https://checkout.paystack.com"
    session_message = "Paystack payment initialized"
