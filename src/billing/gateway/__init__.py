"""Payment gateway factory.

Maps each provider-type tag to its adapter class. ``build_gateway`` returns
``None`` for tags it does not know, so callers decide how to report them.
"""

from billing.gateway.bank_transfer_adapter import BankTransferGateway
from billing.gateway.hosted_checkout import FlutterwaveGateway, PaystackGateway, StripeGateway
from billing.gateway.mpesa_adapter import MpesaGateway
from billing.gateway.port import GatewayProfile, GatewayType, PaymentGateway

_GATEWAY_CLASSES: dict[str, type[PaymentGateway]] = {
    GatewayType.MPESA.value: MpesaGateway,
    GatewayType.STRIPE.value: StripeGateway,
    GatewayType.FLUTTERWAVE.value: FlutterwaveGateway,
    GatewayType.PAYSTACK.value: PaystackGateway,
    GatewayType.BANK_TRANSFER.value: BankTransferGateway,
}


def build_gateway(profile: GatewayProfile) -> PaymentGateway | None:
    """Instantiate the adapter for ``profile.gateway_type``."""
    gateway_class = _GATEWAY_CLASSES.get(profile.gateway_type)
    if gateway_class is None:
        return None
    return gateway_class(profile)
