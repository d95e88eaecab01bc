"""Lowest-fee gateway selection.

A gateway qualifies when it is active, lists the currency, and its provider
type handles the payment method. Among qualifiers the lowest processing fee
wins; equal fees fall back to the alphabetically first gateway name so the
choice never depends on load order.
"""

from dataclasses import dataclass

from billing.gateway.fake_adapter import FAKE_GATEWAY_TYPE
from billing.gateway.port import GatewayProfile, GatewayType, PaymentGateway
from billing.gateway.registry import GatewayRegistry

SUPPORTED_METHODS: dict[str, frozenset[str]] = {
    GatewayType.MPESA.value: frozenset({"mpesa", "mobile_money"}),
    GatewayType.STRIPE.value: frozenset({"card", "bank_transfer", "wallet"}),
    GatewayType.FLUTTERWAVE.value: frozenset({"card", "bank_transfer", "mobile_money", "wallet"}),
    GatewayType.PAYSTACK.value: frozenset({"card", "bank_transfer", "mobile_money"}),
    GatewayType.BANK_TRANSFER.value: frozenset({"bank_transfer", "wire_transfer"}),
}


def is_method_supported(gateway_type: str, payment_method: str) -> bool:
    if gateway_type == FAKE_GATEWAY_TYPE:
        return True
    return payment_method in SUPPORTED_METHODS.get(gateway_type, frozenset())


@dataclass(frozen=True)
class GatewaySelection:
    name: str
    profile: GatewayProfile
    gateway: PaymentGateway
    fee: float


class GatewaySelector:
    def __init__(self, registry: GatewayRegistry) -> None:
        self.registry = registry

    def candidates(self, payment_method: str, currency: str, amount: float) -> list[GatewaySelection]:
        """Every qualifying gateway, cheapest first."""
        selections = [
            GatewaySelection(
                name=entry.name,
                profile=entry.profile,
                gateway=entry.gateway,
                fee=entry.profile.processing_fee(amount, currency),
            )
            for entry in self.registry.entries()
            if entry.profile.is_active
            and entry.profile.supports_currency(currency)
            and is_method_supported(entry.profile.gateway_type, payment_method)
        ]
        return sorted(selections, key=lambda selection: (selection.fee, selection.name))

    def select(self, payment_method: str, currency: str, amount: float) -> GatewaySelection | None:
        candidates = self.candidates(payment_method, currency, amount)
        return candidates[0] if candidates else None
