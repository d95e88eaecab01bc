"""Payment gateway port (abstract interface).

Every provider adapter implements the same three operations, so the
orchestrator never needs to know which rail a payment travels on. Adapters
that can match their own transaction log against recorded payments also
derive from ``ReconcilingGateway``.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from billing.shared.money import calculate_processing_fee


class GatewayType(Enum):
    MPESA = "mpesa"
    STRIPE = "stripe"
    FLUTTERWAVE = "flutterwave"
    PAYSTACK = "paystack"
    BANK_TRANSFER = "bank_transfer"


class ReconciliationNotSupportedError(Exception):
    """Raised when reconciliation is requested from a gateway that cannot reconcile."""


@dataclass(frozen=True)
class GatewayProfile:
    """Immutable snapshot of one configured gateway, as loaded into the registry."""

    name: str
    gateway_type: str
    provider: str | None = None
    is_active: bool = True
    processing_fee_percent: float = 0.0
    processing_fee_fixed: float = 0.0
    supported_currencies: tuple[str, ...] = ("KES",)
    configuration: dict = field(default_factory=dict)
    webhook_url: str | None = None
    config_id: str | None = None

    def supports_currency(self, currency: str) -> bool:
        return currency in self.supported_currencies

    def processing_fee(self, amount: float, currency: str) -> float:
        return calculate_processing_fee(
            amount,
            self.processing_fee_percent,
            self.processing_fee_fixed,
            currency,
        )


@dataclass(frozen=True)
class PaymentRequest:
    """A customer's request to pay, before any gateway is chosen."""

    customer_id: str
    amount: float
    currency: str
    payment_method: str
    description: str | None = None
    reference: str | None = None
    metadata: dict = field(default_factory=dict)
    callback_url: str | None = None


@dataclass(frozen=True)
class ChargeRequest:
    """What an adapter receives: the original request plus the recorded payment."""

    payment_id: str
    reference: str
    request: PaymentRequest

    @property
    def amount(self) -> float:
        return self.request.amount

    @property
    def currency(self) -> str:
        return self.request.currency

    @property
    def description(self) -> str | None:
        return self.request.description

    @property
    def metadata(self) -> dict:
        return self.request.metadata


@dataclass(frozen=True)
class PaymentResponse:
    """Outcome of a payment or refund attempt. Failures are values, not exceptions."""

    success: bool
    payment_id: str | None = None
    transaction_id: str | None = None
    checkout_url: str | None = None
    message: str | None = None
    error: str | None = None
    gateway_used: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class ReconciliationReport:
    """Result of matching a gateway's transaction log against recorded payments."""

    gateway_name: str
    start_date: datetime
    end_date: datetime
    matched: list[dict] = field(default_factory=list)
    unconfirmed: list[dict] = field(default_factory=list)
    pending: list[dict] = field(default_factory=list)
    failed: list[dict] = field(default_factory=list)
    matched_amount: float = 0.0
    unconfirmed_amount: float = 0.0

    @property
    def total_transactions(self) -> int:
        return len(self.matched) + len(self.unconfirmed) + len(self.pending) + len(self.failed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "gateway_name": self.gateway_name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "matched": self.matched,
            "unconfirmed": self.unconfirmed,
            "pending": self.pending,
            "failed": self.failed,
            "matched_amount": self.matched_amount,
            "unconfirmed_amount": self.unconfirmed_amount,
            "total_transactions": self.total_transactions,
        }


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    def __init__(self, profile: GatewayProfile) -> None:
        self.profile = profile

    @property
    def name(self) -> str:
        return self.profile.name

    @property
    def configuration(self) -> dict:
        return self.profile.configuration

    @abstractmethod
    def process_payment(self, charge: ChargeRequest) -> PaymentResponse:
        """Start a payment with the provider."""
        ...

    @abstractmethod
    def verify_payment(self, transaction_id: str) -> bool:
        """Whether the provider has confirmed the transaction."""
        ...

    @abstractmethod
    def refund_payment(self, payment_id: str, amount: float | None = None) -> PaymentResponse:
        """Refund a previously processed payment."""
        ...


class ReconcilingGateway(PaymentGateway):
    """Gateway that can reconcile its transactions over a date range."""

    @abstractmethod
    def reconcile_payments(self, start_date: datetime, end_date: datetime) -> ReconciliationReport: ...
