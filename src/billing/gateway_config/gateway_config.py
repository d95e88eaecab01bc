"""GatewayConfig aggregate: administrator-managed payment gateway settings.

Rows are the durable source of truth. The in-memory registry only ever sees
them as ``GatewayProfile`` snapshots taken by ``GatewayRegistry.load_configs``.
"""

import json
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, String, Text

from billing.domain import billing
from billing.gateway.port import GatewayProfile, GatewayType
from billing.gateway_config.events import (
    GatewayActivated,
    GatewayCurrenciesUpdated,
    GatewayDeactivated,
    GatewayFeesUpdated,
    GatewayRegistered,
)

DEFAULT_CURRENCIES = ("KES",)


def _normalize_currencies(currencies) -> list[str]:
    if isinstance(currencies, str):
        currencies = json.loads(currencies) if currencies.strip() else []
    return [code.strip().upper() for code in currencies or [] if code and code.strip()]


@billing.aggregate(schema_name="payment_gateway_configs")
class GatewayConfig:
    gateway_name = String(required=True, max_length=100, unique=True)
    gateway_type = String(required=True, max_length=50)
    provider = String(max_length=100)
    is_active = Boolean(default=True)
    configuration = Text()  # JSON object: credentials, endpoints, checkout host
    processing_fee_percent = Float(min_value=0.0)
    processing_fee_fixed = Float(min_value=0.0)
    supported_currencies = Text()  # JSON list of ISO codes
    webhook_url = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(
        cls,
        gateway_name: str,
        gateway_type: str,
        provider: str | None = None,
        configuration: dict | None = None,
        processing_fee_percent: float = 0.0,
        processing_fee_fixed: float = 0.0,
        supported_currencies: list[str] | None = None,
        webhook_url: str | None = None,
        is_active: bool = True,
    ):
        """Configure a new gateway. Only known provider types are accepted."""
        if gateway_type not in {member.value for member in GatewayType}:
            raise ValidationError({"gateway_type": [f"Unsupported gateway type: {gateway_type}"]})

        now = datetime.now(UTC)
        currencies = _normalize_currencies(supported_currencies) or list(DEFAULT_CURRENCIES)
        config = cls(
            gateway_name=gateway_name,
            gateway_type=gateway_type,
            provider=provider or gateway_name,
            is_active=is_active,
            configuration=json.dumps(configuration or {}),
            processing_fee_percent=processing_fee_percent or 0.0,
            processing_fee_fixed=processing_fee_fixed or 0.0,
            supported_currencies=json.dumps(currencies),
            webhook_url=webhook_url,
            created_at=now,
            updated_at=now,
        )
        config.raise_(
            GatewayRegistered(
                gateway_config_id=str(config.id),
                gateway_name=gateway_name,
                gateway_type=gateway_type,
                provider=config.provider,
                is_active=is_active,
                processing_fee_percent=config.processing_fee_percent,
                processing_fee_fixed=config.processing_fee_fixed,
                supported_currencies=config.supported_currencies,
                registered_at=now,
            )
        )
        return config

    @property
    def currency_codes(self) -> list[str]:
        return _normalize_currencies(self.supported_currencies)

    @property
    def configuration_data(self) -> dict:
        if not self.configuration:
            return {}
        return json.loads(self.configuration)

    def update_fees(self, processing_fee_percent: float, processing_fee_fixed: float) -> None:
        if processing_fee_percent < 0 or processing_fee_fixed < 0:
            raise ValidationError({"processing_fee": ["Fees cannot be negative"]})

        now = datetime.now(UTC)
        self.processing_fee_percent = processing_fee_percent
        self.processing_fee_fixed = processing_fee_fixed
        self.updated_at = now
        self.raise_(
            GatewayFeesUpdated(
                gateway_config_id=str(self.id),
                gateway_name=self.gateway_name,
                processing_fee_percent=processing_fee_percent,
                processing_fee_fixed=processing_fee_fixed,
                updated_at=now,
            )
        )

    def update_currencies(self, currencies: list[str]) -> None:
        codes = _normalize_currencies(currencies)
        if not codes:
            raise ValidationError({"supported_currencies": ["At least one currency is required"]})

        now = datetime.now(UTC)
        self.supported_currencies = json.dumps(codes)
        self.updated_at = now
        self.raise_(
            GatewayCurrenciesUpdated(
                gateway_config_id=str(self.id),
                gateway_name=self.gateway_name,
                supported_currencies=self.supported_currencies,
                updated_at=now,
            )
        )

    def activate(self) -> None:
        if self.is_active:
            raise ValidationError({"is_active": [f"Gateway {self.gateway_name} is already active"]})

        now = datetime.now(UTC)
        self.is_active = True
        self.updated_at = now
        self.raise_(
            GatewayActivated(
                gateway_config_id=str(self.id),
                gateway_name=self.gateway_name,
                activated_at=now,
            )
        )

    def deactivate(self) -> None:
        if not self.is_active:
            raise ValidationError({"is_active": [f"Gateway {self.gateway_name} is already inactive"]})

        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now
        self.raise_(
            GatewayDeactivated(
                gateway_config_id=str(self.id),
                gateway_name=self.gateway_name,
                deactivated_at=now,
            )
        )

    def to_profile(self) -> GatewayProfile:
        """Snapshot the row, applying defaults for absent fees, currencies and provider."""
        return GatewayProfile(
            name=self.gateway_name,
            gateway_type=self.gateway_type,
            provider=self.provider or self.gateway_name,
            is_active=bool(self.is_active),
            processing_fee_percent=self.processing_fee_percent or 0.0,
            processing_fee_fixed=self.processing_fee_fixed or 0.0,
            supported_currencies=tuple(self.currency_codes) or DEFAULT_CURRENCIES,
            configuration=self.configuration_data,
            webhook_url=self.webhook_url,
            config_id=str(self.id),
        )
