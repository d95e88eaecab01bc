"""Domain events for the GatewayConfig aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, String, Text

from billing.domain import billing


@billing.event(part_of="GatewayConfig")
class GatewayRegistered:
    """An administrator configured a new payment gateway."""

    __version__ = 1

    gateway_config_id = Identifier(required=True)
    gateway_name = String(required=True)
    gateway_type = String(required=True)
    provider = String()
    is_active = Boolean(default=True)
    processing_fee_percent = Float(default=0.0)
    processing_fee_fixed = Float(default=0.0)
    supported_currencies = Text()  # JSON list of ISO codes
    registered_at = DateTime(required=True)


@billing.event(part_of="GatewayConfig")
class GatewayFeesUpdated:
    __version__ = 1

    gateway_config_id = Identifier(required=True)
    gateway_name = String(required=True)
    processing_fee_percent = Float(required=True)
    processing_fee_fixed = Float(required=True)
    updated_at = DateTime(required=True)


@billing.event(part_of="GatewayConfig")
class GatewayCurrenciesUpdated:
    __version__ = 1

    gateway_config_id = Identifier(required=True)
    gateway_name = String(required=True)
    supported_currencies = Text(required=True)
    updated_at = DateTime(required=True)


@billing.event(part_of="GatewayConfig")
class GatewayActivated:
    __version__ = 1

    gateway_config_id = Identifier(required=True)
    gateway_name = String(required=True)
    activated_at = DateTime(required=True)


@billing.event(part_of="GatewayConfig")
class GatewayDeactivated:
    """The gateway stops taking new payments once the registry is reloaded."""

    __version__ = 1

    gateway_config_id = Identifier(required=True)
    gateway_name = String(required=True)
    deactivated_at = DateTime(required=True)
