"""Gateway administration: commands and handler.

Changes here are durable immediately but only reach the in-memory registry
on the next ``GatewayRegistry.load_configs()``.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, String, Text
from protean.utils.globals import current_domain

from billing.domain import billing, logger
from billing.gateway_config.gateway_config import GatewayConfig


@billing.command(part_of="GatewayConfig")
class RegisterGateway:
    """Configure a new payment gateway."""

    gateway_name = String(required=True, max_length=100)
    gateway_type = String(required=True, max_length=50)
    provider = String(max_length=100)
    configuration = Text()  # JSON object
    processing_fee_percent = Float(default=0.0)
    processing_fee_fixed = Float(default=0.0)
    supported_currencies = Text()  # JSON list, defaults to ["KES"]
    webhook_url = String(max_length=500)
    is_active = Boolean(default=True)


@billing.command(part_of="GatewayConfig")
class UpdateGatewayFees:
    gateway_name = String(required=True, max_length=100)
    processing_fee_percent = Float(required=True)
    processing_fee_fixed = Float(required=True)


@billing.command(part_of="GatewayConfig")
class UpdateGatewayCurrencies:
    gateway_name = String(required=True, max_length=100)
    supported_currencies = Text(required=True)  # JSON list


@billing.command(part_of="GatewayConfig")
class ActivateGateway:
    gateway_name = String(required=True, max_length=100)


@billing.command(part_of="GatewayConfig")
class DeactivateGateway:
    gateway_name = String(required=True, max_length=100)


def _load_json(value):
    if isinstance(value, str):
        return json.loads(value) if value.strip() else None
    return value


@billing.command_handler(part_of=GatewayConfig)
class GatewayConfigCommandHandler:
    @handle(RegisterGateway)
    def register_gateway(self, command):
        repo = current_domain.repository_for(GatewayConfig)
        if repo.exists(command.gateway_name):
            raise ValidationError({"gateway_name": [f"Gateway {command.gateway_name} is already configured"]})

        config = GatewayConfig.register(
            gateway_name=command.gateway_name,
            gateway_type=command.gateway_type,
            provider=command.provider,
            configuration=_load_json(command.configuration),
            processing_fee_percent=command.processing_fee_percent,
            processing_fee_fixed=command.processing_fee_fixed,
            supported_currencies=_load_json(command.supported_currencies),
            webhook_url=command.webhook_url,
            is_active=command.is_active if command.is_active is not None else True,
        )
        repo.add(config)

        logger.info(
            "gateway_registered",
            gateway_name=config.gateway_name,
            gateway_type=config.gateway_type,
        )
        return str(config.id)

    @handle(UpdateGatewayFees)
    def update_fees(self, command):
        repo = current_domain.repository_for(GatewayConfig)
        config = repo.find_by_name(command.gateway_name)
        config.update_fees(command.processing_fee_percent, command.processing_fee_fixed)
        repo.add(config)

    @handle(UpdateGatewayCurrencies)
    def update_currencies(self, command):
        repo = current_domain.repository_for(GatewayConfig)
        config = repo.find_by_name(command.gateway_name)
        config.update_currencies(_load_json(command.supported_currencies))
        repo.add(config)

    @handle(ActivateGateway)
    def activate(self, command):
        repo = current_domain.repository_for(GatewayConfig)
        config = repo.find_by_name(command.gateway_name)
        config.activate()
        repo.add(config)

    @handle(DeactivateGateway)
    def deactivate(self, command):
        repo = current_domain.repository_for(GatewayConfig)
        config = repo.find_by_name(command.gateway_name)
        config.deactivate()
        repo.add(config)
        logger.info("gateway_deactivated", gateway_name=config.gateway_name)
