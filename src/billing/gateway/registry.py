"""In-memory registry of the gateways a process may route payments to.

The registry is an ordinary object built by the application and handed to
the orchestrator, so each test can work against its own isolated instance.
"""

from dataclasses import dataclass

from protean.utils.globals import current_domain

from billing.domain import logger
from billing.gateway import build_gateway
from billing.gateway.port import GatewayProfile, PaymentGateway
from billing.gateway_config.gateway_config import GatewayConfig


@dataclass(frozen=True)
class RegisteredGateway:
    profile: GatewayProfile
    gateway: PaymentGateway

    @property
    def name(self) -> str:
        return self.profile.name


class GatewayRegistry:
    def __init__(self) -> None:
        self._entries: dict[str, RegisteredGateway] = {}

    def load_configs(self) -> int:
        """Rebuild the registry from the active gateway configurations.

        Rows with a type no adapter exists for are skipped with a warning.
        The new map replaces the old one in a single assignment, so readers
        see either the previous snapshot or the new one. Returns the number
        of gateways loaded.
        """
        entries: dict[str, RegisteredGateway] = {}
        for config in current_domain.repository_for(GatewayConfig).find_active():
            profile = config.to_profile()
            gateway = build_gateway(profile)
            if gateway is None:
                logger.warning(
                    "gateway_type_unsupported",
                    gateway_name=profile.name,
                    gateway_type=profile.gateway_type,
                )
                continue
            entries[profile.name] = RegisteredGateway(profile=profile, gateway=gateway)

        self._entries = entries
        logger.info("gateway_registry_loaded", gateways=list(entries))
        return len(entries)

    def register(self, profile: GatewayProfile, gateway: PaymentGateway) -> None:
        """Add or replace one gateway without touching storage."""
        entries = dict(self._entries)
        entries[profile.name] = RegisteredGateway(profile=profile, gateway=gateway)
        self._entries = entries

    def get(self, name: str) -> RegisteredGateway | None:
        return self._entries.get(name)

    def gateway_for(self, name: str) -> PaymentGateway | None:
        entry = self._entries.get(name)
        return entry.gateway if entry else None

    def entries(self) -> list[RegisteredGateway]:
        return list(self._entries.values())

    def names(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries
