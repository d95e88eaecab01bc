from protean.exceptions import ObjectNotFoundError

from billing.domain import billing
from billing.gateway_config.gateway_config import GatewayConfig


@billing.repository(part_of=GatewayConfig)
class GatewayConfigRepository:
    def find_by_name(self, gateway_name: str) -> GatewayConfig:
        """Raises ObjectNotFoundError when no gateway carries that name."""
        return self._dao.find_by(gateway_name=gateway_name)

    def exists(self, gateway_name: str) -> bool:
        try:
            self.find_by_name(gateway_name)
        except ObjectNotFoundError:
            return False
        return True

    def find_active(self) -> list[GatewayConfig]:
        return self._dao.query.filter(is_active=True).order_by("gateway_name").limit(None).all().items

    def find_all(self) -> list[GatewayConfig]:
        return self._dao.query.order_by("gateway_name").limit(None).all().items
