import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def billing_bed():
    from billing.domain import billing

    bed = DomainFixture(billing)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(billing_bed):
    from protean import current_domain

    with billing_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Registry / orchestrator fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def registry():
    from billing.gateway.registry import GatewayRegistry

    return GatewayRegistry()


@pytest.fixture()
def add_gateway(registry):
    """Register a gateway directly in the registry and return its adapter.

    Fake gateways are the default; any ``GatewayType`` value builds the real adapter.
    """
    from billing.gateway import build_gateway
    from billing.gateway.fake_adapter import FAKE_GATEWAY_TYPE, FakeGateway
    from billing.gateway.port import GatewayProfile

    def _add(
        name,
        gateway_type=FAKE_GATEWAY_TYPE,
        percent=0.0,
        fixed=0.0,
        currencies=("KES",),
        configuration=None,
        is_active=True,
    ):
        profile = GatewayProfile(
            name=name,
            gateway_type=gateway_type,
            provider=name,
            is_active=is_active,
            processing_fee_percent=percent,
            processing_fee_fixed=fixed,
            supported_currencies=tuple(currencies),
            configuration=configuration or {},
        )
        gateway = FakeGateway(profile) if gateway_type == FAKE_GATEWAY_TYPE else build_gateway(profile)
        registry.register(profile, gateway)
        return gateway

    return _add


@pytest.fixture()
def isp_gateways(add_gateway):
    """M-Pesa for shillings at 1% flat, Stripe for KES/USD cards at 2.9% + 30."""
    return {
        "mpesa": add_gateway("mpesa", gateway_type="mpesa", percent=1.0, fixed=0.0, currencies=["KES"]),
        "stripe": add_gateway("stripe", gateway_type="stripe", percent=2.9, fixed=30.0, currencies=["KES", "USD"]),
    }


@pytest.fixture()
def orchestrator(registry):
    from billing.activity.logger import ActivityLogger
    from billing.payment.orchestrator import PaymentOrchestrator

    return PaymentOrchestrator(registry, ActivityLogger())


@pytest.fixture()
def payment_request():
    """Build a PaymentRequest with sensible defaults."""
    from billing.gateway.port import PaymentRequest

    def _build(**overrides):
        fields = {
            "customer_id": "1001",
            "amount": 1000.0,
            "currency": "KES",
            "payment_method": "mobile_money",
            "description": "Home Fibre 10Mbps",
            "metadata": {"phone_number": "254712345678"},
        }
        fields.update(overrides)
        return PaymentRequest(**fields)

    return _build
