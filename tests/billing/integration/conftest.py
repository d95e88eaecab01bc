import pytest
from billing.api.routes import gateway_router, payment_router
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean.integrations.fastapi import register_exception_handlers


@pytest.fixture()
def client(orchestrator):
    app = FastAPI()
    app.include_router(payment_router)
    app.include_router(gateway_router)
    register_exception_handlers(app)
    app.state.orchestrator = orchestrator
    return TestClient(app)
