"""ISP billing FastAPI application.

Processes payments and gateway administration synchronously over HTTP.
Every request runs inside the billing domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from billing.activity.logger import ActivityLogger
from billing.domain import billing, logger
from billing.gateway.registry import GatewayRegistry
from billing.payment.orchestrator import PaymentOrchestrator

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the config overlay ("production" → PostgreSQL).
billing.init()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the gateway registry from stored configuration before serving."""
    registry = GatewayRegistry()
    with billing.domain_context():
        loaded = registry.load_configs()
    logger.info("billing_api_started", gateways_loaded=loaded)

    app.state.orchestrator = PaymentOrchestrator(registry, ActivityLogger())
    yield


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="ISP Billing API",
    description="Multi-gateway payment processing, refunds and reconciliation",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the billing domain context for each request."""
    with billing.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from billing.api import gateway_router, payment_router  # noqa: E402

app.include_router(payment_router)
app.include_router(gateway_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health(request: Request):
    orchestrator = getattr(request.app.state, "orchestrator", None)
    return JSONResponse(
        content={
            "status": "ok",
            "domain": billing.name,
            "gateways": orchestrator.registry.names() if orchestrator else [],
        }
    )
