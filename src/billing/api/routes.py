"""FastAPI routes for the billing domain: payments and gateway administration."""

import json

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from billing.api.schemas import (
    GatewayIdResponse,
    GatewayListResponse,
    GatewaySchema,
    PaymentDetailResponse,
    PaymentResultResponse,
    ProcessPaymentRequest,
    ReconcileRequest,
    RefundPaymentRequest,
    RefundSchema,
    RegisterGatewayRequest,
    ReloadResponse,
    StatusResponse,
    UpdateGatewayCurrenciesRequest,
    UpdateGatewayFeesRequest,
    VerificationResponse,
)
from billing.gateway.port import PaymentRequest, ReconciliationNotSupportedError
from billing.gateway.registry import GatewayRegistry
from billing.gateway_config.gateway_config import GatewayConfig
from billing.gateway_config.management import (
    ActivateGateway,
    DeactivateGateway,
    RegisterGateway,
    UpdateGatewayCurrencies,
    UpdateGatewayFees,
)
from billing.payment.orchestrator import PaymentOrchestrator
from billing.payment.payment import Payment


def get_orchestrator(request: Request) -> PaymentOrchestrator:
    return request.app.state.orchestrator


def get_registry(request: Request) -> GatewayRegistry:
    return request.app.state.orchestrator.registry


def _process_for_gateway(command) -> None:
    try:
        current_domain.process(command, asynchronous=False)
    except ObjectNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Gateway {command.gateway_name} not found") from exc


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("", status_code=201, response_model=PaymentResultResponse)
async def process_payment(
    body: ProcessPaymentRequest,
    response: Response,
    orchestrator: PaymentOrchestrator = Depends(get_orchestrator),
) -> PaymentResultResponse:
    """Route a payment to the cheapest gateway. Declines come back as 402 with the failure body."""
    result = orchestrator.process_payment(PaymentRequest(**body.model_dump()))
    if not result.success:
        response.status_code = 402
    return PaymentResultResponse(**result.to_dict())


@payment_router.post("/{payment_id}/refund", response_model=PaymentResultResponse)
async def refund_payment(
    payment_id: str,
    body: RefundPaymentRequest,
    orchestrator: PaymentOrchestrator = Depends(get_orchestrator),
) -> PaymentResultResponse:
    result = orchestrator.refund_payment(payment_id, amount=body.amount, reason=body.reason)
    if not result.success:
        status_code = 404 if result.error == "Payment not found" else 400
        raise HTTPException(status_code=status_code, detail=result.error)
    return PaymentResultResponse(**result.to_dict())


@payment_router.get("/{payment_id}", response_model=PaymentDetailResponse)
async def get_payment(payment_id: str) -> PaymentDetailResponse:
    try:
        payment = current_domain.repository_for(Payment).get(payment_id)
    except ObjectNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Payment not found") from exc
    return PaymentDetailResponse(
        payment_id=str(payment.id),
        customer_id=str(payment.customer_id),
        amount=payment.amount,
        processing_fee=payment.processing_fee,
        net_amount=payment.net_amount,
        currency=payment.currency,
        payment_method=payment.payment_method,
        status=payment.status,
        reference_number=payment.reference_number,
        gateway_used=payment.gateway_used,
        external_transaction_id=payment.external_transaction_id,
        description=payment.description,
        refunds=[
            RefundSchema(
                refund_id=str(refund.id),
                amount=refund.amount,
                reason=refund.reason,
                status=refund.status,
                refund_reference=refund.refund_reference,
                processed_at=refund.processed_at,
            )
            for refund in payment.refunds
        ],
        created_at=payment.created_at,
        updated_at=payment.updated_at,
    )


@payment_router.get("/{payment_id}/verify", response_model=VerificationResponse)
async def verify_payment(
    payment_id: str,
    orchestrator: PaymentOrchestrator = Depends(get_orchestrator),
) -> VerificationResponse:
    return VerificationResponse(payment_id=payment_id, verified=orchestrator.verify_payment(payment_id))


# ---------------------------------------------------------------------------
# Gateway Router
# ---------------------------------------------------------------------------
gateway_router = APIRouter(prefix="/gateways", tags=["gateways"])


@gateway_router.post("", status_code=201, response_model=GatewayIdResponse)
async def register_gateway(body: RegisterGatewayRequest) -> GatewayIdResponse:
    """Configure a gateway. It takes traffic after the next reload."""
    command = RegisterGateway(
        gateway_name=body.gateway_name,
        gateway_type=body.gateway_type,
        provider=body.provider,
        configuration=json.dumps(body.configuration),
        processing_fee_percent=body.processing_fee_percent,
        processing_fee_fixed=body.processing_fee_fixed,
        supported_currencies=json.dumps(body.supported_currencies),
        webhook_url=body.webhook_url,
        is_active=body.is_active,
    )
    gateway_config_id = current_domain.process(command, asynchronous=False)
    return GatewayIdResponse(gateway_config_id=gateway_config_id)


@gateway_router.get("", response_model=GatewayListResponse)
async def list_gateways(registry: GatewayRegistry = Depends(get_registry)) -> GatewayListResponse:
    configs = current_domain.repository_for(GatewayConfig).find_all()
    return GatewayListResponse(
        gateways=[
            GatewaySchema(
                gateway_name=config.gateway_name,
                gateway_type=config.gateway_type,
                provider=config.provider,
                is_active=bool(config.is_active),
                processing_fee_percent=config.processing_fee_percent or 0.0,
                processing_fee_fixed=config.processing_fee_fixed or 0.0,
                supported_currencies=config.currency_codes,
                webhook_url=config.webhook_url,
                loaded=config.gateway_name in registry,
            )
            for config in configs
        ]
    )


@gateway_router.post("/reload", response_model=ReloadResponse)
async def reload_gateways(registry: GatewayRegistry = Depends(get_registry)) -> ReloadResponse:
    loaded = registry.load_configs()
    return ReloadResponse(loaded=loaded, gateways=registry.names())


@gateway_router.put("/{gateway_name}/fees", response_model=StatusResponse)
async def update_gateway_fees(gateway_name: str, body: UpdateGatewayFeesRequest) -> StatusResponse:
    command = UpdateGatewayFees(
        gateway_name=gateway_name,
        processing_fee_percent=body.processing_fee_percent,
        processing_fee_fixed=body.processing_fee_fixed,
    )
    _process_for_gateway(command)
    return StatusResponse(status="fees_updated")


@gateway_router.put("/{gateway_name}/currencies", response_model=StatusResponse)
async def update_gateway_currencies(gateway_name: str, body: UpdateGatewayCurrenciesRequest) -> StatusResponse:
    command = UpdateGatewayCurrencies(
        gateway_name=gateway_name,
        supported_currencies=json.dumps(body.supported_currencies),
    )
    _process_for_gateway(command)
    return StatusResponse(status="currencies_updated")


@gateway_router.put("/{gateway_name}/activate", response_model=StatusResponse)
async def activate_gateway(gateway_name: str) -> StatusResponse:
    _process_for_gateway(ActivateGateway(gateway_name=gateway_name))
    return StatusResponse(status="activated")


@gateway_router.put("/{gateway_name}/deactivate", response_model=StatusResponse)
async def deactivate_gateway(gateway_name: str) -> StatusResponse:
    _process_for_gateway(DeactivateGateway(gateway_name=gateway_name))
    return StatusResponse(status="deactivated")


@gateway_router.post("/{gateway_name}/reconcile")
async def reconcile_gateway(
    gateway_name: str,
    body: ReconcileRequest,
    orchestrator: PaymentOrchestrator = Depends(get_orchestrator),
) -> dict:
    try:
        report = orchestrator.reconcile_payments(gateway_name, body.start_date, body.end_date)
    except ReconciliationNotSupportedError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return report.to_dict()
