"""Pydantic request/response schemas for the billing API.

These are external contracts, kept separate from the internal Protean
commands and the gateway dataclasses.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Payment schemas
# ---------------------------------------------------------------------------
class ProcessPaymentRequest(BaseModel):
    customer_id: str
    amount: float = Field(gt=0)
    currency: str = Field(default="KES", min_length=3, max_length=3)
    payment_method: str
    description: str | None = None
    reference: str | None = None
    metadata: dict = Field(default_factory=dict)
    callback_url: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "1001",
                    "amount": 2500,
                    "currency": "KES",
                    "payment_method": "mobile_money",
                    "description": "Home Fibre 20Mbps - October",
                    "metadata": {"phone_number": "254712345678"},
                }
            ]
        }
    }


class PaymentResultResponse(BaseModel):
    success: bool
    payment_id: str | None = None
    transaction_id: str | None = None
    checkout_url: str | None = None
    message: str | None = None
    error: str | None = None
    gateway_used: str | None = None


class RefundPaymentRequest(BaseModel):
    amount: float | None = Field(default=None, gt=0)
    reason: str | None = None


class RefundSchema(BaseModel):
    refund_id: str
    amount: float
    reason: str | None = None
    status: str
    refund_reference: str | None = None
    processed_at: datetime | None = None


class PaymentDetailResponse(BaseModel):
    payment_id: str
    customer_id: str
    amount: float
    processing_fee: float
    net_amount: float
    currency: str
    payment_method: str
    status: str
    reference_number: str
    gateway_used: str
    external_transaction_id: str | None = None
    description: str | None = None
    refunds: list[RefundSchema] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class VerificationResponse(BaseModel):
    payment_id: str
    verified: bool


# ---------------------------------------------------------------------------
# Gateway schemas
# ---------------------------------------------------------------------------
class RegisterGatewayRequest(BaseModel):
    gateway_name: str
    gateway_type: str
    provider: str | None = None
    configuration: dict = Field(default_factory=dict)
    processing_fee_percent: float = Field(default=0.0, ge=0)
    processing_fee_fixed: float = Field(default=0.0, ge=0)
    supported_currencies: list[str] = Field(default_factory=lambda: ["KES"])
    webhook_url: str | None = None
    is_active: bool = True


class UpdateGatewayFeesRequest(BaseModel):
    processing_fee_percent: float = Field(ge=0)
    processing_fee_fixed: float = Field(ge=0)


class UpdateGatewayCurrenciesRequest(BaseModel):
    supported_currencies: list[str] = Field(min_length=1)


class ReconcileRequest(BaseModel):
    start_date: datetime
    end_date: datetime


class GatewayIdResponse(BaseModel):
    gateway_config_id: str


class GatewaySchema(BaseModel):
    gateway_name: str
    gateway_type: str
    provider: str | None = None
    is_active: bool
    processing_fee_percent: float
    processing_fee_fixed: float
    supported_currencies: list[str]
    webhook_url: str | None = None
    loaded: bool


class GatewayListResponse(BaseModel):
    gateways: list[GatewaySchema]


class ReloadResponse(BaseModel):
    loaded: int
    gateways: list[str]


class StatusResponse(BaseModel):
    status: str
