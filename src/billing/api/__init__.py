"""Billing domain API package."""

from billing.api.routes import gateway_router, payment_router

__all__ = ["payment_router", "gateway_router"]
