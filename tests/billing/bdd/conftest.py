"""Shared BDD fixtures and step definitions for the billing domain."""

import pytest
from pytest_bdd import given, parsers, when


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def outcome():
    """Container for the latest orchestrator response."""
    return {"response": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a "{gateway_type}" gateway "{name}" charging {percent}% plus {fixed} for "{currencies}"'))
def configured_gateway(add_gateway, gateway_type, name, percent, fixed, currencies):
    add_gateway(
        name,
        gateway_type=gateway_type,
        percent=float(percent),
        fixed=float(fixed),
        currencies=[code.strip() for code in currencies.split(",")],
    )


@given(parsers.cfparse('customer "{customer_id}" paid {amount} "{currency}" by "{method}"'))
def completed_payment(orchestrator, payment_request, outcome, customer_id, amount, currency, method):
    response = orchestrator.process_payment(
        payment_request(customer_id=customer_id, amount=float(amount), currency=currency, payment_method=method)
    )
    assert response.success is True
    outcome["payment_id"] = response.payment_id


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('customer "{customer_id}" pays {amount} "{currency}" by "{method}"'))
def customer_pays(orchestrator, payment_request, outcome, customer_id, amount, currency, method):
    outcome["response"] = orchestrator.process_payment(
        payment_request(customer_id=customer_id, amount=float(amount), currency=currency, payment_method=method)
    )
