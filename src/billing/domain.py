"""Billing bounded context: multi-gateway payment processing for the ISP back office.

Routes customer payments to the cheapest configured provider (M-Pesa, hosted
card checkouts, bank transfer), records payments, refunds and the M-Pesa
transaction log, and keeps the administrative activity trail.
"""

import structlog
from protean.domain import Domain

from billing.utils.logging import configure_logging

configure_logging()

billing = Domain(name="billing")

logger = structlog.get_logger(__name__)
