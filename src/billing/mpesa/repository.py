from datetime import datetime

from billing.domain import billing
from billing.mpesa.transaction import MpesaTransaction


@billing.repository(part_of=MpesaTransaction)
class MpesaTransactionRepository:
    def find_by_checkout_request_id(self, checkout_request_id: str) -> MpesaTransaction:
        """Raises ObjectNotFoundError for an unknown checkout request."""
        return self._dao.find_by(checkout_request_id=checkout_request_id)

    def find_between(self, start_date: datetime, end_date: datetime) -> list[MpesaTransaction]:
        """Every transaction created in the window, with no page cap."""
        return (
            self._dao.query.filter(created_at__gte=start_date, created_at__lte=end_date)
            .order_by("created_at")
            .limit(None)
            .all()
            .items
        )
