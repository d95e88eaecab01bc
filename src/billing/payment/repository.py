from billing.domain import billing
from billing.payment.payment import Payment


@billing.repository(part_of=Payment)
class PaymentRepository:
    # References are not deduplicated, so this returns the first match
    def find_by_external_transaction_id(self, external_transaction_id: str) -> Payment | None:
        payments = self._dao.query.filter(external_transaction_id=external_transaction_id).all().items
        return payments[0] if payments else None
