from billing.activity.activity_log import ActivityLog
from billing.domain import billing


@billing.repository(part_of=ActivityLog)
class ActivityLogRepository:
    def find_by_category(self, category: str) -> list[ActivityLog]:
        return self._dao.query.filter(category=category).order_by("-created_at").limit(None).all().items
