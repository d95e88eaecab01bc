"""ActivityLog aggregate: the back-office audit trail shown to administrators."""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String, Text

from billing.domain import billing


class ActivityLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"


class ActivityCategory(Enum):
    ADMIN = "admin"
    USER = "user"
    SYSTEM = "system"
    MPESA = "mpesa"


@billing.aggregate(schema_name="activity_logs")
class ActivityLog:
    level = String(max_length=10, choices=ActivityLevel, default=ActivityLevel.INFO.value)
    source = String(required=True, max_length=100)
    category = String(required=True, max_length=20, choices=ActivityCategory)
    message = String(required=True, max_length=1000)
    user_id = String(max_length=100)
    customer_id = Identifier()
    ip_address = String(max_length=45)
    details = Text()  # JSON object
    created_at = DateTime()

    @classmethod
    def record(
        cls,
        source: str,
        category: str,
        message: str,
        level: str = ActivityLevel.INFO.value,
        user_id: str | None = None,
        customer_id: str | None = None,
        ip_address: str | None = None,
        details: dict | None = None,
    ):
        return cls(
            level=level,
            source=source,
            category=category,
            message=message,
            user_id=user_id,
            customer_id=customer_id,
            ip_address=ip_address,
            details=json.dumps(details, default=str) if details is not None else None,
            created_at=datetime.now(UTC),
        )

    @property
    def details_data(self) -> dict:
        return json.loads(self.details) if self.details else {}
