"""Fire-and-forget writer for the activity trail.

A failure to store an entry is reported through structlog and never
propagates: the payment flow must not break because auditing did.
"""

from protean.utils.globals import current_domain

from billing.activity.activity_log import ActivityCategory, ActivityLevel, ActivityLog
from billing.domain import logger


class ActivityLogger:
    def log(
        self,
        source: str,
        category: str,
        message: str,
        level: str = ActivityLevel.INFO.value,
        user_id: str | None = None,
        customer_id: str | None = None,
        ip_address: str | None = None,
        details: dict | None = None,
    ) -> ActivityLog | None:
        try:
            entry = ActivityLog.record(
                source=source,
                category=category,
                message=message,
                level=level,
                user_id=user_id,
                customer_id=customer_id,
                ip_address=ip_address,
                details=details,
            )
            current_domain.repository_for(ActivityLog).add(entry)
        except Exception as exc:
            logger.error(
                "activity_log_write_failed",
                activity_message=message,
                category=category,
                error=str(exc),
            )
            return None
        return entry

    def log_admin_activity(
        self,
        action: str,
        user_id: str,
        details: dict | None = None,
        level: str = ActivityLevel.INFO.value,
        ip_address: str | None = None,
    ) -> ActivityLog | None:
        return self.log(
            source="Admin Panel",
            category=ActivityCategory.ADMIN.value,
            message=f"Admin {action}",
            level=level,
            user_id=user_id,
            ip_address=ip_address,
            details=details,
        )

    def log_customer_activity(
        self,
        action: str,
        customer_id: str,
        details: dict | None = None,
        ip_address: str | None = None,
    ) -> ActivityLog | None:
        return self.log(
            source="Customer Portal",
            category=ActivityCategory.USER.value,
            message=f"Customer {action}",
            customer_id=customer_id,
            ip_address=ip_address,
            details=details,
        )

    def log_system_activity(
        self,
        action: str,
        level: str = ActivityLevel.INFO.value,
        details: dict | None = None,
    ) -> ActivityLog | None:
        return self.log(
            source="System",
            category=ActivityCategory.SYSTEM.value,
            message=action,
            level=level,
            details=details,
        )

    def log_mpesa_activity(
        self,
        action: str,
        transaction_id: str | None = None,
        details: dict | None = None,
        level: str = ActivityLevel.INFO.value,
    ) -> ActivityLog | None:
        return self.log(
            source="M-Pesa API",
            category=ActivityCategory.MPESA.value,
            message=action,
            level=level,
            details={"transaction_id": transaction_id, **(details or {})},
        )
