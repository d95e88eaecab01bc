"""ActivityLogger writes the audit trail and never breaks its caller."""

from billing.activity.activity_log import ActivityLog
from billing.activity.logger import ActivityLogger
from protean import current_domain


def _entries():
    return current_domain.repository_for(ActivityLog)._dao.query.all().items


def test_admin_activity_prefixed():
    ActivityLogger().log_admin_activity("updated gateway fees", "admin-7", details={"gateway": "stripe"})

    entry = _entries()[0]
    assert entry.message == "Admin updated gateway fees"
    assert entry.source == "Admin Panel"
    assert entry.category == "admin"
    assert entry.user_id == "admin-7"
    assert entry.details_data == {"gateway": "stripe"}


def test_customer_activity():
    ActivityLogger().log_customer_activity("viewed invoice", "1001")

    entry = _entries()[0]
    assert entry.message == "Customer viewed invoice"
    assert entry.category == "user"
    assert entry.customer_id == "1001"


def test_system_activity_level():
    ActivityLogger().log_system_activity("Gateway registry reloaded", level="WARNING")

    entry = _entries()[0]
    assert entry.source == "System"
    assert entry.level == "WARNING"


def test_mpesa_activity_carries_transaction_id():
    ActivityLogger().log_mpesa_activity("STK callback received", "ws_CO_1", details={"result_code": 0})

    entry = _entries()[0]
    assert entry.category == "mpesa"
    assert entry.details_data == {"transaction_id": "ws_CO_1", "result_code": 0}


def test_storage_failure_is_swallowed(monkeypatch):
    def _broken(*args, **kwargs):
        raise RuntimeError("database is down")

    monkeypatch.setattr(ActivityLog, "record", classmethod(_broken))

    assert ActivityLogger().log_system_activity("Nightly reconciliation") is None
    assert _entries() == []
