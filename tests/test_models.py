"""
Unit tests for model timestamps
"""

from datetime import timezone
import uuid

from salon_os.models import Customer, DayEndReport, Expense, Tenant, User
from salon_os.models.base import utcnow


def test_utcnow_is_timezone_aware():
    assert utcnow().tzinfo is timezone.utc


def test_default_timestamps_are_timezone_aware():
    tenant = Tenant(name="Glamour Studio", subdomain="glamour")
    user = User(tenant_id=uuid.uuid4(), email="owner@glamour-salon.com", name="Asha", password_hash="x")
    assert tenant.created_at.tzinfo is not None
    assert user.created_at.tzinfo is not None


def test_timestamp_columns_store_timezone():
    """Every *_at column is timestamptz so aware values round-trip on PostgreSQL"""
    for model in (Tenant, User, Customer, DayEndReport, Expense):
        columns = [c for c in model.__table__.columns if c.name.endswith("_at")]
        assert columns, model.__name__
        for column in columns:
            assert column.type.timezone is True, f"{model.__name__}.{column.name}"
