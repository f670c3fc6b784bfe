"""
Day-end closing report

A completed report freezes the tenant's ledger for its closing date and every
date before it.
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, JSON, Numeric, UniqueConstraint
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Optional
import uuid

from salon_os.models.base import AwareDateTime, utcnow


class DayEndReport(SQLModel, table=True):
    """Cash-up for one tenant and one calendar date"""

    __tablename__ = "day_end_reports"
    __table_args__ = (
        UniqueConstraint("tenant_id", "closing_date", name="uq_day_end_tenant_date"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", index=True, description="Tenant ID for multi-tenant isolation")
    closing_date: date = Field(index=True)

    opening_balance: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False),
    )
    is_opening_balance_manual: bool = Field(default=False)
    petty_cash_total: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False),
    )

    # Payment-mode totals: {"cash": .., "card": .., "upi": .., "other": .., "total": ..}
    expected_totals: Dict[str, float] = Field(default_factory=dict, sa_column=Column(JSON))
    actual_totals: Dict[str, float] = Field(default_factory=dict, sa_column=Column(JSON))
    discrepancies: Dict[str, float] = Field(default_factory=dict, sa_column=Column(JSON))
    cash_denominations: Dict[str, int] = Field(default_factory=dict, sa_column=Column(JSON))
    notes: Optional[str] = None

    closed_by: uuid.UUID = Field(foreign_key="users.id")
    is_completed: bool = Field(default=False, index=True, description="Drafts do not lock the ledger")
    completed_at: Optional[datetime] = Field(default=None, sa_type=AwareDateTime)

    created_at: datetime = Field(default_factory=utcnow, sa_type=AwareDateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=AwareDateTime)
