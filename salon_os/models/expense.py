"""
Expense model - dated financial record guarded by day-end closing
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, Numeric
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
import uuid

from salon_os.models.base import AwareDateTime, utcnow


class Expense(SQLModel, table=True):
    """Petty-cash or operating expense"""

    __tablename__ = "expenses"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", index=True, description="Tenant ID for multi-tenant isolation")
    expense_date: date = Field(index=True)
    category: str = Field(max_length=100)
    description: Optional[str] = None
    amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    payment_method: str = Field(default="cash", max_length=20)

    created_by: uuid.UUID = Field(foreign_key="users.id")
    created_at: datetime = Field(default_factory=utcnow, sa_type=AwareDateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=AwareDateTime)
