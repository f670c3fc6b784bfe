"""
Customer model with encrypted contact details

Name, phone number and email are stored as ciphertext. Phone search runs
against ``CustomerPhoneToken`` rows (one blind index per prefix of the
digits-only number) and exact duplicate detection against ``phone_hash``.
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Index, UniqueConstraint
from datetime import datetime
from typing import Optional
import uuid

from salon_os.models.base import AwareDateTime, utcnow


class Customer(SQLModel, table=True):
    """Salon customer"""

    __tablename__ = "customers"
    __table_args__ = (
        UniqueConstraint("tenant_id", "phone_hash", name="uq_customer_tenant_phone_hash"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", index=True, description="Tenant ID for multi-tenant isolation")

    # Encrypted fields (hex ciphertext)
    name: str = Field(nullable=False)
    phone_number: str = Field(nullable=False)
    email: Optional[str] = None

    # Search fields (never encrypted)
    phone_hash: str = Field(max_length=64, description="Blind index of the full digits-only phone number")
    searchable_name: str = Field(index=True, max_length=200, description="Lower-cased name for name search")
    last4_phone_number: str = Field(max_length=4)

    gender: Optional[str] = Field(default=None, max_length=20)
    is_active: bool = Field(default=True, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=AwareDateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=AwareDateTime)


class CustomerPhoneToken(SQLModel, table=True):
    """One blind-index token for one prefix of a customer's phone number"""

    __tablename__ = "customer_phone_tokens"
    __table_args__ = (
        Index("idx_phone_token_tenant_token", "tenant_id", "token"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id")
    customer_id: uuid.UUID = Field(foreign_key="customers.id", index=True)
    token: str = Field(max_length=64)
