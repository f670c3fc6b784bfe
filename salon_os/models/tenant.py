"""
Tenant model - Multi-tenancy foundation
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
import uuid

from salon_os.models.base import AwareDateTime, utcnow


class Tenant(SQLModel, table=True):
    """A salon. Its subdomain is issued once and never changes."""

    __tablename__ = "tenants"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True, max_length=255)
    subdomain: str = Field(
        unique=True,
        index=True,
        max_length=63,
        description="Host label used for routing and embedded in session tokens",
    )

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=AwareDateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=AwareDateTime)
    is_active: bool = Field(default=True, index=True)
