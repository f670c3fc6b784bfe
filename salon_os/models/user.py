"""
User model with roles and tenant scoping
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint
from datetime import datetime
from typing import Optional
import uuid
from enum import Enum

from salon_os.models.base import AwareDateTime, utcnow


class UserRole(str, Enum):
    """User roles for RBAC"""
    ADMIN = "admin"
    MANAGER = "manager"
    RECEPTIONIST = "receptionist"
    STAFF = "staff"


class User(SQLModel, table=True):
    """User model with tenant isolation"""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("tenant_id", "email", name="uq_user_tenant_email"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", index=True, description="Tenant ID for multi-tenant isolation")

    # Authentication
    email: str = Field(index=True, nullable=False, max_length=255)
    password_hash: str = Field(nullable=False)

    # Profile
    name: str = Field(nullable=False, max_length=200)

    # RBAC
    role: UserRole = Field(default=UserRole.STAFF, nullable=False)

    # Status
    is_active: bool = Field(default=True, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=AwareDateTime)
    last_login_at: Optional[datetime] = Field(default=None, sa_type=AwareDateTime)
