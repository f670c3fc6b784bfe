"""
Pydantic schemas for platform tenant provisioning
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
import uuid

from salon_os.core.tenant_resolver import is_valid_subdomain
from salon_os.schemas.user import UserCreate, UserResponse


class TenantCreate(BaseModel):
    """New salon with its first administrator"""
    name: str = Field(..., min_length=1, max_length=255)
    subdomain: str = Field(..., min_length=1, max_length=63)
    admin: UserCreate

    @field_validator("subdomain")
    @classmethod
    def subdomain_is_host_label(cls, value: str) -> str:
        value = value.strip().lower()
        if not is_valid_subdomain(value) or value == "www":
            raise ValueError("subdomain must be a lowercase DNS label (letters, digits, hyphens)")
        return value


class TenantUpdate(BaseModel):
    """Mutable tenant attributes; the subdomain is not one of them"""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    is_active: Optional[bool] = None


class TenantRead(BaseModel):
    id: uuid.UUID
    name: str
    subdomain: str
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime]


class TenantCreated(BaseModel):
    tenant: TenantRead
    admin: UserResponse
