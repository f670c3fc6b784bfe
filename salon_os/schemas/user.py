"""
Pydantic schemas for users
"""

from pydantic import BaseModel, Field, EmailStr
from typing import Optional
from datetime import datetime
import uuid

from salon_os.models.user import UserRole


class UserCreate(BaseModel):
    """Initial user for a tenant"""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    name: str = Field(..., min_length=1, max_length=200)
    role: UserRole = Field(default=UserRole.ADMIN)


class UserResponse(BaseModel):
    """User response model"""
    id: uuid.UUID
    email: str
    name: str
    role: UserRole
    tenant_id: uuid.UUID
    is_active: bool
    created_at: datetime
    last_login_at: Optional[datetime]
