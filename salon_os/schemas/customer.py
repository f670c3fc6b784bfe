"""
Pydantic schemas for customers
"""

from pydantic import BaseModel, Field, EmailStr, field_validator
from typing import List, Optional
from datetime import datetime
import uuid

from salon_os.core.blind_index import canonicalize_digits


def _phone_has_digits(value: str) -> str:
    if len(canonicalize_digits(value)) < 4:
        raise ValueError("phone number must contain at least 4 digits")
    return value


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone_number: str = Field(..., max_length=32)
    email: Optional[EmailStr] = None
    gender: Optional[str] = Field(default=None, max_length=20)

    @field_validator("phone_number")
    @classmethod
    def check_phone(cls, value: str) -> str:
        return _phone_has_digits(value)


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    phone_number: Optional[str] = Field(default=None, max_length=32)
    email: Optional[EmailStr] = None
    gender: Optional[str] = Field(default=None, max_length=20)
    is_active: Optional[bool] = None

    @field_validator("phone_number")
    @classmethod
    def check_phone(cls, value: Optional[str]) -> Optional[str]:
        return _phone_has_digits(value) if value is not None else value


class CustomerRead(BaseModel):
    """Decrypted view; undecryptable fields carry the "Decryption Error" placeholder"""
    id: uuid.UUID
    name: str
    phone_number: str
    email: Optional[str]
    last4_phone_number: str
    gender: Optional[str]
    is_active: bool
    created_at: datetime


class CustomerPage(BaseModel):
    items: List[CustomerRead]
    total: int
    page: int
    limit: int
