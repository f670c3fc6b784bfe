"""
Pydantic schemas for expenses
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
import uuid


class ExpenseCreate(BaseModel):
    expense_date: date
    category: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    payment_method: str = Field(default="cash", max_length=20)


class ExpenseUpdate(BaseModel):
    expense_date: Optional[date] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    payment_method: Optional[str] = Field(default=None, max_length=20)


class ExpenseRead(BaseModel):
    id: uuid.UUID
    expense_date: date
    category: str
    description: Optional[str]
    amount: Decimal
    payment_method: str
    created_by: uuid.UUID
    created_at: datetime
    updated_at: Optional[datetime]
