"""
Pydantic schemas for day-end closing
"""

from pydantic import BaseModel, Field
from typing import Dict, Optional
from datetime import date, datetime
from decimal import Decimal
import uuid


class PaymentTotals(BaseModel):
    cash: float = 0
    card: float = 0
    upi: float = 0
    other: float = 0

    @property
    def total(self) -> float:
        return self.cash + self.card + self.upi + self.other

    def as_record(self) -> Dict[str, float]:
        return {**self.model_dump(), "total": self.total}


class DayEndReportCreate(BaseModel):
    closing_date: date
    opening_balance: Decimal = Field(default=Decimal("0.00"), ge=0)
    is_opening_balance_manual: bool = False
    petty_cash_total: Decimal = Field(default=Decimal("0.00"), ge=0)
    expected_totals: PaymentTotals = Field(default_factory=PaymentTotals)
    actual_totals: PaymentTotals = Field(default_factory=PaymentTotals)
    cash_denominations: Dict[str, int] = Field(default_factory=dict)
    notes: Optional[str] = Field(default=None, max_length=2000)
    is_completed: bool = Field(default=True, description="False saves a draft that does not lock the ledger")


class DayEndReportRead(BaseModel):
    id: uuid.UUID
    closing_date: date
    opening_balance: Decimal
    is_opening_balance_manual: bool
    petty_cash_total: Decimal
    expected_totals: Dict[str, float]
    actual_totals: Dict[str, float]
    discrepancies: Dict[str, float]
    cash_denominations: Dict[str, int]
    notes: Optional[str]
    closed_by: uuid.UUID
    is_completed: bool
    completed_at: Optional[datetime]
    created_at: datetime


class ClosingStatus(BaseModel):
    day: date
    locked: bool
    closed_through: Optional[date]
