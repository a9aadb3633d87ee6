"""
Budget and expense schemas
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator

from app.core.config import settings

PaymentStatus = Literal["none", "paid"]

class ExpenseCreate(BaseModel):
    """Schema for creating an expense"""
    title: str = Field(min_length=1, max_length=140)
    category: str = Field(min_length=1, max_length=50)
    amount: float = Field(default=0.0, ge=0, le=settings.MAX_EXPENSE_AMOUNT)
    is_deposit: bool = False
    payment_status: PaymentStatus = "none"
    note: Optional[str] = Field(default=None, max_length=500)

    class Config:
        str_strip_whitespace = True

    @field_validator("note")
    @classmethod
    def blank_to_none(cls, value):
        return value or None

class ExpenseUpdate(BaseModel):
    """Schema for updating an expense"""
    title: Optional[str] = Field(default=None, min_length=1, max_length=140)
    category: Optional[str] = Field(default=None, min_length=1, max_length=50)
    amount: Optional[float] = Field(default=None, ge=0, le=settings.MAX_EXPENSE_AMOUNT)
    is_deposit: Optional[bool] = None
    payment_status: Optional[PaymentStatus] = None
    note: Optional[str] = Field(default=None, max_length=500)

    class Config:
        str_strip_whitespace = True

class ExpenseResponse(BaseModel):
    """Expense response schema"""
    id: str
    title: str
    category: str
    amount: float
    is_deposit: bool = False
    payment_status: str = "none"
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BudgetUpdate(BaseModel):
    """Planned total for the wedding"""
    total_budget: float = Field(ge=0, le=settings.MAX_EXPENSE_AMOUNT)
