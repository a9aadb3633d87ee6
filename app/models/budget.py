"""
Budget models: expenses and the planned total
"""

import uuid
from datetime import datetime
from sqlalchemy import Boolean, Column, Float, String, Text, DateTime

from app.core.db import Base

PAYMENT_NONE = "none"
PAYMENT_PAID = "paid"

# Single row holding the planned total
BUDGET_SETTINGS_ID = "budget"

class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(140), nullable=False)
    category = Column(String(50), nullable=False, index=True)
    amount = Column(Float, nullable=False, default=0.0)
    is_deposit = Column(Boolean, nullable=False, default=False)
    payment_status = Column(String(10), nullable=False, default=PAYMENT_NONE)  # none, paid
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

class BudgetSettings(Base):
    __tablename__ = "budget_settings"

    id = Column(String(36), primary_key=True, default=BUDGET_SETTINGS_ID)
    total_budget = Column(Float, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
