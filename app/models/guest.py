"""
Guest model
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint

from app.core.db import Base

class Guest(Base):
    __tablename__ = "guests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    first_name = Column(String(60), nullable=False)
    last_name = Column(String(60), default="")
    email = Column(String(254), nullable=True)
    phone = Column(String(20), nullable=True)
    guest_group = Column(String(50), default="family")
    rsvp_status = Column(String(20), nullable=False, default="pending")  # pending, confirmed, declined
    dietary = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    table_id = Column(String(36), ForeignKey("tables.id"), nullable=True, index=True)
    seat_index = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # One guest per (table, seat); NULL seat indices never collide
    __table_args__ = (
        UniqueConstraint("table_id", "seat_index", name="uq_guests_table_seat"),
    )
