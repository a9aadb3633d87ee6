"""
Table model
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime

from app.core.db import Base

HEAD_TABLE_TYPE = "main_couple"
REGULAR_TABLE_TYPE = "regular"

class Table(Base):
    __tablename__ = "tables"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    seats = Column(Integer, nullable=False)
    notes = Column(Text, default="")
    table_type = Column(String(20), nullable=False, default=REGULAR_TABLE_TYPE)  # main_couple, regular
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Occupants are never stored here; they are derived from guests.table_id

    @property
    def is_head_table(self) -> bool:
        return self.table_type == HEAD_TABLE_TYPE
