"""
Table-related Pydantic schemas
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from app.core.config import settings

class TableCreate(BaseModel):
    """Schema for creating a table"""
    name: str = Field(min_length=1, max_length=100)
    seats: int = Field(ge=1, le=settings.MAX_TABLE_SEATS)
    notes: str = Field(default="", max_length=500)
    is_head_table: bool = False

    class Config:
        str_strip_whitespace = True

class TableUpdate(BaseModel):
    """Schema for updating a table"""
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    seats: Optional[int] = Field(default=None, ge=1, le=settings.MAX_TABLE_SEATS)
    notes: Optional[str] = Field(default=None, max_length=500)

    class Config:
        str_strip_whitespace = True

class Occupancy(BaseModel):
    """Derived seat usage of a single table"""
    assigned_count: int
    free_seats: int
    is_full: bool

class TableResponse(BaseModel):
    """Table response schema"""
    id: str
    name: str
    seats: int
    notes: Optional[str] = ""
    table_type: str
    is_head_table: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
