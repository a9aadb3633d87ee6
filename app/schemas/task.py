"""
Task checklist schemas
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

class TaskCreate(BaseModel):
    """Schema for creating a task"""
    title: str = Field(min_length=1, max_length=140)
    description: Optional[str] = Field(default=None, max_length=500)
    category: str = Field(min_length=1, max_length=50)
    is_priority: bool = False

    class Config:
        str_strip_whitespace = True

    @field_validator("description")
    @classmethod
    def blank_to_none(cls, value):
        return value or None

class TaskUpdate(BaseModel):
    """Schema for updating a task"""
    title: Optional[str] = Field(default=None, min_length=1, max_length=140)
    description: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = Field(default=None, min_length=1, max_length=50)
    is_priority: Optional[bool] = None
    completed: Optional[bool] = None

    class Config:
        str_strip_whitespace = True

class TaskResponse(BaseModel):
    """Task response schema"""
    id: str
    title: str
    description: Optional[str] = None
    category: str
    is_priority: bool = False
    completed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class CategoryRename(BaseModel):
    """Rename a task or expense category everywhere it is used"""
    old_name: str = Field(min_length=1, max_length=50)
    new_name: str = Field(min_length=1, max_length=50)

    class Config:
        str_strip_whitespace = True
