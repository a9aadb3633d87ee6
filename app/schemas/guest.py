"""
Guest-related Pydantic schemas
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from app.utils.names import split_full_name

RSVPStatus = Literal["pending", "confirmed", "declined"]

NAME_MAX_LENGTH = 60

class GuestCreate(BaseModel):
    """Schema for creating a guest.

    Either ``first_name`` or ``full_name`` is required; a full name is split
    on whitespace into first and last name.
    """
    first_name: Optional[str] = Field(default=None, max_length=NAME_MAX_LENGTH)
    last_name: Optional[str] = Field(default="", max_length=NAME_MAX_LENGTH)
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    guest_group: str = Field(default="family", min_length=1, max_length=50)
    rsvp_status: RSVPStatus = "pending"
    dietary: Optional[str] = Field(default=None, max_length=1000)
    notes: Optional[str] = Field(default=None, max_length=1000)

    class Config:
        str_strip_whitespace = True

    @field_validator("email", "phone", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def resolve_names(self):
        if not self.first_name and self.full_name:
            self.first_name, self.last_name = split_full_name(self.full_name)
        if not self.first_name:
            raise ValueError("first_name is required")
        # names split from full_name skip the field limits above
        if len(self.first_name) > NAME_MAX_LENGTH or len(self.last_name or "") > NAME_MAX_LENGTH:
            raise ValueError(f"names must be at most {NAME_MAX_LENGTH} characters")
        return self

class GuestUpdate(BaseModel):
    """Schema for updating a guest; seating fields are not updatable here"""
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=60)
    last_name: Optional[str] = Field(default=None, max_length=60)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    guest_group: Optional[str] = Field(default=None, min_length=1, max_length=50)
    rsvp_status: Optional[RSVPStatus] = None
    dietary: Optional[str] = Field(default=None, max_length=1000)
    notes: Optional[str] = Field(default=None, max_length=1000)

    class Config:
        str_strip_whitespace = True

class GuestResponse(BaseModel):
    """Guest response schema"""
    id: str
    first_name: str
    last_name: Optional[str] = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    guest_group: Optional[str] = None
    rsvp_status: str
    dietary: Optional[str] = None
    notes: Optional[str] = None
    table_id: Optional[str] = None
    seat_index: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
