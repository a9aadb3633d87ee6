"""
Seating request schemas
"""

from pydantic import BaseModel

class AssignTableRequest(BaseModel):
    """Seat a guest at the first free seat of a table"""
    guest_id: str
    table_id: str

class AssignSeatRequest(BaseModel):
    """Seat a guest at a specific seat"""
    guest_id: str
    table_id: str
    seat_index: int

class UnassignRequest(BaseModel):
    guest_id: str
