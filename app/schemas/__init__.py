"""
Pydantic schemas package
"""

from .common import *
from .table import *
from .guest import *
from .seating import *
from .task import *
from .budget import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "TableCreate",
    "TableUpdate",
    "TableResponse",
    "Occupancy",
    "GuestCreate",
    "GuestUpdate",
    "GuestResponse",
    "AssignTableRequest",
    "AssignSeatRequest",
    "UnassignRequest",
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    "CategoryRename",
    "ExpenseCreate",
    "ExpenseUpdate",
    "ExpenseResponse",
    "BudgetUpdate",
]
