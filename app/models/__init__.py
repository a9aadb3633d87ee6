"""
Database models package
"""

from .table import Table
from .guest import Guest
from .audit import AuditEvent
from .task import Task
from .budget import Expense, BudgetSettings

__all__ = ["Table", "Guest", "AuditEvent", "Task", "Expense", "BudgetSettings"]
