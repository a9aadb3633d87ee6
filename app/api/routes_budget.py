"""
Budget and expense routes
"""

from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.budget import BudgetUpdate, ExpenseCreate, ExpenseUpdate
from app.schemas.task import CategoryRename
from app.services.budget_service import BudgetService
from app.utils.security import verify_admin_token
from app.utils.responses import success_response

router = APIRouter()

@router.get("")
def budget_summary(
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Planned total, spent and remaining amounts, per-category totals"""
    return success_response(message="Budget summary retrieved", data=BudgetService.get_summary(db))

@router.put("")
def set_total_budget(
    budget: BudgetUpdate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    total = BudgetService.set_total_budget(db, budget.total_budget)
    return success_response(message="Total budget updated", data={"total_budget": total})

@router.get("/expenses")
def list_expenses(
    category: Optional[str] = Query(None),
    payment_status: Optional[Literal["none", "paid"]] = Query(None),
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    expenses = BudgetService.list_expenses(db, category=category, payment_status=payment_status)
    return success_response(message="Expenses retrieved successfully", data={"expenses": expenses})

@router.post("/expenses")
def create_expense(
    expense_data: ExpenseCreate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    expense = BudgetService.create_expense(db, expense_data)
    return success_response(message="Expense created successfully", data=expense, status_code=201)

@router.post("/categories/rename")
def rename_category(
    rename: CategoryRename,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    result = BudgetService.rename_category(db, rename.old_name, rename.new_name)
    return success_response(message="Category renamed", data=result)

@router.get("/expenses/{expense_id}")
def get_expense(
    expense_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    return success_response(message="Expense retrieved", data=BudgetService.get_expense(db, expense_id))

@router.patch("/expenses/{expense_id}")
def update_expense(
    expense_id: str,
    expense_update: ExpenseUpdate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    expense = BudgetService.update_expense(db, expense_id, expense_update)
    return success_response(message="Expense updated successfully", data=expense)

@router.post("/expenses/{expense_id}/toggle-payment")
def toggle_payment(
    expense_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Switch an expense between unpaid and paid"""
    expense = BudgetService.toggle_payment(db, expense_id)
    return success_response(message="Payment status changed", data=expense)

@router.post("/expenses/{expense_id}/mark-paid")
def mark_paid(
    expense_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    expense = BudgetService.mark_paid(db, expense_id)
    return success_response(message="Expense marked as paid", data=expense)

@router.delete("/expenses/{expense_id}")
def delete_expense(
    expense_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    BudgetService.delete_expense(db, expense_id)
    return success_response(message="Expense deleted successfully", data={"deleted_expense_id": expense_id})
