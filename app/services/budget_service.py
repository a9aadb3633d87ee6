"""
Budget and expense tracking service
"""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AmountRequiredError, NotFoundError
from app.models.budget import PAYMENT_NONE, PAYMENT_PAID
from app.schemas.budget import ExpenseCreate, ExpenseUpdate
from app.services.repositories import BudgetRepo, ExpenseRepo
from app.utils.retry import with_retry

logger = logging.getLogger(__name__)


def is_paid(expense: Dict) -> bool:
    return expense["payment_status"] == PAYMENT_PAID


def budget_totals(total_budget: float, expenses: Iterable[Dict]) -> Dict:
    """Spent and remaining amounts against the planned total.

    Only paid expenses count as spent; a paid deposit is also reported in
    ``deposit_amount``. Percentages are 0 when no budget is set.
    """
    expenses = list(expenses)
    spent = sum(e["amount"] for e in expenses if is_paid(e))
    deposits = sum(e["amount"] for e in expenses if e["is_deposit"] and is_paid(e))
    unpaid = sum(e["amount"] for e in expenses if not is_paid(e))
    remaining = total_budget - spent

    return {
        "total_budget": total_budget,
        "spent": round(spent, 2),
        "remaining": round(remaining, 2),
        "spent_pct": round(spent / total_budget * 100, 1) if total_budget > 0 else 0.0,
        "remaining_pct": round(remaining / total_budget * 100, 1) if total_budget > 0 else 0.0,
        "paid_amount": round(spent, 2),
        "deposit_amount": round(deposits, 2),
        "unpaid_amount": round(unpaid, 2),
    }


def _check_payable(expense: Dict, expense_id: Optional[str] = None) -> None:
    if is_paid(expense) and expense["amount"] <= 0:
        raise AmountRequiredError(expense_id)


class BudgetService:
    """Service for the wedding budget: planned total and expenses"""

    @staticmethod
    def get_total_budget(db: Session) -> float:
        total = with_retry(lambda: BudgetRepo.get_total(db))
        return settings.DEFAULT_TOTAL_BUDGET if total is None else total

    @staticmethod
    def set_total_budget(db: Session, amount: float) -> float:
        """Store the planned total; an unchanged amount writes nothing"""
        current = BudgetService.get_total_budget(db)
        if current == amount:
            return current

        with_retry(lambda: BudgetRepo.set_total(db, amount))
        logger.info(f"Total budget updated: {current} -> {amount}")
        return amount

    @staticmethod
    def get_expense(db: Session, expense_id: str) -> Dict:
        expense = with_retry(lambda: ExpenseRepo.get(db, expense_id))
        if expense is None:
            raise NotFoundError("Expense", expense_id)
        return expense

    @staticmethod
    def list_expenses(
        db: Session,
        category: Optional[str] = None,
        payment_status: Optional[str] = None,
    ) -> List[Dict]:
        return with_retry(lambda: ExpenseRepo.list_filtered(db, category, payment_status))

    @staticmethod
    def create_expense(db: Session, expense_data: ExpenseCreate) -> Dict:
        data = expense_data.model_dump()
        _check_payable(data)
        expense = with_retry(lambda: ExpenseRepo.create(db, data))
        logger.info(f"Expense {expense['id']} created ({expense['category']}, {expense['amount']})")
        return expense

    @staticmethod
    def update_expense(db: Session, expense_id: str, expense_update: ExpenseUpdate) -> Dict:
        """Apply a partial update; the result must still satisfy the paid-amount rule"""
        expense = BudgetService.get_expense(db, expense_id)
        changes = expense_update.model_dump(exclude_unset=True, exclude_none=True)
        if "note" in expense_update.model_fields_set and expense_update.note is None:
            changes["note"] = None
        if not changes:
            return expense

        _check_payable({**expense, **changes}, expense_id)
        expense = with_retry(lambda: ExpenseRepo.update(db, expense_id, changes))
        logger.info(f"Expense {expense_id} updated: {sorted(changes)}")
        return expense

    @staticmethod
    def toggle_payment(db: Session, expense_id: str) -> Dict:
        """Flip an expense between unpaid and paid"""
        expense = BudgetService.get_expense(db, expense_id)
        status = PAYMENT_NONE if is_paid(expense) else PAYMENT_PAID
        _check_payable({**expense, "payment_status": status}, expense_id)
        return with_retry(lambda: ExpenseRepo.update(db, expense_id, {"payment_status": status}))

    @staticmethod
    def mark_paid(db: Session, expense_id: str) -> Dict:
        expense = BudgetService.get_expense(db, expense_id)
        if is_paid(expense):
            return expense
        _check_payable({**expense, "payment_status": PAYMENT_PAID}, expense_id)
        return with_retry(lambda: ExpenseRepo.update(db, expense_id, {"payment_status": PAYMENT_PAID}))

    @staticmethod
    def delete_expense(db: Session, expense_id: str) -> None:
        BudgetService.get_expense(db, expense_id)
        with_retry(lambda: ExpenseRepo.delete(db, expense_id))
        logger.info(f"Expense {expense_id} deleted")

    @staticmethod
    def rename_category(db: Session, old_name: str, new_name: str) -> Dict:
        count = 0
        if old_name != new_name:
            count = with_retry(lambda: ExpenseRepo.rename_category(db, old_name, new_name))
            logger.info(f"Expense category {old_name!r} renamed to {new_name!r} on {count} expenses")
        return {"old_name": old_name, "new_name": new_name, "updated_count": count}

    @staticmethod
    def get_summary(db: Session) -> Dict:
        """Budget totals plus per-category amounts"""
        expenses = BudgetService.list_expenses(db)
        summary = budget_totals(BudgetService.get_total_budget(db), expenses)

        by_category: Dict[str, Dict] = {}
        for expense in expenses:
            entry = by_category.setdefault(
                expense["category"],
                {"category": expense["category"], "total": 0.0, "paid": 0.0, "count": 0}
            )
            entry["total"] = round(entry["total"] + expense["amount"], 2)
            entry["count"] += 1
            if is_paid(expense):
                entry["paid"] = round(entry["paid"] + expense["amount"], 2)

        summary["expense_count"] = len(expenses)
        summary["categories"] = [by_category[name] for name in sorted(by_category)]
        return summary
